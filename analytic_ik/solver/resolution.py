"""
基于解析 IK 函数的求解器（离散化多解求解）

流程：
1. 目标从世界系换算到机械臂基座系（并去除抓取坐标系）
2. 未显式给出自由参数时，按字典序遍历自由参数网格
3. 每个网格单元调用一次解析函数，得到 0 个或多个原始解
4. 原始解按关节拓扑归一化并做限位检查，再经过有效性谓词过滤（被拒绝的解静默丢弃）
5. 单解查询按到 seed 的加权关节距离取最小值（并列时网格顺序靠前者胜出）；
   全解查询按关节容差去重，保留最先遇到的代表
"""
import logging
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..model import Manipulator
from ..utils import invert_transform, rotation_matrix_to_quaternion
from .analytic import AnalyticIkFunction
from .discretizer import (
    FreeParameterDiscretizer,
    check_free_parameters,
    free_values_for,
    value_to_fraction
)
from .ik_solver import IkSolverBase, SolverState, ValidityCheck, ValidityPredicate
from .parameterization import IkParameterizationType, Parameterization

logger = logging.getLogger(__name__)


# 指向类目标的方向取决于末端姿态，无法扣除带旋转的抓取坐标系
_POINTING_TYPES = (
    IkParameterizationType.DIRECTION2D,
    IkParameterizationType.RAY4D,
)


@dataclass(frozen=True)
class IkCandidate:
    """一个通过过滤的候选解，index 为产生它的网格单元在遍历顺序中的序号"""
    index: int
    free_parameters: Tuple[float, ...]
    values: np.ndarray


class AnalyticIkSolver(IkSolverBase):
    """
    :param ik_function: 解析 IK 函数及其能力描述
    :param step: 自由参数离散化步长 (0, 1]，越小越完整、越慢（网格大小 ~ step^-k）
    :param validity: 默认有效性谓词（check_validity=True 时使用），通常为碰撞检测
    :param solution_tolerance: 全解查询中判定两个解相同的关节容差
    :param max_workers: >1 时网格单元在线程池中并行求解；None 为顺序求解
    """

    def __init__(self, ik_function: AnalyticIkFunction, step: float,
                 validity: Optional[ValidityPredicate] = None,
                 solution_tolerance: float = 1e-6,
                 max_workers: Optional[int] = None):
        if solution_tolerance < 0:
            raise ValueError(f"solution_tolerance must be non-negative, got {solution_tolerance}")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.ik_function = ik_function
        self.discretizer = FreeParameterDiscretizer(step)
        self.validity = validity
        self.solution_tolerance = float(solution_tolerance)
        self.max_workers = max_workers
        self.state = SolverState.UNBOUND
        self.binding_error: Optional[str] = None
        self._manipulator: Optional[Manipulator] = None

    # ---------- 绑定 ----------

    def init(self, manipulator: Manipulator) -> bool:
        if self.state != SolverState.UNBOUND:
            logger.error("IK solver '%s' is already %s; solvers cannot be re-bound",
                         self.ik_function.name, self.state.value)
            return False

        self._manipulator = manipulator
        error = self._check_compatibility(manipulator)
        if error is not None:
            self.state = SolverState.INVALID
            self.binding_error = error
            logger.error("IK solver '%s' cannot bind to %s: %s", self.ik_function.name, manipulator.name, error)
            return False

        self.state = SolverState.BOUND
        logger.info("IK solver '%s' bound to %s (%d joints, %d free, %d grid cells)",
                    self.ik_function.name, manipulator.name, manipulator.get_num_joints(),
                    self.get_num_free_parameters(),
                    self.discretizer.size(self.get_num_free_parameters()))
        return True

    def _check_compatibility(self, manipulator: Manipulator) -> Optional[str]:
        """返回不兼容的原因；兼容时返回 None"""
        if manipulator.get_num_joints() != self.ik_function.num_joints:
            return (f"joint count mismatch: manipulator has {manipulator.get_num_joints()}, "
                    f"analytic function expects {self.ik_function.num_joints}")

        expected = self.ik_function.kinematics_hash
        if expected and manipulator.get_kinematics_hash() != expected:
            return (f"kinematics hash mismatch: manipulator {manipulator.get_kinematics_hash()}, "
                    f"analytic function {expected}")

        for index in self.ik_function.free_indices:
            joint = manipulator.arm_joints[index]
            if joint.get_range() is None:
                return f"free joint '{joint.name}' has no bounded range"

        grasp = manipulator.grasp_transform
        if self.ik_function.ik_type == IkParameterizationType.TRANSLATION3D:
            # 纯旋转的抓取坐标系不改变末端点的位置
            if not np.allclose(grasp[:3, 3], 0.0):
                return "TRANSLATION3D targets require a grasp transform without translation"
        elif (self.ik_function.ik_type in _POINTING_TYPES
              and not np.allclose(grasp, np.identity(4))):
            return f"{self.ik_function.ik_type.name} targets require an identity grasp transform"
        return None

    def get_manipulator(self) -> Optional[Manipulator]:
        return self._manipulator

    def get_num_free_parameters(self) -> int:
        return self.ik_function.get_num_free_parameters()

    def get_free_parameters(self) -> Optional[np.ndarray]:
        if self.state != SolverState.BOUND:
            return None
        joints = self._manipulator.arm_joints
        values = self._manipulator.get_dof_values()
        return np.array([value_to_fraction(joints[index], values[index])
                         for index in self.ik_function.free_indices], dtype=np.float64)

    # ---------- 求解 ----------

    def solve(self, param: Parameterization, seed: Optional[Sequence[float]] = None,
              check_validity: ValidityCheck = False,
              free_parameters: Optional[Sequence[float]] = None) -> Optional[np.ndarray]:
        if not self._ready():
            return None
        predicate, fixed = self._prepare(param, check_validity, free_parameters)

        if seed is not None:
            seed = np.asarray(seed, dtype=np.float64).reshape(-1)
            if seed.size == 0:
                seed = None
            elif seed.shape != (self.ik_function.num_joints,):
                raise ValueError(f"Seed must have {self.ik_function.num_joints} values, got {seed.shape[0]}")

        local = self._to_local(param)
        cells = self._cells(fixed)

        if seed is None:
            candidate = self._first_candidate(local, cells, predicate)
            if candidate is None:
                logger.debug("No IK solution for %r (%d cells)", param, len(cells))
                return None
            return candidate.values

        best: Optional[IkCandidate] = None
        best_distance = np.inf
        for candidate in self._collect(local, cells, predicate):
            distance = self.joint_distance(candidate.values, seed)
            # 严格小于：并列时保留网格顺序靠前的解
            if distance < best_distance:
                best, best_distance = candidate, distance

        if best is None:
            logger.debug("No IK solution for %r (%d cells)", param, len(cells))
            return None
        logger.debug("Nearest IK solution at cell %d (free parameters %s), distance %.6f",
                     best.index, list(best.free_parameters), best_distance)
        return best.values

    def solve_all(self, param: Parameterization, check_validity: ValidityCheck = False,
                  free_parameters: Optional[Sequence[float]] = None) -> List[np.ndarray]:
        if not self._ready():
            return []
        predicate, fixed = self._prepare(param, check_validity, free_parameters)
        local = self._to_local(param)
        cells = self._cells(fixed)

        solutions: List[np.ndarray] = []
        for candidate in self._collect(local, cells, predicate):
            if not any(self.is_same_solution(candidate.values, other) for other in solutions):
                solutions.append(candidate.values)

        logger.debug("Found %d distinct IK solutions for %r (%d cells)", len(solutions), param, len(cells))
        return solutions

    def _ready(self) -> bool:
        if self.state == SolverState.UNBOUND:
            raise RuntimeError(f"IK solver '{self.ik_function.name}' is not bound to a manipulator; call init() first")
        if self.state == SolverState.INVALID:
            logger.debug("IK solver '%s' has an invalid binding: %s", self.ik_function.name, self.binding_error)
            return False
        return True

    def _prepare(self, param: Parameterization, check_validity: ValidityCheck,
                 free_parameters) -> Tuple[Optional[ValidityPredicate], Optional[np.ndarray]]:
        """校验查询输入，任何工作开始前报告格式错误"""
        if param.get_type() != self.ik_function.ik_type:
            raise ValueError(f"IK solver '{self.ik_function.name}' solves {self.ik_function.ik_type.name} "
                             f"targets, got {param.get_type().name}")

        if check_validity is None or check_validity is False:
            predicate = None
        elif check_validity is True:
            if self.validity is None:
                raise ValueError("check_validity=True but no validity predicate is bound to the solver")
            predicate = self.validity
        elif callable(check_validity):
            predicate = check_validity
        else:
            raise ValueError(f"check_validity must be a bool or a callable, got {type(check_validity).__name__}")

        fixed = check_free_parameters(free_parameters, self.get_num_free_parameters())
        return predicate, fixed

    def _cells(self, fixed: Optional[np.ndarray]) -> List[Tuple[float, ...]]:
        if fixed is not None:
            return [tuple(float(v) for v in fixed)]
        return list(self.discretizer.grid(self.get_num_free_parameters()))

    def _to_local(self, param: Parameterization) -> Parameterization:
        """
        世界系目标 -> 机械臂基座系目标（按类型逐一换算）
        """
        base = self._manipulator.get_base_transform()
        base_rot_t = base[:3, :3].T
        grasp = self._manipulator.grasp_transform
        param_type = param.get_type()

        if param_type == IkParameterizationType.TRANSFORM6D:
            return Parameterization.from_transform(invert_transform(base) @ param.get_transform() @ invert_transform(grasp))
        elif param_type == IkParameterizationType.ROTATION3D:
            rot = base_rot_t @ param.get_rotation_matrix() @ grasp[:3, :3].T
            return Parameterization.from_rotation(rotation_matrix_to_quaternion(rot))
        elif param_type == IkParameterizationType.TRANSLATION3D:
            return Parameterization.from_translation(base_rot_t @ (param.get_translation() - base[:3, 3]))
        elif param_type == IkParameterizationType.DIRECTION2D:
            return Parameterization.from_direction(base_rot_t @ param.get_direction())
        elif param_type == IkParameterizationType.RAY4D:
            position, direction = param.get_ray()
            return Parameterization.from_ray(base_rot_t @ (position - base[:3, 3]), base_rot_t @ direction)
        raise ValueError(f"Cannot solve for parameterization type {param_type.name}")

    def _evaluate_cell(self, local: Parameterization, index: int, fractions: Tuple[float, ...],
                       predicate: Optional[ValidityPredicate]) -> List[IkCandidate]:
        """单个网格单元：解析求解 + 归一化/限位 + 有效性过滤"""
        joints = self._manipulator.arm_joints
        free_values = free_values_for(joints, fractions, self.ik_function.free_indices)

        candidates = []
        for raw in self.ik_function(local, free_values):
            values = self._normalize(raw)
            if values is None:
                continue
            if predicate is not None and not predicate(values):
                continue
            candidates.append(IkCandidate(index, fractions, values))
        return candidates

    def _normalize(self, raw: np.ndarray) -> Optional[np.ndarray]:
        if not np.all(np.isfinite(raw)):
            return None
        values = np.empty_like(raw)
        for i, (joint, value) in enumerate(zip(self._manipulator.arm_joints, raw)):
            normalized = joint.normalize_value(float(value))
            if normalized is None:
                return None
            values[i] = normalized
        return values

    def _collect(self, local: Parameterization, cells: List[Tuple[float, ...]],
                 predicate: Optional[ValidityPredicate]) -> List[IkCandidate]:
        """求解全部网格单元，结果按网格顺序排列（与线程完成顺序无关）"""
        if self.max_workers is None or self.max_workers == 1 or len(cells) == 1:
            per_cell = [self._evaluate_cell(local, index, fractions, predicate)
                        for index, fractions in enumerate(cells)]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self._evaluate_cell, local, index, fractions, predicate)
                           for index, fractions in enumerate(cells)]
                # 任一单元抛出异常时取消尚未开始的单元
                try:
                    per_cell = [future.result() for future in futures]
                finally:
                    for future in futures:
                        future.cancel()
        return [candidate for cell in per_cell for candidate in cell]

    def _first_candidate(self, local: Parameterization, cells: List[Tuple[float, ...]],
                         predicate: Optional[ValidityPredicate]) -> Optional[IkCandidate]:
        """网格顺序上第一个可行解；找到后不再求解剩余单元"""
        if self.max_workers is None or self.max_workers == 1 or len(cells) == 1:
            for index, fractions in enumerate(cells):
                candidates = self._evaluate_cell(local, index, fractions, predicate)
                if candidates:
                    return candidates[0]
            return None

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._evaluate_cell, local, index, fractions, predicate)
                       for index, fractions in enumerate(cells)]
            # 按提交顺序取结果，保证与顺序求解结果一致；退出时取消尚未开始的单元
            try:
                for future in futures:
                    candidates = future.result()
                    if candidates:
                        return candidates[0]
            finally:
                for future in futures:
                    future.cancel()
        return None

    # ---------- 关节空间度量 ----------

    def joint_distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """加权关节距离：sum(w_j * |a_j - b_j|)，连续旋转关节的差值回绕到 [-pi, pi]"""
        joints = self._manipulator.arm_joints
        return float(sum(joint.weight * abs(joint.difference(x, y)) for joint, x, y in zip(joints, a, b)))

    def is_same_solution(self, a: np.ndarray, b: np.ndarray) -> bool:
        joints = self._manipulator.arm_joints
        return all(abs(joint.difference(x, y)) < self.solution_tolerance for joint, x, y in zip(joints, a, b))

    def __repr__(self):
        return (f"<AnalyticIkSolver: {self.ik_function.name} step={self.discretizer.step} "
                f"state={self.state.value}>")
