"""
解析 IK 函数的能力描述

解析函数本身是外部提供的纯函数：给定机械臂基座系下的目标与自由参数对应的关节值，
返回零个或多个满足位置约束的关节向量。这里只记录它声明的能力。
"""
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

from .parameterization import IkParameterizationType, Parameterization


# ik(目标, 自由关节的取值) -> 原始关节向量列表
IkFunction = Callable[[Parameterization, np.ndarray], List[Sequence[float]]]


@dataclass(frozen=True)
class AnalyticIkFunction:
    """
    :param name: 名称（通常为机器人型号）
    :param ik: 解析求解函数
    :param num_joints: 求解的关节数
    :param free_indices: 自由参数对应的关节下标（机械臂关节序号），有序
    :param ik_type: 支持的目标参数化类型
    :param kinematics_hash: 期望的运动学指纹；空字符串表示不校验
    """
    name: str
    ik: IkFunction
    num_joints: int
    free_indices: Tuple[int, ...] = field(default_factory=tuple)
    ik_type: IkParameterizationType = IkParameterizationType.TRANSFORM6D
    kinematics_hash: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'free_indices', tuple(int(i) for i in self.free_indices))
        object.__setattr__(self, 'ik_type', IkParameterizationType(self.ik_type))
        if self.num_joints <= 0:
            raise ValueError(f"num_joints must be positive, got {self.num_joints}")
        if len(set(self.free_indices)) != len(self.free_indices):
            raise ValueError(f"Duplicate free parameter indices: {self.free_indices}")
        for index in self.free_indices:
            if not 0 <= index < self.num_joints:
                raise ValueError(f"Free parameter index {index} out of range for {self.num_joints} joints")
        if self.ik_type == IkParameterizationType.NONE:
            raise ValueError("Analytic IK function must support a concrete parameterization type")

    def get_num_free_parameters(self) -> int:
        return len(self.free_indices)

    def __call__(self, pose: Parameterization, free_values: np.ndarray) -> List[np.ndarray]:
        """调用解析函数，并把结果规整为 float64 向量"""
        solutions = []
        for raw in self.ik(pose, np.asarray(free_values, dtype=np.float64)):
            solution = np.asarray(raw, dtype=np.float64)
            if solution.shape != (self.num_joints,):
                raise ValueError(
                    f"Analytic IK '{self.name}' returned a solution of shape {solution.shape}, "
                    f"expected ({self.num_joints},)")
            solutions.append(solution)
        return solutions
