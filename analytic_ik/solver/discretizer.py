"""
自由参数离散化

每个自由参数取值 0, step, 2*step, ... 直到 1（1 恰好包含一次）；
多个自由参数按字典序组成网格，下标越靠后的参数变化越快。
网格顺序即“第一个可行解”语义下的决胜顺序。
"""
import itertools
import numpy as np
from typing import Iterator, List, Optional, Tuple

from ..model import ActuatedJoint, wrap_to_pi


class FreeParameterDiscretizer:
    """
    :param step: 离散化步长，取值 (0, 1]
    """

    def __init__(self, step: float):
        step = float(step)
        if not 0.0 < step <= 1.0:
            raise ValueError(f"Discretization step must be in (0, 1], got {step}")
        self.step = step
        self._values = self._build_values(step)

    @staticmethod
    def _build_values(step: float) -> Tuple[float, ...]:
        count = int(np.floor(1.0 / step + 1e-9))
        values = [i * step for i in range(count + 1)]
        if values[-1] < 1.0 - 1e-9:
            values.append(1.0)
        else:
            # 浮点累积误差下 count*step 可能略偏离 1
            values[-1] = 1.0
        return tuple(values)

    def values(self) -> Tuple[float, ...]:
        """单个自由参数的采样值"""
        return self._values

    def size(self, num_free: int) -> int:
        """网格单元数，num_free 为 0 时为 1（只求解一次）"""
        return len(self._values) ** num_free

    def grid(self, num_free: int) -> Iterator[Tuple[float, ...]]:
        """
        按字典序生成自由参数向量

        :param num_free: 自由参数个数
        """
        if num_free < 0:
            raise ValueError(f"Number of free parameters must be non-negative, got {num_free}")
        return itertools.product(self._values, repeat=num_free)

    def __repr__(self):
        return f"<FreeParameterDiscretizer step={self.step} values={len(self._values)}>"


def _joint_range(joint: ActuatedJoint) -> Tuple[float, float]:
    joint_range = joint.get_range()
    if joint_range is None:
        raise ValueError(f"Joint '{joint.name}' has no bounded range and cannot be a free parameter")
    return joint_range


def fraction_to_value(joint: ActuatedJoint, fraction: float) -> float:
    """将 [0,1] 的自由参数映射为关节值"""
    lower, upper = _joint_range(joint)
    return lower + fraction * (upper - lower)


def value_to_fraction(joint: ActuatedJoint, value: float) -> float:
    """将关节值映射回 [0,1]（回绕关节先归一化到 [-pi, pi)）"""
    lower, upper = _joint_range(joint)
    if joint.is_wrapping():
        value = wrap_to_pi(value)
    if upper - lower <= 0.0:
        return 0.0
    return float(np.clip((value - lower) / (upper - lower), 0.0, 1.0))


def free_values_for(joints: List[ActuatedJoint], fractions, free_indices) -> np.ndarray:
    """自由参数向量 -> 对应自由关节的取值向量"""
    return np.array([fraction_to_value(joints[index], fraction)
                     for index, fraction in zip(free_indices, fractions)], dtype=np.float64)


def check_free_parameters(free_parameters, num_free: int) -> Optional[np.ndarray]:
    """
    校验调用方显式给出的自由参数：长度必须匹配，且每个值在 [0,1] 内
    """
    if free_parameters is None:
        return None
    values = np.asarray(free_parameters, dtype=np.float64).reshape(-1)
    if values.shape != (num_free,):
        raise ValueError(f"Expected {num_free} free parameters, got {values.shape[0]}")
    if np.any(~np.isfinite(values)) or np.any(values < 0.0) or np.any(values > 1.0):
        raise ValueError(f"Free parameters must lie in [0, 1], got {values.tolist()}")
    return values
