"""
关节类层次结构实现
"""
import numpy as np
from abc import ABC, abstractmethod
from typing_extensions import override
from typing import Optional, Tuple, List

from ..utils import axis_angle_matrix, quaternion_to_rotation_matrix


# 关节限位判定容差
LIMIT_TOLERANCE = 1e-9


def _format_vector(values: np.ndarray) -> str:
    """指纹序列化：保留6位小数，并消除 -0.000000"""
    rounded = np.round(np.asarray(values, dtype=np.float64), 6) + 0.0
    return ",".join(f"{v:.6f}" for v in rounded)


def wrap_to_pi(angle: float) -> float:
    """将角度归一化到 [-pi, pi)"""
    return (angle + np.pi) % (2.0 * np.pi) - np.pi


class JointNode(ABC):
    """
    所有关节类型的抽象基类，定义求解器接口。
    """

    def __init__(self, name: str, offset: np.ndarray):
        """
        初始化关节节点

        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3)
        """
        self.name = name
        self.parent: Optional['JointNode'] = None
        self.children: List['JointNode'] = []
        self.local_offset: np.ndarray = np.asarray(offset, dtype=np.float64)
        self.global_transform: np.ndarray = np.identity(4, dtype=np.float64)

    def add_child(self, child: 'JointNode'):
        """添加子节点，同时设置父子关系"""
        child.parent = self
        self.children.append(child)

    @abstractmethod
    def get_local_matrix(self) -> np.ndarray:
        """
        根据当前内部变量计算局部变换矩阵。

        :return: 4x4 局部变换矩阵
        """
        pass

    @abstractmethod
    def get_dof(self) -> int:
        """
        返回自由度数量 (0 或 1)。
        """
        pass

    @abstractmethod
    def append_to_ik_chain(self, ik_chain: List['JointNode']):
        """
        将节点添加到IK链列表的末尾

        :param ik_chain: IK链列表（引用传递，直接修改）
        """
        pass

    @abstractmethod
    def descriptor(self) -> str:
        """
        返回用于运动学指纹的规范化描述（类型、轴、偏移），不包含关节变量
        """
        pass

    def update_global_transform(self):
        """
        递归更新此关节及其所有子关节的 global_transform。
        """
        local_transform = self.get_local_matrix()

        if self.parent is None:
            self.global_transform = local_transform
        else:
            # global = parent_global @ local
            self.global_transform = self.parent.global_transform @ local_transform

        for child in self.children:
            child.update_global_transform()

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.name}>"


class ActuatedJoint(JointNode):
    """
    单自由度关节的公共部分：轴、关节变量 q、限位
    """

    type_name = ''

    def __init__(self, name: str, offset: np.ndarray, axis: np.ndarray,
                 limits: Optional[Tuple[float, float]] = None, weight: float = 1.0):
        """
        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3)
        :param axis: 关节轴（局部坐标系，不能为零向量。程序自动归一化）
        :param limits: 约束范围 [min, max]，None 表示无约束
        :param weight: 计算关节距离时的权重
        """
        super().__init__(name, offset)
        self.axis = np.asarray(axis, dtype=np.float64)
        axis_norm = np.linalg.norm(self.axis)
        if axis_norm > 1e-6:
            self.axis = self.axis / axis_norm
        else:
            raise ValueError(f"Axis vector is not a unit vector and too small to be normalized: {self.axis}")
        if limits is not None:
            limits = (float(limits[0]), float(limits[1]))
            if limits[0] > limits[1]:
                raise ValueError(f"Invalid limits for joint '{name}': {limits}")
        if weight < 0:
            raise ValueError(f"Joint weight must be non-negative, got {weight} for '{name}'")
        self.q: float = 0.0
        self.limits: Optional[Tuple[float, float]] = limits
        self.weight: float = float(weight)

    def get_local_matrix(self) -> np.ndarray:
        return self.local_matrix_at(self.q)

    @abstractmethod
    def local_matrix_at(self, q: float) -> np.ndarray:
        """
        关节变量取 q 时的局部变换矩阵（不修改 self.q）
        """
        pass

    def get_dof(self) -> int:
        return 1

    def append_to_ik_chain(self, ik_chain: List['JointNode']):
        """单自由度关节直接添加到IK链"""
        ik_chain.append(self)

    def descriptor(self) -> str:
        return f"{self.type_name} axis={_format_vector(self.axis)} offset={_format_vector(self.local_offset)}"

    def is_wrapping(self) -> bool:
        """关节变量是否在 ±pi 处回绕"""
        return False

    def get_range(self) -> Optional[Tuple[float, float]]:
        """
        自由参数 [0,1] 所对应的关节区间；无界且不回绕的关节返回 None
        """
        return self.limits

    def in_limits(self, value: float) -> bool:
        if self.limits is None:
            return True
        lower, upper = self.limits
        return lower - LIMIT_TOLERANCE <= value <= upper + LIMIT_TOLERANCE

    def normalize_value(self, value: float) -> Optional[float]:
        """
        将解析解给出的关节值规范到该关节的拓扑与限位内。

        :return: 规范后的值；无法落入限位时返回 None
        """
        return value if self.in_limits(value) else None

    def difference(self, a: float, b: float) -> float:
        """关节空间中 a - b 的差值"""
        return a - b


class RevoluteJoint(ActuatedJoint):
    """
    旋转关节 - 绕固定轴旋转的铰链
    无限位时视为连续关节，角度在 ±pi 处回绕
    """

    type_name = 'revolute'

    def local_matrix_at(self, q: float) -> np.ndarray:
        """生成绕 axis 旋转 q 的矩阵"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, :3] = axis_angle_matrix(self.axis, q)
        local_transform[:3, 3] = self.local_offset

        return local_transform

    @override
    def is_wrapping(self) -> bool:
        return self.limits is None

    @override
    def get_range(self) -> Optional[Tuple[float, float]]:
        if self.limits is None:
            return (-np.pi, np.pi)
        return self.limits

    @override
    def normalize_value(self, value: float) -> Optional[float]:
        """
        连续关节归一化到 [-pi, pi)；有限位的关节尝试 ±2pi 平移后落入限位
        """
        if self.limits is None:
            return wrap_to_pi(value)
        for candidate in (value, value - 2.0 * np.pi, value + 2.0 * np.pi):
            if self.in_limits(candidate):
                return candidate
        return None

    @override
    def difference(self, a: float, b: float) -> float:
        if self.limits is None:
            return wrap_to_pi(a - b)
        return a - b


class PrismaticJoint(ActuatedJoint):
    """
    移动关节 - 沿固定轴滑动的滑块
    """

    type_name = 'prismatic'

    def local_matrix_at(self, q: float) -> np.ndarray:
        """生成沿 axis 平移 q 的矩阵: T = [I | offset + q * axis]"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, 3] = self.local_offset + q * self.axis
        return local_transform


class FixedJoint(JointNode):
    """
    固定关节 - 无变量的结构连接或末端执行器
    quaternion 表示固定关节的本地旋转姿态（四元数, [w, x, y, z]）
    """

    def __init__(self, name: str, offset: np.ndarray, quaternion: Optional[np.ndarray] = None):
        """
        初始化固定关节

        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3)
        :param quaternion: 本地旋转（[w, x, y, z]），None 则为单位四元数
        """
        super().__init__(name, offset)
        if quaternion is None:
            self.quaternion = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
        else:
            self.quaternion = np.array(quaternion, dtype=np.float64)
            norm = np.linalg.norm(self.quaternion)
            if norm > 1e-6:
                self.quaternion /= norm
            else:
                raise ValueError(f"Quaternion norm too small: {self.quaternion}")
            # q 与 -q 表示同一旋转，统一 w >= 0 以保证指纹稳定
            if self.quaternion[0] < 0:
                self.quaternion = -self.quaternion

    def get_local_matrix(self) -> np.ndarray:
        """本地变换矩阵：先旋转，再平移"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, :3] = quaternion_to_rotation_matrix(self.quaternion)
        local_transform[:3, 3] = self.local_offset
        return local_transform

    def get_dof(self) -> int:
        return 0

    def append_to_ik_chain(self, ik_chain: List['JointNode']):
        """FixedJoint跳过，不添加到IK链"""
        pass

    def descriptor(self) -> str:
        return f"fixed quaternion={_format_vector(self.quaternion)} offset={_format_vector(self.local_offset)}"
