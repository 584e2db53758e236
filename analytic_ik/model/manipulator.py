"""
机械臂（Manipulator）描述
从场景图中截取一段运动学子链，提供关节数、限位、当前关节状态、运动学指纹与抓取坐标系
"""
import hashlib
import numpy as np
from typing import List, Optional, Sequence, Tuple

from .joint import JointNode, ActuatedJoint


def find_path(base: JointNode, effector: JointNode) -> List[JointNode]:
    """
    从effector开始向上遍历parent直到base，返回 base -> effector 的节点路径（两端包含）
    """
    path: List[JointNode] = []
    current = effector

    while current is not None:
        path.append(current)
        if current is base:
            break
        current = current.parent

    if path[-1] is not base:
        raise ValueError(f"Cannot find path from {base.name} to {effector.name}")

    path.reverse()
    return path


def build_ik_chain(base: JointNode, effector: JointNode) -> List[ActuatedJoint]:
    """
    构建IK Chain：base 到 effector 路径上所有可控关节的有序列表。
    FixedJoint 会被自动跳过（不加入IK链）。

    :param base: 这条IK链的根节点
    :param effector: 末端执行器节点
    :return: 仅包含1-DoF节点（RevoluteJoint或PrismaticJoint）的列表
    """
    ik_chain: List[JointNode] = []
    for node in find_path(base, effector):
        node.append_to_ik_chain(ik_chain)
    return ik_chain


def compute_kinematics_hash(descriptors: Sequence[str]) -> str:
    """运动学指纹：节点描述逐行拼接后的 md5"""
    return hashlib.md5("\n".join(descriptors).encode('utf-8')).hexdigest()


class Manipulator:
    """
    机械臂：base 到 effector 的运动学子链

    grasp_transform 是末端执行器坐标系到抓取点的附加变换（默认单位阵），
    不属于运动学结构，因而不参与指纹计算。
    """

    def __init__(self, name: str, base: JointNode, effector: JointNode,
                 grasp_transform: Optional[np.ndarray] = None):
        """
        :param name: 机械臂名称
        :param base: 子链第一个节点（包含在指纹内）
        :param effector: 末端执行器节点
        :param grasp_transform: 末端到抓取点的 4x4 变换
        """
        self.name = name
        self.base = base
        self.effector = effector
        self.path: List[JointNode] = find_path(base, effector)
        self.arm_joints: List[ActuatedJoint] = build_ik_chain(base, effector)
        if grasp_transform is None:
            grasp_transform = np.identity(4, dtype=np.float64)
        self.grasp_transform: np.ndarray = np.array(grasp_transform, dtype=np.float64)
        if self.grasp_transform.shape != (4, 4):
            raise ValueError(f"Grasp transform must be 4x4, got shape {self.grasp_transform.shape}")

        # 场景图的全局根节点，用于刷新全树变换
        root = base
        while root.parent is not None:
            root = root.parent
        self.root = root

    @classmethod
    def from_skeleton(cls, json_path: str, base_name: Optional[str] = None,
                      effector_name: Optional[str] = None, name: Optional[str] = None,
                      grasp_transform: Optional[np.ndarray] = None) -> 'Manipulator':
        """
        从骨骼 JSON 构建机械臂。base 缺省为根节点，effector 缺省为第一个无子节点的 FixedJoint
        """
        from ..data_io import load_skeleton, find_effector

        root, joint_map = load_skeleton(json_path)
        base = root if base_name is None else joint_map[base_name]
        if effector_name is None:
            effector = find_effector(base)
            if effector is None:
                raise ValueError(f"No effector (leaf FixedJoint) found below '{base.name}'")
        else:
            effector = joint_map[effector_name]
        return cls(name or effector.name, base, effector, grasp_transform)

    def get_num_joints(self) -> int:
        return len(self.arm_joints)

    def get_joint_names(self) -> List[str]:
        return [joint.name for joint in self.arm_joints]

    def get_joint_limits(self) -> List[Optional[Tuple[float, float]]]:
        return [joint.limits for joint in self.arm_joints]

    def get_joint_wraps(self) -> List[bool]:
        """各关节是否为在 ±pi 处回绕的连续关节"""
        return [joint.is_wrapping() for joint in self.arm_joints]

    def get_joint_weights(self) -> np.ndarray:
        return np.array([joint.weight for joint in self.arm_joints], dtype=np.float64)

    def get_dof_values(self) -> np.ndarray:
        """当前关节状态"""
        return np.array([joint.q for joint in self.arm_joints], dtype=np.float64)

    def set_dof_values(self, values: Sequence[float]):
        """写入关节状态并刷新全树变换"""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.get_num_joints(),):
            raise ValueError(f"Expected {self.get_num_joints()} joint values, got shape {values.shape}")
        for joint, value in zip(self.arm_joints, values):
            joint.q = float(value)
        self.root.update_global_transform()

    def get_kinematics_hash(self) -> str:
        return compute_kinematics_hash([node.descriptor() for node in self.path])

    def get_base_transform(self) -> np.ndarray:
        """
        子链基座坐标系（base 的父节点）在世界系下的变换。
        沿父链逐级相乘局部矩阵，不写入场景图的 global_transform
        """
        transform = np.identity(4, dtype=np.float64)
        node = self.base.parent
        while node is not None:
            transform = node.get_local_matrix() @ transform
            node = node.parent
        return transform

    def forward_kinematics(self, values: Sequence[float]) -> np.ndarray:
        """
        计算给定关节值下抓取点在世界系中的位姿，不修改关节状态

        :param values: 长度为关节数的关节值
        :return: 4x4 变换矩阵
        """
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.get_num_joints(),):
            raise ValueError(f"Expected {self.get_num_joints()} joint values, got shape {values.shape}")

        transform = self.get_base_transform()
        joint_index = 0
        for node in self.path:
            if isinstance(node, ActuatedJoint):
                transform = transform @ node.local_matrix_at(values[joint_index])
                joint_index += 1
            else:
                transform = transform @ node.get_local_matrix()
        return transform @ self.grasp_transform

    def get_end_effector_transform(self) -> np.ndarray:
        """当前关节状态下抓取点的世界位姿"""
        return self.forward_kinematics(self.get_dof_values())

    def __repr__(self):
        return f"<Manipulator: {self.name} ({self.get_num_joints()} joints)>"
