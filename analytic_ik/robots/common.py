"""
内置机器人的几何描述

每个内置解析函数都对应一份骨骼定义（与 data/ 下的 JSON 内容一致），
期望的运动学指纹由这份骨骼计算得到。
"""
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..model import Manipulator


@dataclass
class RobotGeometry:
    """
    :param name: 机器人名称，同时是 data/ 下骨骼文件的文件名（不含扩展名）
    :param skeleton: 骨骼定义（load_skeleton 的 JSON 格式）
    :param base: 机械臂子链第一个节点
    :param effector: 末端执行器节点
    """
    name: str
    skeleton: Dict
    base: str
    effector: str
    _hash: Optional[str] = field(default=None, init=False, repr=False)

    def create_manipulator(self, grasp_transform: Optional[np.ndarray] = None) -> Manipulator:
        from ..data_io import build_skeleton

        _, joint_map = build_skeleton(self.skeleton)
        return Manipulator(self.name, joint_map[self.base], joint_map[self.effector], grasp_transform)

    def get_kinematics_hash(self) -> str:
        if self._hash is None:
            self._hash = self.create_manipulator().get_kinematics_hash()
        return self._hash

    def get_skeleton_filename(self) -> str:
        return f"{self.name}.json"
