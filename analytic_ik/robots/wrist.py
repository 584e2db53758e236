"""
球形手腕 ZYZ 的闭式解：ROTATION3D

R = Rz(a) Ry(b) Rz(c)
"""
import numpy as np
from typing import List

from ..solver import AnalyticIkFunction, IkParameterizationType, Parameterization
from .common import RobotGeometry


# sin(b) 低于该值视为奇异位形（a 与 c 只能确定和或差）
SINGULAR_TOLERANCE = 1e-9

WRIST_ZYZ = RobotGeometry(
    name='wrist_zyz',
    skeleton={
        'root_name': 'base',
        'joints': [
            {'name': 'base', 'type': 'fixed', 'offset': [0.0, 0.0, 0.0], 'parent': None},
            {'name': 'yaw', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'base'},
            {'name': 'pitch', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 1.0, 0.0],
             'limits': None, 'parent': 'yaw'},
            {'name': 'roll', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'pitch'},
            {'name': 'flange', 'type': 'fixed', 'offset': [0.0, 0.0, 0.1], 'parent': 'roll'},
        ]
    },
    base='yaw',
    effector='flange'
)


def wrist_zyz_ik(pose: Parameterization, free_values: np.ndarray) -> List[List[float]]:
    rot = pose.get_rotation_matrix()
    sin_b = np.hypot(rot[0, 2], rot[1, 2])

    if sin_b < SINGULAR_TOLERANCE:
        if rot[2, 2] > 0:
            # b = 0: R = Rz(a + c)
            return [[0.0, 0.0, float(np.arctan2(rot[1, 0], rot[0, 0]))]]
        # b = pi: R[1,0] = sin(c - a), R[1,1] = cos(c - a)
        return [[0.0, float(np.pi), float(np.arctan2(rot[1, 0], rot[1, 1]))]]

    a = float(np.arctan2(rot[1, 2], rot[0, 2]))
    b = float(np.arctan2(sin_b, rot[2, 2]))
    c = float(np.arctan2(rot[2, 1], -rot[2, 0]))
    return [[a, b, c], [a + np.pi, -b, c + np.pi]]


def get_wrist_zyz() -> AnalyticIkFunction:
    return AnalyticIkFunction(
        name='wrist_zyz',
        ik=wrist_zyz_ik,
        num_joints=3,
        free_indices=(),
        ik_type=IkParameterizationType.ROTATION3D,
        kinematics_hash=WRIST_ZYZ.get_kinematics_hash()
    )
