"""
云台（pan-tilt）指向的闭式解：DIRECTION2D

pan 绕 z 轴，tilt 绕 y 轴；目标方向是相机局部 x 轴在基座系中的方向：
    d = (cos(pan) cos(tilt), sin(pan) cos(tilt), -sin(tilt))
"""
import numpy as np
from typing import List

from ..solver import AnalyticIkFunction, IkParameterizationType, Parameterization
from .common import RobotGeometry


PANTILT = RobotGeometry(
    name='pantilt',
    skeleton={
        'root_name': 'base',
        'joints': [
            {'name': 'base', 'type': 'fixed', 'offset': [0.0, 0.0, 0.0], 'parent': None},
            {'name': 'pan', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'base'},
            {'name': 'tilt', 'type': 'revolute', 'offset': [0.0, 0.0, 0.3], 'axis': [0.0, 1.0, 0.0],
             'limits': [-1.5707963267948966, 1.5707963267948966], 'parent': 'pan'},
            {'name': 'camera', 'type': 'fixed', 'offset': [0.1, 0.0, 0.0], 'parent': 'tilt'},
        ]
    },
    base='pan',
    effector='camera'
)


def pantilt_ik(pose: Parameterization, free_values: np.ndarray) -> List[List[float]]:
    dx, dy, dz = pose.get_direction()
    horizontal = np.hypot(dx, dy)
    tilt = float(np.arctan2(-dz, horizontal))
    if horizontal < 1e-12:
        # 竖直方向：pan 任意，取 0
        return [[0.0, tilt]]
    pan = float(np.arctan2(dy, dx))
    # 翻转分支：pan + pi, tilt -> pi - tilt
    return [[pan, tilt], [pan + np.pi, np.pi - tilt]]


def get_pantilt() -> AnalyticIkFunction:
    return AnalyticIkFunction(
        name='pantilt',
        ik=pantilt_ik,
        num_joints=2,
        free_indices=(),
        ik_type=IkParameterizationType.DIRECTION2D,
        kinematics_hash=PANTILT.get_kinematics_hash()
    )
