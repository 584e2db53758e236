"""
平面连杆臂的闭式解

所有关节绕 z 轴旋转，连杆沿各自局部 x 轴。
- planar2r:       2 关节，TRANSLATION3D，肘部上/下两支
- planar3r:       3 关节，TRANSLATION3D，肩关节为自由参数，其余两关节按 2R 闭式求解
- planar3r_pose:  同一台 3R 臂，TRANSFORM6D（平面位姿 x, y, yaw），无自由参数
"""
import numpy as np
from typing import List, Tuple

from ..solver import AnalyticIkFunction, IkParameterizationType, Parameterization
from .common import RobotGeometry


# 目标偏离 xy 平面的容差
PLANE_TOLERANCE = 1e-6

PLANAR2R_LINKS = (1.0, 0.8)
PLANAR3R_LINKS = (1.0, 0.8, 0.5)

PLANAR2R = RobotGeometry(
    name='planar2r',
    skeleton={
        'root_name': 'base',
        'joints': [
            {'name': 'base', 'type': 'fixed', 'offset': [0.0, 0.0, 0.0], 'parent': None},
            {'name': 'shoulder', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'base'},
            {'name': 'elbow', 'type': 'revolute', 'offset': [1.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'shoulder'},
            {'name': 'tool', 'type': 'fixed', 'offset': [0.8, 0.0, 0.0], 'parent': 'elbow'},
        ]
    },
    base='shoulder',
    effector='tool'
)

PLANAR3R = RobotGeometry(
    name='planar3r',
    skeleton={
        'root_name': 'base',
        'joints': [
            {'name': 'base', 'type': 'fixed', 'offset': [0.0, 0.0, 0.0], 'parent': None},
            {'name': 'shoulder', 'type': 'revolute', 'offset': [0.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': [-1.5707963267948966, 1.5707963267948966], 'parent': 'base'},
            {'name': 'elbow', 'type': 'revolute', 'offset': [1.0, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'shoulder'},
            {'name': 'wrist', 'type': 'revolute', 'offset': [0.8, 0.0, 0.0], 'axis': [0.0, 0.0, 1.0],
             'limits': None, 'parent': 'elbow'},
            {'name': 'tool', 'type': 'fixed', 'offset': [0.5, 0.0, 0.0], 'parent': 'wrist'},
        ]
    },
    base='shoulder',
    effector='tool'
)


def solve_two_link(x: float, y: float, l1: float, l2: float) -> List[Tuple[float, float]]:
    """
    平面 2R 闭式解（余弦定理）

    :return: [(theta1, theta2), ...]，肘部 sin(theta2) >= 0 的一支在前；不可达时为空
    """
    c2 = (x * x + y * y - l1 * l1 - l2 * l2) / (2.0 * l1 * l2)
    if c2 > 1.0 + 1e-9 or c2 < -1.0 - 1e-9:
        return []
    c2 = min(1.0, max(-1.0, c2))
    s2_mag = np.sqrt(max(0.0, 1.0 - c2 * c2))

    solutions = []
    for s2 in (s2_mag, -s2_mag):
        theta2 = np.arctan2(s2, c2)
        theta1 = np.arctan2(y, x) - np.arctan2(l2 * s2, l1 + l2 * c2)
        solutions.append((float(theta1), float(theta2)))
    return solutions


def _planar_point(pose: Parameterization):
    x, y, z = pose.get_translation()
    if abs(z) > PLANE_TOLERANCE:
        return None
    return x, y


def planar2r_ik(pose: Parameterization, free_values: np.ndarray) -> List[List[float]]:
    point = _planar_point(pose)
    if point is None:
        return []
    l1, l2 = PLANAR2R_LINKS
    return [[t1, t2] for t1, t2 in solve_two_link(point[0], point[1], l1, l2)]


def planar3r_ik(pose: Parameterization, free_values: np.ndarray) -> List[List[float]]:
    """肩关节角度由自由参数给定，肘部位置确定后剩余两关节按 2R 求解"""
    point = _planar_point(pose)
    if point is None:
        return []
    l1, l2, l3 = PLANAR3R_LINKS
    theta0 = float(free_values[0])
    ex, ey = l1 * np.cos(theta0), l1 * np.sin(theta0)

    # solve_two_link 给出的第一个角是第二连杆的绝对角度，需减去肩关节角
    return [[theta0, phi1 - theta0, phi2]
            for phi1, phi2 in solve_two_link(point[0] - ex, point[1] - ey, l2, l3)]


def planar3r_pose_ik(pose: Parameterization, free_values: np.ndarray) -> List[List[float]]:
    """平面位姿：z=0 且旋转只绕 z 轴，否则无解"""
    transform = pose.get_transform()
    x, y, z = transform[:3, 3]
    if abs(z) > PLANE_TOLERANCE or abs(transform[2, 2] - 1.0) > PLANE_TOLERANCE:
        return []
    yaw = np.arctan2(transform[1, 0], transform[0, 0])

    l1, l2, l3 = PLANAR3R_LINKS
    wx, wy = x - l3 * np.cos(yaw), y - l3 * np.sin(yaw)
    return [[t1, t2, float(yaw - t1 - t2)] for t1, t2 in solve_two_link(wx, wy, l1, l2)]


def get_planar2r() -> AnalyticIkFunction:
    return AnalyticIkFunction(
        name='planar2r',
        ik=planar2r_ik,
        num_joints=2,
        free_indices=(),
        ik_type=IkParameterizationType.TRANSLATION3D,
        kinematics_hash=PLANAR2R.get_kinematics_hash()
    )


def get_planar3r() -> AnalyticIkFunction:
    return AnalyticIkFunction(
        name='planar3r',
        ik=planar3r_ik,
        num_joints=3,
        free_indices=(0,),
        ik_type=IkParameterizationType.TRANSLATION3D,
        kinematics_hash=PLANAR3R.get_kinematics_hash()
    )


def get_planar3r_pose() -> AnalyticIkFunction:
    return AnalyticIkFunction(
        name='planar3r_pose',
        ik=planar3r_pose_ik,
        num_joints=3,
        free_indices=(),
        ik_type=IkParameterizationType.TRANSFORM6D,
        kinematics_hash=PLANAR3R.get_kinematics_hash()
    )
