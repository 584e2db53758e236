"""
四元数与齐次变换工具函数
四元数统一使用 [w, x, y, z] 格式
"""
import numpy as np
from scipy.spatial.transform import Rotation as R
from typing import Union, Sequence


def quaternion_to_rotation_matrix(quaternion: Union[np.ndarray, list, tuple]) -> np.ndarray:
    """
    将四元数转换为旋转矩阵

    :param quaternion: 四元数，格式为 [w, x, y, z] 或 (w, x, y, z)
    :return: 3x3 旋转矩阵
    """
    quaternion = np.asarray(quaternion, dtype=np.float64)

    if quaternion.shape != (4,):
        raise ValueError(f"Quaternion must be a 4-element array, got shape {quaternion.shape}")

    norm = np.linalg.norm(quaternion)
    if norm < 1e-10:
        raise ValueError(f"Quaternion norm too small: {norm}, cannot normalize")
    quaternion = quaternion / norm

    w, x, y, z = quaternion[0], quaternion[1], quaternion[2], quaternion[3]

    return np.array([
        [1 - 2 * (y * y + z * z),     2 * (x * y - w * z),     2 * (x * z + w * y)],
        [    2 * (x * y + w * z), 1 - 2 * (x * x + z * z),     2 * (y * z - w * x)],
        [    2 * (x * z - w * y),     2 * (y * z + w * x), 1 - 2 * (x * x + y * y)]
    ], dtype=np.float64)


def rotation_matrix_to_quaternion(rot_mat: np.ndarray) -> np.ndarray:
    """
    将旋转矩阵转换为四元数 [w, x, y, z]（w >= 0）

    :param rot_mat: 3x3 旋转矩阵
    :return: 单位四元数
    """
    rot_mat = np.asarray(rot_mat, dtype=np.float64)
    if rot_mat.shape != (3, 3):
        raise ValueError(f"Rotation matrix must be 3x3, got shape {rot_mat.shape}")
    x, y, z, w = R.from_matrix(rot_mat).as_quat()  # scipy: [x, y, z, w]
    quat = np.array([w, x, y, z], dtype=np.float64)
    if quat[0] < 0:
        quat = -quat
    return quat


def make_transform(quaternion: Sequence[float], translation: Sequence[float]) -> np.ndarray:
    """由四元数和平移构造 4x4 齐次变换矩阵"""
    transform = np.identity(4, dtype=np.float64)
    transform[:3, :3] = quaternion_to_rotation_matrix(quaternion)
    transform[:3, 3] = np.asarray(translation, dtype=np.float64)
    return transform


def invert_transform(transform: np.ndarray) -> np.ndarray:
    """
    求刚体变换的逆: [R | p]^-1 = [R^T | -R^T p]
    """
    transform = np.asarray(transform, dtype=np.float64)
    rot_t = transform[:3, :3].T
    inverse = np.identity(4, dtype=np.float64)
    inverse[:3, :3] = rot_t
    inverse[:3, 3] = -rot_t @ transform[:3, 3]
    return inverse


def axis_angle_matrix(axis: np.ndarray, angle: float) -> np.ndarray:
    """绕单位轴 axis 旋转 angle 弧度的 3x3 旋转矩阵"""
    half = angle / 2.0
    xyz = np.asarray(axis, dtype=np.float64) * np.sin(half)
    return quaternion_to_rotation_matrix([np.cos(half), xyz[0], xyz[1], xyz[2]])


def euler_to_transform(pos: Sequence[float], euler_deg: Sequence[float]) -> np.ndarray:
    """
    将位置和欧拉角（度，内旋XYZ顺序）转换为4x4变换矩阵

    :param pos: 位置 [x, y, z]（米）
    :param euler_deg: 欧拉角 [x, y, z]（度，XYZ顺序）
    :return: 4x4变换矩阵
    """
    transform = np.identity(4, dtype=np.float64)
    rot = R.from_euler('XYZ', np.deg2rad(np.asarray(euler_deg, dtype=np.float64)), degrees=False)
    transform[:3, :3] = rot.as_matrix()
    transform[:3, 3] = np.asarray(pos, dtype=np.float64)
    return transform
