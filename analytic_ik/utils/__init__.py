"""
工具层 (Utils Layer)
四元数/齐次变换换算与资源路径解析
"""

from .quaternion_utils import (
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    make_transform,
    invert_transform,
    axis_angle_matrix,
    euler_to_transform
)
from .resource_path import resource_path, get_data_path, resolve_path

__all__ = [
    'quaternion_to_rotation_matrix',
    'rotation_matrix_to_quaternion',
    'make_transform',
    'invert_transform',
    'axis_angle_matrix',
    'euler_to_transform',
    'resource_path',
    'get_data_path',
    'resolve_path'
]
