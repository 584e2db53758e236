"""
IK 目标参数化 (Parameterization)

工作空间目标的带标签联合类型：完整6D位姿、仅3D旋转、仅3D平移、2D方向、4D射线。
每次构造或 set_* 调用都会重新标记类型，并清除不属于新类型的字段；
读取与当前类型不符的字段会抛出 ValueError，而不是返回过期数据。
"""
import numpy as np
from enum import IntEnum
from typing import Optional, Sequence, Tuple

from ..utils import quaternion_to_rotation_matrix, rotation_matrix_to_quaternion, make_transform


class IkParameterizationType(IntEnum):
    NONE = 0
    TRANSFORM6D = 1
    ROTATION3D = 2
    TRANSLATION3D = 3
    DIRECTION2D = 4
    RAY4D = 5

    @classmethod
    def from_name(cls, name: str) -> 'IkParameterizationType':
        """按名称（大小写不敏感，如 'transform6d'）查找类型"""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown parameterization type: {name}") from None


def _as_vector3(values: Sequence[float], what: str) -> np.ndarray:
    vec = np.asarray(values, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"{what} must be a 3-element vector, got shape {vec.shape}")
    return vec


def _as_unit_vector3(values: Sequence[float], what: str) -> np.ndarray:
    vec = _as_vector3(values, what)
    norm = np.linalg.norm(vec)
    if norm < 1e-10:
        raise ValueError(f"{what} norm too small: {norm}, cannot normalize")
    return vec / norm


def _as_quaternion(values: Sequence[float]) -> np.ndarray:
    quat = np.asarray(values, dtype=np.float64)
    if quat.shape != (4,):
        raise ValueError(f"Quaternion must be a 4-element array, got shape {quat.shape}")
    norm = np.linalg.norm(quat)
    if norm < 1e-10:
        raise ValueError(f"Quaternion norm too small: {norm}, cannot normalize")
    return quat / norm


class Parameterization:
    """
    IK 目标。四元数格式为 [w, x, y, z]。

    用法::

        Parameterization.from_transform(T)            # 4x4 矩阵
        Parameterization.from_translation([x, y, z])
        Parameterization.from_ray(pos, direction)
    """

    def __init__(self):
        self._type = IkParameterizationType.NONE
        self._rotation: Optional[np.ndarray] = None
        self._translation: Optional[np.ndarray] = None
        self._direction: Optional[np.ndarray] = None

    # ---------- 构造 ----------

    @classmethod
    def from_transform(cls, transform) -> 'Parameterization':
        param = cls()
        param.set_transform(transform)
        return param

    @classmethod
    def from_rotation(cls, quaternion: Sequence[float]) -> 'Parameterization':
        param = cls()
        param.set_rotation(quaternion)
        return param

    @classmethod
    def from_translation(cls, translation: Sequence[float]) -> 'Parameterization':
        param = cls()
        param.set_translation(translation)
        return param

    @classmethod
    def from_direction(cls, direction: Sequence[float]) -> 'Parameterization':
        param = cls()
        param.set_direction(direction)
        return param

    @classmethod
    def from_ray(cls, position: Sequence[float], direction: Sequence[float]) -> 'Parameterization':
        param = cls()
        param.set_ray(position, direction)
        return param

    # ---------- set_*：每次调用都重新标记类型 ----------

    def _reset(self, param_type: IkParameterizationType):
        self._type = param_type
        self._rotation = None
        self._translation = None
        self._direction = None

    def set_transform(self, transform):
        """
        :param transform: 4x4 齐次矩阵，或 (quaternion, translation) 二元组
        """
        if isinstance(transform, tuple) and len(transform) == 2:
            rotation = _as_quaternion(transform[0])
            translation = _as_vector3(transform[1], "Translation")
        else:
            matrix = np.asarray(transform, dtype=np.float64)
            if matrix.shape != (4, 4):
                raise ValueError(f"Transform must be a 4x4 matrix or (quaternion, translation), got shape {matrix.shape}")
            rotation = rotation_matrix_to_quaternion(matrix[:3, :3])
            translation = matrix[:3, 3].copy()
        self._reset(IkParameterizationType.TRANSFORM6D)
        self._rotation = rotation
        self._translation = translation

    def set_rotation(self, quaternion: Sequence[float]):
        rotation = _as_quaternion(quaternion)
        self._reset(IkParameterizationType.ROTATION3D)
        self._rotation = rotation

    def set_translation(self, translation: Sequence[float]):
        translation = _as_vector3(translation, "Translation")
        self._reset(IkParameterizationType.TRANSLATION3D)
        self._translation = translation

    def set_direction(self, direction: Sequence[float]):
        direction = _as_unit_vector3(direction, "Direction")
        self._reset(IkParameterizationType.DIRECTION2D)
        self._direction = direction

    def set_ray(self, position: Sequence[float], direction: Sequence[float]):
        position = _as_vector3(position, "Ray position")
        direction = _as_unit_vector3(direction, "Ray direction")
        self._reset(IkParameterizationType.RAY4D)
        self._translation = position
        self._direction = direction

    # ---------- 读取 ----------

    def get_type(self) -> IkParameterizationType:
        return self._type

    def _require(self, *allowed: IkParameterizationType):
        if self._type not in allowed:
            names = "/".join(t.name for t in allowed)
            raise ValueError(f"Parameterization of type {self._type.name} has no {names} data")

    def get_transform(self) -> np.ndarray:
        """4x4 齐次矩阵（仅 TRANSFORM6D）"""
        self._require(IkParameterizationType.TRANSFORM6D)
        return make_transform(self._rotation, self._translation)

    def get_rotation(self) -> np.ndarray:
        """四元数 [w, x, y, z]（TRANSFORM6D / ROTATION3D）"""
        self._require(IkParameterizationType.TRANSFORM6D, IkParameterizationType.ROTATION3D)
        return self._rotation.copy()

    def get_rotation_matrix(self) -> np.ndarray:
        return quaternion_to_rotation_matrix(self.get_rotation())

    def get_translation(self) -> np.ndarray:
        """平移（TRANSFORM6D / TRANSLATION3D）"""
        self._require(IkParameterizationType.TRANSFORM6D, IkParameterizationType.TRANSLATION3D)
        return self._translation.copy()

    def get_direction(self) -> np.ndarray:
        """单位方向（DIRECTION2D / RAY4D）"""
        self._require(IkParameterizationType.DIRECTION2D, IkParameterizationType.RAY4D)
        return self._direction.copy()

    def get_ray(self) -> Tuple[np.ndarray, np.ndarray]:
        """(起点, 单位方向)（仅 RAY4D）"""
        self._require(IkParameterizationType.RAY4D)
        return self._translation.copy(), self._direction.copy()

    def __eq__(self, other):
        if not isinstance(other, Parameterization) or self._type != other._type:
            return False
        for mine, theirs in ((self._rotation, other._rotation),
                             (self._translation, other._translation),
                             (self._direction, other._direction)):
            if (mine is None) != (theirs is None):
                return False
            if mine is not None and not np.array_equal(mine, theirs):
                return False
        return True

    def __repr__(self):
        fields = []
        if self._rotation is not None:
            fields.append(f"rotation={np.round(self._rotation, 6).tolist()}")
        if self._translation is not None:
            fields.append(f"translation={np.round(self._translation, 6).tolist()}")
        if self._direction is not None:
            fields.append(f"direction={np.round(self._direction, 6).tolist()}")
        return f"<Parameterization {self._type.name} {' '.join(fields)}>"
