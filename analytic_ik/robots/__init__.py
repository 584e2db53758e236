"""
内置解析 IK 函数

名称 -> (解析函数工厂, 机器人几何)。create_default_registry() 返回一个填好内置机器人的新注册表。
"""
from typing import Dict, Tuple

from ..solver import IkSolverRegistry
from ..solver.registry import AnalyticIkFactory
from .common import RobotGeometry
from .planar import PLANAR2R, PLANAR3R, get_planar2r, get_planar3r, get_planar3r_pose, solve_two_link
from .pantilt import PANTILT, get_pantilt
from .wrist import WRIST_ZYZ, get_wrist_zyz


BUILTIN_ROBOTS: Dict[str, Tuple[AnalyticIkFactory, RobotGeometry]] = {
    'planar2r': (get_planar2r, PLANAR2R),
    'planar3r': (get_planar3r, PLANAR3R),
    'planar3r_pose': (get_planar3r_pose, PLANAR3R),
    'pantilt': (get_pantilt, PANTILT),
    'wrist_zyz': (get_wrist_zyz, WRIST_ZYZ),
}


def create_default_registry() -> IkSolverRegistry:
    registry = IkSolverRegistry()
    for name, (factory, _) in BUILTIN_ROBOTS.items():
        registry.register(name, factory)
    return registry


def get_geometry(name: str) -> RobotGeometry:
    """内置求解器对应的机器人几何"""
    try:
        return BUILTIN_ROBOTS[name.strip().lower()][1]
    except KeyError:
        raise KeyError(f"Unknown built-in robot '{name}'") from None


__all__ = [
    'BUILTIN_ROBOTS',
    'RobotGeometry',
    'create_default_registry',
    'get_geometry',
    'solve_two_link',
    'PLANAR2R',
    'PLANAR3R',
    'PANTILT',
    'WRIST_ZYZ'
]
