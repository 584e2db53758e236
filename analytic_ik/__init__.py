"""
analytic_ik: 基于闭式（解析）IK 函数的离散化多解求解器

- model:  关节场景图与机械臂描述
- solver: 目标参数化、求解器接口、离散化多解求解、求解器注册表
- robots: 内置的闭式解（平面连杆臂、云台、ZYZ 手腕）
"""

from .model import Manipulator
from .solver import (
    AnalyticIkFunction,
    AnalyticIkSolver,
    FreeParameterDiscretizer,
    IkParameterizationType,
    IkSolverBase,
    IkSolverRegistry,
    Parameterization,
    SolverState
)
from .robots import create_default_registry

__version__ = "0.1.0"

__all__ = [
    'Manipulator',
    'AnalyticIkFunction',
    'AnalyticIkSolver',
    'FreeParameterDiscretizer',
    'IkParameterizationType',
    'IkSolverBase',
    'IkSolverRegistry',
    'Parameterization',
    'SolverState',
    'create_default_registry'
]
