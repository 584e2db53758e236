"""
求解层 (Solver Layer)
目标参数化、解析 IK 函数描述、自由参数离散化、求解器接口与离散化多解求解器、求解器注册表
"""

from .parameterization import Parameterization, IkParameterizationType
from .analytic import AnalyticIkFunction
from .discretizer import FreeParameterDiscretizer, fraction_to_value, value_to_fraction
from .ik_solver import IkSolverBase, SolverState, ValidityPredicate
from .resolution import AnalyticIkSolver, IkCandidate
from .registry import IkSolverRegistry

__all__ = [
    'Parameterization',
    'IkParameterizationType',
    'AnalyticIkFunction',
    'FreeParameterDiscretizer',
    'fraction_to_value',
    'value_to_fraction',
    'IkSolverBase',
    'SolverState',
    'ValidityPredicate',
    'AnalyticIkSolver',
    'IkCandidate',
    'IkSolverRegistry'
]
