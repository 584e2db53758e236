"""
求解器注册表：名称 -> 解析 IK 函数工厂

注册表是显式对象，由使用方创建并持有，不存在进程级的全局表。
"""
import logging
from typing import Callable, Dict, List

from .analytic import AnalyticIkFunction
from .resolution import AnalyticIkSolver

logger = logging.getLogger(__name__)


AnalyticIkFactory = Callable[[], AnalyticIkFunction]


class IkSolverRegistry:
    """
    按机器人型号名称创建 AnalyticIkSolver。名称大小写不敏感。
    """

    def __init__(self):
        self._factories: Dict[str, AnalyticIkFactory] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def register(self, name: str, factory: AnalyticIkFactory, replace: bool = False):
        """
        :param name: 机器人型号名称
        :param factory: 无参工厂，返回 AnalyticIkFunction
        :param replace: 名称已存在时是否覆盖
        """
        key = self._key(name)
        if not key:
            raise ValueError("Solver name must not be empty")
        if key in self._factories and not replace:
            raise ValueError(f"IK solver '{name}' is already registered")
        self._factories[key] = factory

    def unregister(self, name: str):
        self._factories.pop(self._key(name), None)

    def clear(self):
        self._factories.clear()

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._factories

    def get_function(self, name: str) -> AnalyticIkFunction:
        key = self._key(name)
        if key not in self._factories:
            raise KeyError(f"Unknown IK solver '{name}'; available: {', '.join(self.names()) or 'none'}")
        return self._factories[key]()

    def create(self, name: str, step: float, **kwargs) -> AnalyticIkSolver:
        """
        创建（未绑定机械臂的）求解器

        :param name: 机器人型号名称
        :param step: 自由参数离散化步长，必填
        :param kwargs: 透传给 AnalyticIkSolver（validity、solution_tolerance、max_workers）
        """
        solver = AnalyticIkSolver(self.get_function(name), step, **kwargs)
        logger.debug("Created IK solver '%s' with step %s", name, step)
        return solver

    def create_from_command(self, command: str, **kwargs) -> AnalyticIkSolver:
        """
        由 "名称 步长" 形式的字符串创建求解器，例如 "planar3r 0.05"
        """
        tokens = command.split()
        if not tokens:
            raise ValueError("Empty solver command")
        if len(tokens) < 2:
            raise ValueError(f"Solver command '{command}' is missing the discretization step")
        if len(tokens) > 2:
            raise ValueError(f"Unexpected trailing arguments in solver command '{command}'")
        try:
            step = float(tokens[1])
        except ValueError:
            raise ValueError(f"Invalid discretization step '{tokens[1]}' in solver command '{command}'") from None
        return self.create(tokens[0], step, **kwargs)

    def __repr__(self):
        return f"<IkSolverRegistry: {', '.join(self.names())}>"
