"""
IK 求解器接口

每个 IK 求解器都定义在某个机械臂（机器人关节的一个子集）上：给定末端执行器在工作空间中的目标，
求出把末端带到该处的关节构型。IK 解通常存在零空间，因此求解器会暴露自由参数，
用来在零空间内移动关节，每个自由参数的取值范围都是 [0,1]。
"""
import numpy as np
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

from ..model import Manipulator
from .parameterization import Parameterization


ValidityPredicate = Callable[[np.ndarray], bool]

# False/None: 不做有效性检查；True: 使用构造时绑定的谓词；callable: 本次调用使用的谓词
ValidityCheck = Union[bool, None, ValidityPredicate]


class SolverState(Enum):
    UNBOUND = 'unbound'
    BOUND = 'bound'
    INVALID = 'invalid'


class IkSolverBase(ABC):
    """
    所有 IK 求解器的基类。失败以返回值表达（None 或空列表），不抛异常；
    输入格式错误（自由参数长度不符、不支持的目标类型等）抛出 ValueError。
    """

    @abstractmethod
    def init(self, manipulator: Manipulator) -> bool:
        """
        将求解器绑定到一个机械臂。只能绑定一次。

        :param manipulator: 求解器所作用的机械臂
        :return: 关节数与运动学指纹都匹配时返回 True
        """
        pass

    @abstractmethod
    def get_manipulator(self) -> Optional[Manipulator]:
        pass

    @abstractmethod
    def get_num_free_parameters(self) -> int:
        """
        :return: 零空间自由参数的个数，每个参数的取值范围都是 [0,1]
        """
        pass

    @abstractmethod
    def get_free_parameters(self) -> Optional[np.ndarray]:
        """
        由机械臂当前关节状态反算自由参数

        :return: 长度为 get_num_free_parameters() 的 [0,1] 向量；未绑定或绑定无效时为 None
        """
        pass

    @abstractmethod
    def solve(self, param: Parameterization, seed: Optional[Sequence[float]] = None,
              check_validity: ValidityCheck = False,
              free_parameters: Optional[Sequence[float]] = None) -> Optional[np.ndarray]:
        """
        返回一个关节构型。

        :param param: 末端要到达的目标。目标已考虑机械臂的抓取坐标系
        :param seed: 返回关节距离上最接近 seed 的解；为 None 时返回网格顺序上第一个可行解
        :param check_validity: 是否只返回通过有效性检查（如碰撞检测）的解
        :param free_parameters: 零空间自由参数，取值 [0,1]；为 None 时遍历离散网格
        :return: 关节向量；无解时为 None
        """
        pass

    @abstractmethod
    def solve_all(self, param: Parameterization, check_validity: ValidityCheck = False,
                  free_parameters: Optional[Sequence[float]] = None) -> List[np.ndarray]:
        """
        返回所有（去重后的）关节构型。

        :param param: 末端要到达的目标
        :param check_validity: 是否只返回通过有效性检查的解
        :param free_parameters: 零空间自由参数；为 None 时遍历离散网格
        :return: 解的列表；无解时为空列表
        """
        pass
