"""
模型层 (Model Layer)
场景图与机械臂描述：解析骨骼定义、实例化关节对象、维护父子层级，截取运动学子链

导出：
- JointNode: 抽象基类，定义所有关节的通用接口
- ActuatedJoint: 单自由度关节公共基类（轴、限位、权重）
- FixedJoint: 固定关节，无自由度，用于结构连接或末端执行器
- RevoluteJoint: 旋转关节，1自由度，绕固定轴旋转；无限位时在 ±pi 处回绕
- PrismaticJoint: 移动关节，1自由度，沿固定轴滑动
- Manipulator: 机械臂子链，提供指纹、限位、正向运动学
"""

from .joint import (
    JointNode,
    ActuatedJoint,
    FixedJoint,
    RevoluteJoint,
    PrismaticJoint,
    wrap_to_pi
)
from .manipulator import (
    Manipulator,
    build_ik_chain,
    compute_kinematics_hash
)

__all__ = [
    'JointNode',
    'ActuatedJoint',
    'FixedJoint',
    'RevoluteJoint',
    'PrismaticJoint',
    'wrap_to_pi',
    'Manipulator',
    'build_ik_chain',
    'compute_kinematics_hash'
]
