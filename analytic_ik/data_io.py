"""
数据交换功能实现：骨骼定义、IK 目标、运行配置的读取与求解结果的导出
"""
import json
import os
import numpy as np
from typing import Dict, List, Optional, Tuple

from .model import JointNode, RevoluteJoint, PrismaticJoint, FixedJoint
from .solver import Parameterization, IkParameterizationType
from .utils import euler_to_transform, resolve_path


def load_skeleton(json_path: str) -> Tuple[JointNode, Dict[str, JointNode]]:
    """
    从skeleton.json加载骨骼定义，构建场景图

    :param json_path: skeleton.json文件路径
    :return: (root节点, 关节名称到节点的映射字典)
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return build_skeleton(data)


def build_skeleton(data: Dict) -> Tuple[JointNode, Dict[str, JointNode]]:
    """
    由骨骼定义字典构建场景图

    :param data: {"root_name": str, "joints": [{"name", "type", "offset", "parent", ...}]}
    :return: (root节点, 关节名称到节点的映射字典)
    """
    root_name = data['root_name']
    joints_data = data['joints']

    joint_map: Dict[str, JointNode] = {}

    for joint_data in joints_data:
        name = joint_data['name']
        joint_type = joint_data['type']
        offset = np.array(joint_data['offset'], dtype=np.float64)

        if name in joint_map:
            raise ValueError(f"Duplicate joint name: {name}")

        if joint_type == 'fixed':
            quat = None
            if joint_data.get('quaternion') is not None:
                quat = np.array(joint_data['quaternion'], dtype=np.float64)
            joint = FixedJoint(name, offset, quat)
        elif joint_type in ('revolute', 'prismatic'):
            axis = np.array(joint_data['axis'], dtype=np.float64)
            limits = None
            if joint_data.get('limits') is not None:
                limits = tuple(joint_data['limits'])
            weight = float(joint_data.get('weight', 1.0))
            joint_cls = RevoluteJoint if joint_type == 'revolute' else PrismaticJoint
            joint = joint_cls(name, offset, axis, limits, weight)
        else:
            raise ValueError(f"Unknown joint type: {joint_type}")

        joint_map[name] = joint

    # 建立父子关系
    for joint_data in joints_data:
        name = joint_data['name']
        parent_name = joint_data.get('parent')

        if parent_name is not None:
            if parent_name not in joint_map:
                raise ValueError(f"Parent '{parent_name}' not found for joint '{name}'")
            joint_map[parent_name].add_child(joint_map[name])

    if root_name not in joint_map:
        raise ValueError(f"Root node '{root_name}' not found")
    root = joint_map[root_name]

    initialize_tpose(root)

    return root, joint_map


def initialize_tpose(root: JointNode):
    """
    初始化所有关节到零位
    """
    def traverse(node: JointNode):
        if isinstance(node, (RevoluteJoint, PrismaticJoint)):
            node.q = 0.0
        for child in node.children:
            traverse(child)

    traverse(root)
    root.update_global_transform()


def find_effector(node: JointNode) -> Optional[JointNode]:
    """
    自动查找末端执行器：寻找没有子节点的 FixedJoint
    """
    if isinstance(node, FixedJoint) and len(node.children) == 0:
        return node
    for child in node.children:
        result = find_effector(child)
        if result is not None:
            return result
    return None


def parse_target(item: Dict) -> Parameterization:
    """
    将一条目标记录转换为 Parameterization

    支持的格式：
    - {"type": "transform6d", "pos": [x,y,z], "euler": [x,y,z]}（度，XYZ顺序），
      或 {"type": "transform6d", "pos": [...], "quaternion": [w,x,y,z]}
    - {"type": "rotation3d", "quaternion": [w,x,y,z]} 或 {"type": "rotation3d", "euler": [...]}
    - {"type": "translation3d", "translation": [x,y,z]}
    - {"type": "direction2d", "direction": [x,y,z]}
    - {"type": "ray4d", "pos": [x,y,z], "direction": [x,y,z]}
    """
    if 'type' not in item:
        raise ValueError(f"Target is missing 'type': {item}")
    param_type = IkParameterizationType.from_name(item['type'])

    if param_type == IkParameterizationType.TRANSFORM6D:
        if 'quaternion' in item:
            return Parameterization.from_transform((item['quaternion'], item['pos']))
        return Parameterization.from_transform(euler_to_transform(item['pos'], item.get('euler', [0.0, 0.0, 0.0])))
    elif param_type == IkParameterizationType.ROTATION3D:
        if 'quaternion' in item:
            return Parameterization.from_rotation(item['quaternion'])
        rot = euler_to_transform([0.0, 0.0, 0.0], item['euler'])
        return Parameterization.from_rotation(Parameterization.from_transform(rot).get_rotation())
    elif param_type == IkParameterizationType.TRANSLATION3D:
        return Parameterization.from_translation(item['translation'])
    elif param_type == IkParameterizationType.DIRECTION2D:
        return Parameterization.from_direction(item['direction'])
    elif param_type == IkParameterizationType.RAY4D:
        return Parameterization.from_ray(item['pos'], item['direction'])
    raise ValueError(f"Target type {param_type.name} cannot be solved")


def load_targets(json_path: str) -> List[Parameterization]:
    """
    从targets.json加载IK目标列表

    :param json_path: targets.json文件路径
    :return: Parameterization 列表（保持文件中的顺序）
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Targets file must contain a list, got {type(data).__name__}")
    return [parse_target(item) for item in data]


CONFIG_DEFAULTS = {
    'base': None,
    'effector': None,
    'output_path': 'solutions.json',
    'mode': 'nearest',
    'seed': None,
    'solution_tolerance': 1e-6,
    'max_workers': None,
    'log_level': 'INFO',
}


def load_config(config_path: str) -> Dict:
    """
    读取运行配置。solver 与 step 为必填项；路径相对于配置文件所在目录解析，
    'data:' 前缀指向包内 data 目录

    :param config_path: config.json 路径
    :return: 补全默认值后的配置字典
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        raw = json.load(f)

    for key in ('solver', 'step', 'skeleton_path', 'targets_path'):
        if raw.get(key) is None:
            raise ValueError(f"Config '{config_path}' is missing required key '{key}'")

    config = dict(CONFIG_DEFAULTS)
    config.update(raw)
    config['step'] = float(config['step'])
    if config['mode'] not in ('nearest', 'all'):
        raise ValueError(f"Config mode must be 'nearest' or 'all', got '{config['mode']}'")

    base_dir = os.path.dirname(os.path.abspath(config_path))
    for key in ('skeleton_path', 'targets_path', 'output_path'):
        config[key] = resolve_path(config[key], base_dir)
    return config


def export_solutions(results: List[Dict], joint_names: List[str], output_path: str):
    """
    导出求解结果 JSON

    :param results: 每个目标一条记录 {"target": int, "solutions": [np.ndarray], "residual": float 或 None}
    :param joint_names: 机械臂关节名称（与解向量顺序一致）
    :param output_path: 输出文件路径
    """
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

    targets_output = []
    for result in results:
        solutions = [
            {name: float(value) for name, value in zip(joint_names, solution)}
            for solution in result['solutions']
        ]
        targets_output.append({
            'target': result['target'],
            'success': len(solutions) > 0,
            'solutions': solutions,
            'residual': result.get('residual'),
        })

    output = {'joint_names': list(joint_names), 'targets': targets_output}
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
