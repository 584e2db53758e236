"""
IK 批量求解（无界面）

用法: analytic-ik [config.json]
读取配置 -> 加载骨骼并截取机械臂 -> 从注册表创建求解器并绑定 -> 逐个目标求解 -> 导出 JSON
"""
import logging
import sys
import time
import numpy as np
from scipy.spatial.transform import Rotation as R
from typing import List, Optional

from .data_io import load_config, load_targets, export_solutions
from .model import Manipulator
from .robots import create_default_registry
from .solver import AnalyticIkSolver, IkParameterizationType, Parameterization

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'INFO'):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout
    )


def target_residual(manipulator: Manipulator, param: Parameterization, solution: np.ndarray) -> Optional[float]:
    """
    解的正向运动学与目标之间的误差：位置类目标为距离（米），旋转目标为角度（弧度）；
    方向与射线目标不计算
    """
    reached = manipulator.forward_kinematics(solution)
    param_type = param.get_type()
    if param_type == IkParameterizationType.TRANSFORM6D:
        target = param.get_transform()
        position_error = np.linalg.norm(target[:3, 3] - reached[:3, 3])
        rotation_error = R.from_matrix(target[:3, :3] @ reached[:3, :3].T).magnitude()
        return float(max(position_error, rotation_error))
    elif param_type == IkParameterizationType.TRANSLATION3D:
        return float(np.linalg.norm(param.get_translation() - reached[:3, 3]))
    elif param_type == IkParameterizationType.ROTATION3D:
        return float(R.from_matrix(param.get_rotation_matrix() @ reached[:3, :3].T).magnitude())
    return None


def solve_targets(solver: AnalyticIkSolver, targets: List[Parameterization], mode: str = 'nearest',
                  seed: Optional[List[float]] = None) -> List[dict]:
    """逐个目标求解；无解是正常结果，不中断批处理"""
    manipulator = solver.get_manipulator()
    results = []
    for index, param in enumerate(targets):
        if index % 10 == 0:
            sys.stdout.write(f"\r进度: {index}/{len(targets)}")
            sys.stdout.flush()

        if mode == 'all':
            solutions = solver.solve_all(param)
        else:
            solution = solver.solve(param, seed=seed)
            solutions = [] if solution is None else [solution]

        residuals = [target_residual(manipulator, param, s) for s in solutions]
        residuals = [r for r in residuals if r is not None]
        results.append({
            'target': index,
            'solutions': solutions,
            'residual': max(residuals) if residuals else None,
        })
    sys.stdout.write(f"\r进度: {len(targets)}/{len(targets)}\n")
    return results


def run_solver(config_path: str = "config.json") -> bool:
    config = load_config(config_path)
    setup_logging(config['log_level'])

    print("----------- Analytic IK Solver -----------")
    print(f"配置加载: {config_path}")

    manipulator = Manipulator.from_skeleton(
        config['skeleton_path'],
        base_name=config['base'],
        effector_name=config['effector']
    )
    print(f"机械臂: {manipulator.name}，{manipulator.get_num_joints()} 个关节")

    registry = create_default_registry()
    solver = registry.create(
        config['solver'],
        config['step'],
        solution_tolerance=config['solution_tolerance'],
        max_workers=config['max_workers']
    )
    if not solver.init(manipulator):
        print(f"❌ 求解器绑定失败: {solver.binding_error}")
        return False

    targets = load_targets(config['targets_path'])
    print(f"目标加载成功，共 {len(targets)} 个")

    start_time = time.time()
    results = solve_targets(solver, targets, config['mode'], config['seed'])
    duration = time.time() - start_time
    solved = sum(1 for r in results if r['solutions'])
    print(f"求解完成，耗时: {duration:.2f} 秒，{solved}/{len(targets)} 个目标有解")

    print(f"正在导出到: {config['output_path']} ...")
    export_solutions(results, manipulator.get_joint_names(), config['output_path'])
    print("✅ 任务完成！")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else "config.json"
    try:
        ok = run_solver(config_path)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ 运行失败: {e}")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
