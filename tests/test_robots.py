import numpy as np
import pytest

from analytic_ik.robots import PLANAR2R, PLANAR3R, PANTILT, WRIST_ZYZ, solve_two_link
from analytic_ik.solver import AnalyticIkFunction, AnalyticIkSolver, IkParameterizationType, Parameterization
from analytic_ik.utils import axis_angle_matrix, make_transform, rotation_matrix_to_quaternion

from conftest import assert_transform_close, joint_entry, manipulator_from


def rotated_base(skeleton):
    """把 base 节点移到 (1, 2, 0) 并绕 z 轴转 90 度"""
    base = joint_entry(skeleton, 'base')
    base['offset'] = [1.0, 2.0, 0.0]
    base['quaternion'] = [np.sqrt(0.5), 0.0, 0.0, np.sqrt(0.5)]


def bind(registry, name, manipulator, step=0.1):
    solver = registry.create(name, step)
    assert solver.init(manipulator), solver.binding_error
    return solver


def test_two_link_branches():
    solutions = solve_two_link(1.0, 0.8, 1.0, 0.8)
    assert len(solutions) == 2
    # sin(theta2) >= 0 的一支在前
    assert solutions[0][1] >= 0.0 >= solutions[1][1]
    assert solve_two_link(3.0, 0.0, 1.0, 0.8) == []
    # 完全伸直时两支重合
    straight = solve_two_link(1.8, 0.0, 1.0, 0.8)
    assert np.allclose(straight[0], [0.0, 0.0])


def test_planar2r(registry, planar2r):
    solver = bind(registry, 'planar2r', planar2r)
    q = np.array([0.4, 1.0])
    target = planar2r.forward_kinematics(q)[:3, 3]
    param = Parameterization.from_translation(target)

    solutions = solver.solve_all(param)
    assert len(solutions) == 2
    for solution in solutions:
        assert np.allclose(planar2r.forward_kinematics(solution)[:3, 3], target, atol=1e-9)
    assert np.allclose(solver.solve(param, seed=q), q, atol=1e-9)

    assert solver.solve_all(Parameterization.from_translation([target[0], target[1], 0.1])) == []


def test_planar2r_with_moved_base(registry):
    manipulator = manipulator_from(PLANAR2R, edit=rotated_base)
    solver = bind(registry, 'planar2r', manipulator)
    q = np.array([-0.6, 0.9])
    target = manipulator.forward_kinematics(q)[:3, 3]

    solution = solver.solve(Parameterization.from_translation(target), seed=q)
    assert np.allclose(solution, q, atol=1e-9)


def test_planar3r_pose_with_grasp_and_base(registry):
    grasp = make_transform([np.cos(np.pi / 12), 0.0, 0.0, np.sin(np.pi / 12)], [0.1, 0.05, 0.0])
    manipulator = manipulator_from(PLANAR3R, grasp_transform=grasp, edit=rotated_base)
    solver = bind(registry, 'planar3r_pose', manipulator, step=1.0)
    assert solver.get_num_free_parameters() == 0

    q = np.array([0.3, 0.5, -0.4])
    target = manipulator.forward_kinematics(q)
    param = Parameterization.from_transform(target)

    solutions = solver.solve_all(param)
    assert solutions
    for solution in solutions:
        assert_transform_close(manipulator.forward_kinematics(solution), target)
    assert np.allclose(solver.solve(param, seed=q), q, atol=1e-9)


def test_planar3r_pose_rejects_out_of_plane(registry, planar3r):
    solver = bind(registry, 'planar3r_pose', planar3r, step=1.0)
    target = planar3r.forward_kinematics([0.3, 0.5, -0.4])
    target[:3, :3] = target[:3, :3] @ axis_angle_matrix(np.array([1.0, 0.0, 0.0]), 0.2)
    assert solver.solve(Parameterization.from_transform(target)) is None


def test_pantilt_points_camera(registry, pantilt):
    solver = bind(registry, 'pantilt', pantilt)
    q = np.array([0.7, 0.4])
    direction = pantilt.forward_kinematics(q)[:3, 0]
    param = Parameterization.from_direction(direction)

    # 翻转分支的 tilt 超出 ±pi/2 限位
    solutions = solver.solve_all(param)
    assert len(solutions) == 1
    assert np.allclose(solutions[0], q, atol=1e-9)
    assert np.allclose(pantilt.forward_kinematics(solver.solve(param))[:3, 0], direction, atol=1e-9)


@pytest.mark.parametrize('direction', [[0.0, 0.0, -1.0], [0.0, 0.0, 1.0]])
def test_pantilt_vertical(registry, pantilt, direction):
    solver = bind(registry, 'pantilt', pantilt)
    solution = solver.solve(Parameterization.from_direction(direction))
    assert solution is not None
    assert solution[0] == 0.0
    assert np.allclose(pantilt.forward_kinematics(solution)[:3, 0], direction, atol=1e-9)


def test_wrist_both_branches(registry, wrist):
    solver = bind(registry, 'wrist_zyz', wrist)
    q = np.array([0.3, 0.7, -1.2])
    rot = wrist.forward_kinematics(q)[:3, :3]
    param = Parameterization.from_rotation(rotation_matrix_to_quaternion(rot))

    solutions = solver.solve_all(param)
    assert len(solutions) == 2
    for solution in solutions:
        assert np.allclose(wrist.forward_kinematics(solution)[:3, :3], rot, atol=1e-9)
    assert np.allclose(solver.solve(param, seed=q), q, atol=1e-9)


def test_wrist_singular(registry, wrist):
    solver = bind(registry, 'wrist_zyz', wrist)
    rot = wrist.forward_kinematics([0.4, 0.0, 0.3])[:3, :3]
    solutions = solver.solve_all(Parameterization.from_rotation(rotation_matrix_to_quaternion(rot)))
    assert len(solutions) == 1
    assert np.allclose(solutions[0], [0.0, 0.0, 0.7], atol=1e-9)


def test_wrist_with_grasp_rotation(registry):
    grasp = np.identity(4)
    grasp[:3, :3] = axis_angle_matrix(np.array([1.0, 0.0, 0.0]), np.pi / 2)
    manipulator = WRIST_ZYZ.create_manipulator(grasp)
    solver = bind(registry, 'wrist_zyz', manipulator)

    rot = manipulator.forward_kinematics([-0.5, 1.1, 2.0])[:3, :3]
    solution = solver.solve(Parameterization.from_rotation(rotation_matrix_to_quaternion(rot)))
    assert np.allclose(manipulator.forward_kinematics(solution)[:3, :3], rot, atol=1e-9)


def test_targets_are_converted_to_base_frame():
    seen = []

    def recording_ik(pose, free_values):
        seen.append(pose)
        return []

    manipulator = manipulator_from(PANTILT, edit=rotated_base)
    for ik_type, param in [
        (IkParameterizationType.TRANSLATION3D, Parameterization.from_translation([1.0, 3.0, 0.5])),
        (IkParameterizationType.DIRECTION2D, Parameterization.from_direction([0.0, 1.0, 0.0])),
        (IkParameterizationType.RAY4D, Parameterization.from_ray([1.0, 3.0, 0.5], [0.0, 1.0, 0.0])),
    ]:
        function = AnalyticIkFunction(name='recording', ik=recording_ik, num_joints=2, ik_type=ik_type)
        solver = AnalyticIkSolver(function, 1.0)
        assert solver.init(manipulator)
        assert solver.solve(param) is None

    translation, direction, ray = seen
    assert np.allclose(translation.get_translation(), [1.0, 0.0, 0.5])
    assert np.allclose(direction.get_direction(), [1.0, 0.0, 0.0])
    position, ray_direction = ray.get_ray()
    assert np.allclose(position, [1.0, 0.0, 0.5])
    assert np.allclose(ray_direction, [1.0, 0.0, 0.0])
