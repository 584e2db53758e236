import copy
import numpy as np
import pytest

from analytic_ik import create_default_registry
from analytic_ik.data_io import build_skeleton
from analytic_ik.model import Manipulator
from analytic_ik.robots import PLANAR2R, PLANAR3R, PANTILT, WRIST_ZYZ


def manipulator_from(geometry, grasp_transform=None, edit=None):
    """
    按内置几何构建机械臂；edit(skeleton) 可在构建前修改骨骼定义的副本
    """
    skeleton = copy.deepcopy(geometry.skeleton)
    if edit is not None:
        edit(skeleton)
    _, joint_map = build_skeleton(skeleton)
    return Manipulator(geometry.name, joint_map[geometry.base], joint_map[geometry.effector], grasp_transform)


def joint_entry(skeleton, name):
    return next(j for j in skeleton['joints'] if j['name'] == name)


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def planar2r():
    return PLANAR2R.create_manipulator()


@pytest.fixture
def planar3r():
    return PLANAR3R.create_manipulator()


@pytest.fixture
def pantilt():
    return PANTILT.create_manipulator()


@pytest.fixture
def wrist():
    return WRIST_ZYZ.create_manipulator()


@pytest.fixture
def planar3r_solver(registry, planar3r):
    solver = registry.create('planar3r', 0.1)
    assert solver.init(planar3r)
    return solver


@pytest.fixture
def reachable_point(planar3r):
    """planar3r 在 [0.3, 0.5, -0.4] 处的末端位置"""
    return planar3r.forward_kinematics([0.3, 0.5, -0.4])[:3, 3]


def assert_transform_close(a, b, atol=1e-9):
    assert np.allclose(np.asarray(a), np.asarray(b), atol=atol)
