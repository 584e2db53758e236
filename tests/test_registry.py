import pytest

from analytic_ik import create_default_registry
from analytic_ik.robots import BUILTIN_ROBOTS, get_geometry
from analytic_ik.robots.planar import get_planar2r
from analytic_ik.solver import AnalyticIkSolver, IkSolverRegistry, SolverState


def test_default_registry_names(registry):
    assert registry.names() == sorted(BUILTIN_ROBOTS)
    assert 'planar3r' in registry
    assert 'PLANAR3R' in registry
    assert 'puma' not in registry


def test_registries_are_independent():
    first, second = create_default_registry(), create_default_registry()
    first.unregister('pantilt')
    assert 'pantilt' not in first
    assert 'pantilt' in second


def test_create(registry):
    solver = registry.create('planar3r', 0.2, solution_tolerance=1e-4)
    assert isinstance(solver, AnalyticIkSolver)
    assert solver.state == SolverState.UNBOUND
    assert solver.discretizer.values()[-1] == 1.0
    assert solver.solution_tolerance == 1e-4
    assert solver.get_num_free_parameters() == 1


def test_create_from_command(registry):
    solver = registry.create_from_command('  Planar3R   0.05 ')
    assert solver.ik_function.name == 'planar3r'
    assert solver.discretizer.step == 0.05
    assert len(solver.discretizer.values()) == 21


@pytest.mark.parametrize('command', ['', 'planar3r', 'planar3r fine', 'planar3r 0.1 extra', 'planar3r 0'])
def test_malformed_command(registry, command):
    with pytest.raises(ValueError):
        registry.create_from_command(command)


def test_unknown_solver(registry):
    with pytest.raises(KeyError):
        registry.create('puma', 0.1)
    with pytest.raises(KeyError):
        registry.create_from_command('puma 0.1')
    with pytest.raises(KeyError):
        get_geometry('puma')


def test_register_and_replace():
    registry = IkSolverRegistry()
    registry.register('arm', get_planar2r)
    with pytest.raises(ValueError):
        registry.register('ARM', get_planar2r)
    registry.register('arm', get_planar2r, replace=True)
    with pytest.raises(ValueError):
        registry.register('  ', get_planar2r)
    assert registry.get_function('arm').num_joints == 2

    registry.clear()
    assert registry.names() == []
    with pytest.raises(KeyError):
        registry.get_function('arm')


def test_geometry_lookup():
    assert get_geometry('Planar3R_Pose').name == 'planar3r'
    assert get_geometry('wrist_zyz').get_skeleton_filename() == 'wrist_zyz.json'
