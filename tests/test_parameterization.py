import numpy as np
import pytest

from analytic_ik.solver import IkParameterizationType, Parameterization


def test_default_is_none():
    param = Parameterization()
    assert param.get_type() == IkParameterizationType.NONE
    with pytest.raises(ValueError):
        param.get_translation()


def test_transform_from_matrix():
    transform = np.identity(4)
    transform[:3, 3] = [1.0, 2.0, 3.0]
    param = Parameterization.from_transform(transform)
    assert param.get_type() == IkParameterizationType.TRANSFORM6D
    assert np.allclose(param.get_transform(), transform)
    assert np.allclose(param.get_rotation(), [1.0, 0.0, 0.0, 0.0])
    assert np.allclose(param.get_translation(), [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        param.get_direction()


def test_transform_from_quaternion_and_translation():
    s = np.sqrt(0.5)
    param = Parameterization.from_transform(([s, 0.0, 0.0, s], [0.5, 0.0, 0.0]))
    rot = param.get_rotation_matrix()
    # 绕 z 轴 90 度
    assert np.allclose(rot @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
    assert np.allclose(param.get_transform()[:3, 3], [0.5, 0.0, 0.0])


def test_rotation_only():
    param = Parameterization.from_rotation([2.0, 0.0, 0.0, 0.0])
    assert param.get_type() == IkParameterizationType.ROTATION3D
    assert np.allclose(param.get_rotation(), [1.0, 0.0, 0.0, 0.0])
    with pytest.raises(ValueError):
        param.get_translation()
    with pytest.raises(ValueError):
        param.get_transform()


def test_direction_is_normalized():
    param = Parameterization.from_direction([0.0, 3.0, 4.0])
    assert param.get_type() == IkParameterizationType.DIRECTION2D
    assert np.allclose(param.get_direction(), [0.0, 0.6, 0.8])
    with pytest.raises(ValueError):
        param.get_ray()


def test_ray():
    param = Parameterization.from_ray([1.0, 0.0, 0.0], [0.0, 0.0, 2.0])
    position, direction = param.get_ray()
    assert np.allclose(position, [1.0, 0.0, 0.0])
    assert np.allclose(direction, [0.0, 0.0, 1.0])
    assert np.allclose(param.get_direction(), direction)
    with pytest.raises(ValueError):
        param.get_translation()


def test_set_restamps_type_and_clears_fields():
    param = Parameterization.from_transform(np.identity(4))
    param.set_translation([1.0, 2.0, 3.0])
    assert param.get_type() == IkParameterizationType.TRANSLATION3D
    with pytest.raises(ValueError):
        param.get_rotation()

    param.set_direction([1.0, 0.0, 0.0])
    assert param.get_type() == IkParameterizationType.DIRECTION2D
    with pytest.raises(ValueError):
        param.get_translation()


def test_invalid_inputs_keep_previous_value():
    param = Parameterization.from_translation([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        param.set_direction([0.0, 0.0, 0.0])
    with pytest.raises(ValueError):
        param.set_transform(np.identity(3))
    with pytest.raises(ValueError):
        param.set_rotation([1.0, 0.0, 0.0])
    assert param.get_type() == IkParameterizationType.TRANSLATION3D
    assert np.allclose(param.get_translation(), [1.0, 2.0, 3.0])


def test_accessors_return_copies():
    param = Parameterization.from_translation([1.0, 2.0, 3.0])
    param.get_translation()[0] = 100.0
    assert param.get_translation()[0] == 1.0


def test_equality():
    a = Parameterization.from_translation([1.0, 2.0, 3.0])
    b = Parameterization.from_translation([1.0, 2.0, 3.0])
    c = Parameterization.from_direction([1.0, 2.0, 3.0])
    assert a == b
    assert a != c


def test_type_from_name():
    assert IkParameterizationType.from_name('Transform6D') == IkParameterizationType.TRANSFORM6D
    assert IkParameterizationType.from_name(' ray4d ') == IkParameterizationType.RAY4D
    assert int(IkParameterizationType.DIRECTION2D) == 4
    with pytest.raises(ValueError):
        IkParameterizationType.from_name('lookat3d')
