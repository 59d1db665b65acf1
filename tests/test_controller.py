import math
import random

import numpy as np
import pytest

from clothsim.cloth import ClothMesh
from clothsim.controller import ClothController, ControlTarget, MotionKind


def _cloth(size=3):
    cloth = ClothMesh()
    cloth.create_grid(size, size, 0.1)
    return cloth


def test_control_target_defaults_match_source():
    target = ControlTarget()
    assert target.position_gain == 1000.0
    assert target.velocity_gain == 100.0
    assert target.max_force == 100.0
    assert not target.position_control_active


def test_add_position_control_registers_vertex():
    controller = ClothController()
    controller.add_position_control(4, (1.0, 2.0, 3.0))
    assert controller.is_controlled(4)
    assert not controller.is_controlled(5)
    assert controller.control_count() == 1
    target = controller.targets[4]
    assert np.allclose(target.target_position, [1.0, 2.0, 3.0])
    assert target.position_gain == 1000.0
    assert target.max_force == 100.0


def test_velocity_control_defaults():
    controller = ClothController()
    controller.add_velocity_control(2, (0.0, 1.0, 0.0))
    target = controller.targets[2]
    assert target.velocity_control_active
    assert target.velocity_gain == 100.0
    assert target.max_force == 50.0


def test_update_on_unknown_vertex_is_ignored():
    controller = ClothController()
    controller.update_position_target(7, (1.0, 1.0, 1.0))
    controller.update_velocity_target(7, (1.0, 1.0, 1.0))
    controller.update_force_target(7, (1.0, 1.0, 1.0))
    assert controller.control_count() == 0


def test_update_force_target_changes_control_force():
    controller = ClothController()
    controller.add_force_control(1, (1.0, 0.0, 0.0))
    controller.update_force_target(1, (0.0, 2.0, 0.0))
    assert np.allclose(controller.control_force(1), [0.0, 2.0, 0.0])
    assert np.allclose(controller.control_force(9), [0.0, 0.0, 0.0])


def test_remove_control_clears_trajectory_and_pattern():
    controller = ClothController()
    controller.set_trajectory(0, [(0, 0, 0), (1, 0, 0)], [0.0, 1.0])
    controller.add_sinusoidal_motion(1, (0, 0, 0), (0, 1, 0), 1.0)
    controller.remove_control(0)
    assert not controller.is_controlled(0)
    assert 0 not in controller.trajectories
    assert controller.controlled_vertices() == [1]
    controller.remove_all_controls()
    assert controller.control_count() == 0
    assert not controller.motion_patterns


def test_force_control_changes_velocity():
    cloth = _cloth()
    controller = ClothController()
    controller.add_force_control(0, (1.0, 0.0, 0.0))
    dt = 0.01
    controller.apply_controls(cloth, dt)
    assert np.allclose(cloth.velocities[0], [dt, 0.0, 0.0])
    assert np.allclose(cloth.velocities[1], [0.0, 0.0, 0.0])
    assert controller.current_time == pytest.approx(dt)


def test_position_force_is_clamped_to_max_force():
    cloth = _cloth()
    controller = ClothController()
    start = cloth.vertices[0].position.copy()
    controller.add_position_control(0, start + np.array([10.0, 0.0, 0.0]), gain=1000.0, max_force=100.0)
    dt = 0.01
    controller.apply_controls(cloth, dt)
    change = cloth.velocities[0]
    assert np.linalg.norm(change) == pytest.approx(100.0 * dt)
    assert change[0] > 0.0


def test_target_at_current_position_leaves_velocity():
    cloth = _cloth()
    controller = ClothController()
    controller.add_position_control(3, cloth.vertices[3].position)
    controller.apply_controls(cloth, 0.01)
    assert np.allclose(cloth.velocities[3], 0.0)


def test_out_of_range_vertex_is_skipped():
    cloth = _cloth()
    controller = ClothController()
    controller.add_force_control(100, (1.0, 0.0, 0.0))
    controller.apply_controls(cloth, 0.01)
    assert np.allclose(cloth.velocities, 0.0)


@pytest.mark.parametrize(
    "positions, times",
    [([], []), ([(0, 0, 0), (1, 0, 0)], [0.0]), ([(0, 0, 0)], [0.0, 1.0])],
)
def test_invalid_trajectory_raises(positions, times):
    controller = ClothController()
    with pytest.raises(ValueError):
        controller.set_trajectory(0, positions, times)
    assert not controller.is_controlled(0)


def test_trajectory_interpolates_linearly():
    cloth = _cloth()
    controller = ClothController()
    controller.set_trajectory(0, [(0, 0, 0), (1, 0, 0)], [0.0, 1.0])
    assert np.allclose(controller.targets[0].target_position, [0.0, 0.0, 0.0])
    controller.apply_controls(cloth, 0.5)
    assert np.allclose(controller.targets[0].target_position, [0.5, 0.0, 0.0])


def test_trajectory_holds_last_position_when_not_looping():
    cloth = _cloth()
    controller = ClothController()
    controller.set_trajectory(0, [(0, 0, 0), (1, 0, 0)], [0.0, 1.0], loop=False)
    controller.apply_controls(cloth, 1.5)
    assert np.allclose(controller.targets[0].target_position, [1.0, 0.0, 0.0])


def test_trajectory_loops():
    cloth = _cloth()
    controller = ClothController()
    controller.set_trajectory(0, [(0, 0, 0), (1, 0, 0)], [0.0, 1.0], loop=True)
    controller.apply_controls(cloth, 1.5)
    assert np.allclose(controller.targets[0].target_position, [0.5, 0.0, 0.0])


def test_circular_motion_stays_on_circle():
    cloth = _cloth()
    controller = ClothController()
    center = np.array([0.5, 1.0, 0.5])
    radius = 0.2
    controller.add_circular_motion(0, center, radius, 1.0)
    assert controller.motion_patterns[0].kind is MotionKind.CIRCULAR
    assert np.allclose(controller.targets[0].target_position, center + [radius, 0, 0])
    axis = np.array([0.0, 1.0, 0.0])
    for _ in range(5):
        controller.apply_controls(cloth, 0.07)
        offset = controller.targets[0].target_position - center
        assert np.linalg.norm(offset) == pytest.approx(radius)
        assert np.dot(offset, axis) == pytest.approx(0.0, abs=1e-12)


def test_sinusoidal_motion_reaches_amplitude_at_quarter_period():
    cloth = _cloth()
    controller = ClothController()
    center = np.array([0.0, 1.0, 0.0])
    amplitude = np.array([0.0, 0.3, 0.0])
    controller.add_sinusoidal_motion(2, center, amplitude, 1.0)
    assert np.allclose(controller.targets[2].target_position, center)
    controller.apply_controls(cloth, 0.25)
    assert np.allclose(controller.targets[2].target_position, center + amplitude)


def test_wind_force_without_turbulence():
    controller = ClothController()
    controller.add_wind_force([0, 1, 2], (0.0, 0.0, 2.0), 5.0)
    assert controller.controlled_vertices() == [0, 1, 2]
    for index in (0, 1, 2):
        assert np.allclose(controller.control_force(index), [0.0, 0.0, 5.0])


def test_wind_turbulence_is_bounded():
    controller = ClothController(rng=random.Random(1))
    strength, turbulence = 4.0, 0.5
    controller.add_wind_force(range(10), (1.0, 0.0, 0.0), strength, turbulence)
    base = np.array([strength, 0.0, 0.0])
    for index in range(10):
        deviation = np.linalg.norm(controller.control_force(index) - base)
        assert deviation <= turbulence * strength * 0.5 + 1e-12


def test_velocity_control_drives_toward_target():
    cloth = _cloth()
    controller = ClothController()
    controller.add_velocity_control(1, (0.0, 0.1, 0.0), gain=100.0, max_force=50.0)
    dt = 0.001
    controller.apply_controls(cloth, dt)
    velocity = cloth.velocities[1]
    assert velocity[1] > 0.0
    assert velocity[1] < 0.1
    assert math.isclose(velocity[0], 0.0) and math.isclose(velocity[2], 0.0)