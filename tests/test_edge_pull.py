import numpy as np
import pytest

from clothsim.controller import ClothController
from clothsim.edge_pull import (
    PullDirection,
    build_cloth,
    edge_vertices,
    main,
    pull_vector,
    reset_cloth,
    start_pulling,
)
from clothsim.integrator import SemiImplicitEulerIntegrator


@pytest.mark.parametrize(
    "direction, expected",
    [
        (PullDirection.FORWARD, (0.0, 0.0, 0.3)),
        (PullDirection.BACKWARD, (0.0, 0.0, -0.3)),
        (PullDirection.RIGHT, (0.3, 0.0, 0.0)),
        (PullDirection.LEFT, (-0.3, 0.0, 0.0)),
        (PullDirection.UP, (0.0, 0.3, 0.0)),
    ],
)
def test_pull_vector(direction, expected):
    assert np.allclose(pull_vector(direction, 0.3), expected)


def test_pull_vector_has_requested_length():
    for direction in PullDirection:
        assert np.linalg.norm(pull_vector(direction, 0.7)) == pytest.approx(0.7)


def test_direction_labels():
    assert PullDirection.FORWARD.label == "Forward (+Z)"
    assert PullDirection("Up (+Y)") is PullDirection.UP


def test_build_cloth_flat_at_half_height():
    cloth = build_cloth()
    assert cloth.vertex_count() == 100
    assert np.allclose(cloth.vertex_matrix()[:, 1], 0.5)
    assert cloth.properties.stiffness == 800.0
    assert not cloth.pinned.any()


def test_edge_vertices():
    cloth = build_cloth()
    assert edge_vertices(cloth) == [9, 19, 29, 39, 49, 59, 69, 79, 89, 99]


def test_start_pulling_sets_targets():
    cloth = build_cloth()
    controller = ClothController()
    controller.add_force_control(0, (1.0, 0.0, 0.0))
    vertices = edge_vertices(cloth)
    pull = start_pulling(cloth, controller, vertices, PullDirection.RIGHT, 0.4, 0.1, 1500.0)
    assert np.allclose(pull, (0.4, 0.0, 0.0))
    assert sorted(controller.controlled_vertices()) == vertices
    for index in vertices:
        target = controller.targets[index]
        expected = cloth.vertices[index].position + pull + np.array([0.0, 0.1, 0.0])
        assert np.allclose(target.target_position, expected)
        assert target.position_gain == 1500.0
        assert target.max_force == 100.0


def test_pulling_moves_edge_forward():
    cloth = build_cloth()
    controller = ClothController()
    integrator = SemiImplicitEulerIntegrator()
    vertices = edge_vertices(cloth)
    before = cloth.vertex_matrix()[vertices, 2].mean()
    start_pulling(cloth, controller, vertices, PullDirection.FORWARD, 0.3, 0.2, 1200.0)
    for _ in range(5):
        controller.apply_controls(cloth, 0.002)
        integrator.step(cloth, 0.002)
    after = cloth.vertex_matrix()[vertices, 2].mean()
    assert after > before


def test_reset_restores_initial_state():
    cloth = build_cloth()
    initial = cloth.vertex_matrix().copy()
    controller = ClothController()
    integrator = SemiImplicitEulerIntegrator()
    start_pulling(cloth, controller, edge_vertices(cloth), PullDirection.UP, 0.3, 0.2, 1200.0)
    for _ in range(3):
        controller.apply_controls(cloth, 0.002)
        integrator.step(cloth, 0.002)
    assert not np.allclose(cloth.vertex_matrix(), initial)

    reset_cloth(cloth, controller)
    assert np.allclose(cloth.vertex_matrix(), initial)
    assert np.allclose(cloth.velocities, 0.0)
    assert controller.control_count() == 0


def test_main_runs(capsys):
    assert main(["--frames", "2", "--direction", "up"]) == 0
    out = capsys.readouterr().out
    assert "Started pulling edge in direction: Up (+Y)" in out
    assert "Active controls: 10" in out


def test_main_rejects_unknown_direction():
    with pytest.raises(SystemExit):
        main(["--direction", "sideways"])