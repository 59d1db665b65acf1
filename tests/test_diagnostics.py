import numpy as np
import pytest

from clothsim.cloth import ClothMesh
from clothsim.diagnostics import (
    DebugInfo,
    compute_debug_info,
    force_summary,
    position_bounds,
    velocity_summary,
    vertex_report,
)


@pytest.fixture
def cloth():
    mesh = ClothMesh()
    mesh.create_grid(3, 3, 1.0)
    return mesh


def test_counts_pinned_and_active(cloth):
    cloth.pin_corners()
    info = compute_debug_info(cloth)
    assert info.pinned_vertices == 4
    assert info.active_vertices == 5


def test_rest_state_has_no_spring_force(cloth):
    info = compute_debug_info(cloth)
    assert info.spring_force_magnitude == pytest.approx(0.0)
    assert info.total_force == 0.0
    assert info.total_velocity == 0.0


def test_gravity_magnitude_matches_properties(cloth):
    info = compute_debug_info(cloth)
    assert info.gravity_magnitude == pytest.approx(np.linalg.norm(cloth.properties.gravity))
    assert info.gravity_magnitude == pytest.approx(9.81)


def test_stretched_spring_contributes():
    mesh = ClothMesh()
    mesh.create_grid(2, 1, 1.0)
    mesh.set_vertex_position(1, (1.5, 1.0, 0.0))
    info = compute_debug_info(mesh)
    assert info.spring_force_magnitude == pytest.approx(mesh.properties.stiffness * 0.5)


def test_pinned_forces_are_excluded(cloth):
    cloth.forces[0] = (3.0, 4.0, 0.0)
    cloth.forces[1] = (0.0, 0.0, 2.0)
    cloth.velocities[1] = (0.0, 1.0, 0.0)
    cloth.pin_vertex(0)
    info = compute_debug_info(cloth)
    assert info.total_force == pytest.approx(2.0)
    assert info.total_velocity == pytest.approx(1.0)


def test_report_lines():
    info = DebugInfo(active_vertices=3, pinned_vertices=1, total_force=2.5)
    lines = info.report().splitlines()
    assert lines[0] == "=== DEBUG INFO ==="
    assert lines[1] == "Active vertices: 3/4"
    assert lines[2] == "Total force magnitude: 2.5"
    assert lines[-1] == "=================="


def test_force_summary(cloth):
    cloth.forces[2] = (3.0, 4.0, 0.0)
    line = force_summary(cloth, "after gravity")
    assert line == "after gravity - Total force magnitude: 5, Non-zero forces: 1/9"


def test_velocity_summary_counts_nonzero(cloth):
    cloth.velocities[0] = (1.0, 0.0, 0.0)
    cloth.velocities[4] = (0.0, 2.0, 0.0)
    line = velocity_summary(cloth, "step")
    assert line.endswith("Non-zero velocities: 2/9")
    assert "Total velocity magnitude: 3," in line


def test_position_bounds(cloth):
    line = position_bounds(cloth, "start")
    assert line == "start - Position bounds: min=0 1 0, max=2 1 2"


def test_position_bounds_empty_mesh_raises():
    with pytest.raises(ValueError):
        position_bounds(ClothMesh(), "empty")


def test_vertex_report(cloth):
    cloth.pin_vertex(4)
    text = vertex_report(cloth, 4)
    assert text.splitlines()[0] == "Vertex 4 detailed info:"
    assert "  Pinned: YES" in text.splitlines()
    assert "  Position: 1 1 1" in text.splitlines()


def test_vertex_report_out_of_range(cloth):
    with pytest.raises(IndexError):
        vertex_report(cloth, 9)
    with pytest.raises(IndexError):
        vertex_report(cloth, -1)