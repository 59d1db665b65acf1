"""Summaries of a cloth's forces, velocities and positions for debugging."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

_EPSILON = 1e-8


def _num(value) -> str:
    return format(float(value), "g")


def _vector(values) -> str:
    return " ".join(_num(x) for x in np.asarray(values, dtype=float).reshape(-1))


@dataclass
class DebugInfo:
    """Aggregate state of a cloth at one simulation step."""

    total_force: float = 0.0
    total_velocity: float = 0.0
    max_displacement: float = 0.0
    active_vertices: int = 0
    pinned_vertices: int = 0
    gravity_magnitude: float = 0.0
    spring_force_magnitude: float = 0.0

    def report(self) -> str:
        """Multi-line human-readable summary."""
        total = self.active_vertices + self.pinned_vertices
        lines = [
            "=== DEBUG INFO ===",
            f"Active vertices: {self.active_vertices}/{total}",
            f"Total force magnitude: {_num(self.total_force)}",
            f"Total velocity magnitude: {_num(self.total_velocity)}",
            f"Max displacement: {_num(self.max_displacement)}",
            f"Gravity force magnitude: {_num(self.gravity_magnitude)}",
            f"Spring force magnitude: {_num(self.spring_force_magnitude)}",
            "==================",
        ]
        return "\n".join(lines)


def compute_debug_info(mesh) -> DebugInfo:
    """Collect vertex counts, force and velocity totals and spring stretch of a cloth."""
    info = DebugInfo()
    for pinned, force, velocity in zip(mesh.pinned, mesh.forces, mesh.velocities):
        if pinned:
            info.pinned_vertices += 1
        else:
            info.active_vertices += 1
            info.total_force += float(np.linalg.norm(force))
            info.total_velocity += float(np.linalg.norm(velocity))

    info.gravity_magnitude = float(np.linalg.norm(mesh.properties.gravity))

    stiffness = mesh.properties.stiffness
    positions = [vertex.position for vertex in mesh.vertices]
    info.spring_force_magnitude = sum(
        stiffness * abs(float(np.linalg.norm(positions[c.v1] - positions[c.v0])) - c.rest_length)
        for c in mesh.distance_constraints
    )
    return info


def _magnitude_summary(vectors) -> tuple[float, int, int]:
    magnitudes = [float(np.linalg.norm(v)) for v in vectors]
    nonzero = sum(1 for m in magnitudes if m > _EPSILON)
    return sum(magnitudes), nonzero, len(magnitudes)


def force_summary(mesh, stage) -> str:
    """One line with the total force magnitude and how many forces are non-zero."""
    total, nonzero, count = _magnitude_summary(mesh.forces)
    return (f"{stage} - Total force magnitude: {_num(total)}, "
            f"Non-zero forces: {nonzero}/{count}")


def velocity_summary(mesh, stage) -> str:
    """One line with the total velocity magnitude and how many velocities are non-zero."""
    total, nonzero, count = _magnitude_summary(mesh.velocities)
    return (f"{stage} - Total velocity magnitude: {_num(total)}, "
            f"Non-zero velocities: {nonzero}/{count}")


def position_bounds(mesh, stage) -> str:
    """One line with the axis-aligned bounds of the vertex positions."""
    positions = mesh.vertex_matrix()
    if len(positions) == 0:
        raise ValueError("mesh has no vertices")
    low = positions.min(axis=0)
    high = positions.max(axis=0)
    return f"{stage} - Position bounds: min={_vector(low)}, max={_vector(high)}"


def vertex_report(mesh, vertex_index) -> str:
    """Detailed state of one vertex; raises IndexError for an index outside the mesh."""
    if not 0 <= vertex_index < mesh.vertex_count():
        raise IndexError(f"vertex {vertex_index} is not in the mesh")
    force = mesh.forces[vertex_index]
    velocity = mesh.velocities[vertex_index]
    lines = [
        f"Vertex {vertex_index} detailed info:",
        f"  Pinned: {'YES' if mesh.pinned[vertex_index] else 'NO'}",
        f"  Position: {_vector(mesh.vertices[vertex_index].position)}",
        f"  Velocity: {_vector(velocity)}",
        f"  Force: {_vector(force)}",
        f"  Force magnitude: {_num(np.linalg.norm(force))}",
        f"  Velocity magnitude: {_num(np.linalg.norm(velocity))}",
    ]
    return "\n".join(lines)