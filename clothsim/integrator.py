"""Time integration of a mass-spring cloth with ground and sphere collisions."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from clothsim.diagnostics import DebugInfo, compute_debug_info

logger = logging.getLogger(__name__)

_EPSILON = 1e-8
_CONSTRAINT_EPSILON = 1e-6
_CONSTRAINT_ITERATIONS = 1


def _vec(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


@dataclass
class TriangleProximity:
    """Closest point of a triangle to a query point and the distance between them."""

    closest_point: np.ndarray
    distance: float
    is_inside: bool


@dataclass
class CollisionCounts:
    """Number of collisions resolved in one pass, by primitive."""

    vertex: int = 0
    edge: int = 0
    face: int = 0

    @property
    def total(self) -> int:
        return self.vertex + self.edge + self.face


def _closest_on_segment(point: np.ndarray, start: np.ndarray, edge: np.ndarray) -> np.ndarray:
    t = float(np.dot(point - start, edge) / np.dot(edge, edge))
    t = max(0.0, min(1.0, t))
    return start + t * edge


def point_to_triangle_distance(point, v0, v1, v2) -> TriangleProximity | None:
    """Distance from a point to a triangle, or None if the triangle is degenerate.

    When the point projects inside the triangle the distance is measured to
    the plane; otherwise it is measured to the nearest point on an edge.
    """
    point, v0, v1, v2 = _vec(point), _vec(v0), _vec(v1), _vec(v2)
    edge0 = v1 - v0
    edge1 = v2 - v1
    edge2 = v0 - v2

    normal = np.cross(edge0, v2 - v0)
    normal_length = float(np.linalg.norm(normal))
    if normal_length < _EPSILON:
        return None
    normal = normal / normal_length

    proj_distance = float(np.dot(point - v0, normal))
    projected = point - proj_distance * normal

    v0v1 = v1 - v0
    v0v2 = v2 - v0
    v0p = projected - v0
    dot00 = float(np.dot(v0v2, v0v2))
    dot01 = float(np.dot(v0v2, v0v1))
    dot02 = float(np.dot(v0v2, v0p))
    dot11 = float(np.dot(v0v1, v0v1))
    dot12 = float(np.dot(v0v1, v0p))

    inv_denom = 1.0 / (dot00 * dot11 - dot01 * dot01)
    u = (dot11 * dot02 - dot01 * dot12) * inv_denom
    v = (dot00 * dot12 - dot01 * dot02) * inv_denom

    if u >= 0 and v >= 0 and u + v <= 1:
        return TriangleProximity(projected, abs(proj_distance), True)

    best_point = None
    best_dist_sq = math.inf
    for start, edge in ((v0, edge0), (v1, edge1), (v2, edge2)):
        candidate = _closest_on_segment(point, start, edge)
        dist_sq = float(np.dot(point - candidate, point - candidate))
        if dist_sq < best_dist_sq:
            best_dist_sq = dist_sq
            best_point = candidate
    return TriangleProximity(best_point, math.sqrt(best_dist_sq), False)


class Integrator(ABC):
    """Advances a cloth mesh through time, with periodic debug logging."""

    def __init__(self) -> None:
        self.debug_enabled = False
        self.verbose_debug = False
        self.debug_frequency = 100
        self.step_count = 0

    @abstractmethod
    def step(self, mesh, dt) -> None:
        """Advance the mesh by one time step of length dt."""

    def _debug_due(self) -> bool:
        return self.debug_enabled and self.step_count % self.debug_frequency == 0


class SemiImplicitEulerIntegrator(Integrator):
    """Semi-implicit Euler integration followed by collision and constraint projection."""

    def __init__(self) -> None:
        super().__init__()
        self.last_debug_info = DebugInfo()

    def step(self, mesh, dt) -> None:
        self.step_count += 1
        mesh.forces[:] = 0.0

        self.apply_gravity(mesh, dt)
        self.apply_spring_forces(mesh, dt)

        props = mesh.properties
        for i, pinned in enumerate(mesh.pinned):
            if pinned:
                continue
            acceleration = mesh.forces[i] / props.mass
            mesh.velocities[i] = mesh.velocities[i] * props.damping + acceleration * dt
            mesh.set_vertex_position(i, mesh.vertices[i].position + mesh.velocities[i] * dt)

        self.handle_collisions(mesh)
        self.satisfy_constraints(mesh)

        if self.debug_enabled and self.step_count % (self.debug_frequency * 5) == 0:
            self.last_debug_info = compute_debug_info(mesh)
            logger.info("%s", self.last_debug_info.report())

    def apply_gravity(self, mesh, dt) -> None:
        """Add the per-vertex share of gravity to every free vertex."""
        count = mesh.vertex_count()
        if count == 0:
            return
        vertex_mass = mesh.properties.mass / count
        gravity_force = vertex_mass * np.asarray(mesh.properties.gravity, dtype=float)

        if self._debug_due():
            logger.info("Applying gravity: mass=%g, gravity=%s", vertex_mass, mesh.properties.gravity)
            logger.info("Total vertices: %d", count)
            logger.info("Pinned vertices: %d", int(np.count_nonzero(mesh.pinned)))

        free = ~np.asarray(mesh.pinned, dtype=bool)
        mesh.forces[free] += gravity_force

        if self._debug_due() and self.verbose_debug:
            for i in np.flatnonzero(free)[:3]:
                if i < 3:
                    logger.info("Vertex %d gravity force: %s", i, gravity_force)

    def apply_spring_forces(self, mesh, dt) -> None:
        """Add Hooke forces of structural and bending springs."""
        if self._debug_due():
            logger.info("Applying spring forces: %d distance constraints, %d bending constraints",
                        len(mesh.distance_constraints), len(mesh.bending_constraints))
            logger.info("Stiffness: %g, Bending stiffness: %g",
                        mesh.properties.stiffness, mesh.properties.bending_stiffness)

        positions = mesh.vertex_matrix()
        self._accumulate_springs(mesh, positions, mesh.distance_constraints,
                                 mesh.properties.stiffness, log=True)
        self._accumulate_springs(mesh, positions, mesh.bending_constraints,
                                 mesh.properties.bending_stiffness, log=False)

    def _accumulate_springs(self, mesh, positions, constraints, stiffness, log) -> None:
        if not constraints:
            return
        pairs = np.array([(c.v0, c.v1) for c in constraints], dtype=int)
        rest = np.array([c.rest_length for c in constraints], dtype=float)
        delta = positions[pairs[:, 1]] - positions[pairs[:, 0]]
        length = np.linalg.norm(delta, axis=1)
        active = length > _EPSILON
        if not np.any(active):
            return

        pairs, rest, delta, length = pairs[active], rest[active], delta[active], length[active]
        stretch = length - rest
        spring = (stiffness * stretch / length)[:, None] * delta
        np.add.at(mesh.forces, pairs[:, 0], spring)
        np.subtract.at(mesh.forces, pairs[:, 1], spring)

        if log and self._debug_due() and self.verbose_debug:
            for (a, b), cur, r, s, f in zip(pairs, length, rest, stretch, spring):
                if a < 3 or b < 3:
                    logger.info("Spring constraint %d-%d: length=%g, rest=%g, stretch=%g, force=%g",
                                a, b, cur, r, s, float(np.linalg.norm(f)))

    def update_positions(self, mesh, dt) -> float:
        """Integrate with per-vertex mass and damping; returns the largest displacement."""
        count = mesh.vertex_count()
        max_displacement = 0.0
        if count == 0:
            self.last_debug_info.max_displacement = max_displacement
            return max_displacement
        vertex_mass = mesh.properties.mass / count

        if self._debug_due():
            logger.info("Updating positions: vertex mass=%g, damping=%g",
                        vertex_mass, mesh.properties.damping)

        for i, pinned in enumerate(mesh.pinned):
            if pinned:
                continue
            old_position = mesh.vertices[i].position.copy()
            old_velocity = mesh.velocities[i].copy()
            velocity = old_velocity + dt * mesh.forces[i] / vertex_mass
            velocity = velocity * mesh.properties.damping
            mesh.velocities[i] = velocity
            new_position = old_position + dt * velocity
            mesh.set_vertex_position(i, new_position)

            displacement = float(np.linalg.norm(new_position - old_position))
            max_displacement = max(max_displacement, displacement)

            if self._debug_due() and self.verbose_debug and i < 3:
                logger.info("Vertex %d: old pos %s, force %s, old vel %s, new vel %s, "
                            "new pos %s, displacement %g", i, old_position, mesh.forces[i],
                            old_velocity, velocity, new_position, displacement)

        if self._debug_due():
            logger.info("Max displacement this step: %g", max_displacement)
        self.last_debug_info.max_displacement = max_displacement
        return max_displacement

    def satisfy_constraints(self, mesh) -> None:
        """Project structural springs toward their rest lengths, one pair at a time."""
        pinned = mesh.pinned
        for _ in range(_CONSTRAINT_ITERATIONS):
            for constraint in mesh.distance_constraints:
                a, b = constraint.v0, constraint.v1
                if pinned[a] and pinned[b]:
                    continue
                p1 = mesh.vertices[a].position.copy()
                p2 = mesh.vertices[b].position.copy()
                delta = p2 - p1
                length = float(np.linalg.norm(delta))
                if length > _CONSTRAINT_EPSILON:
                    difference = (length - constraint.rest_length) / length
                    correction = 0.5 * difference * delta
                    if not pinned[a]:
                        mesh.set_vertex_position(a, p1 + correction)
                    if not pinned[b]:
                        mesh.set_vertex_position(b, p2 - correction)

    def handle_collisions(self, mesh) -> CollisionCounts:
        """Push vertices, edges and faces out of the ground and collision spheres."""
        counts = CollisionCounts(
            vertex=self._vertex_collisions(mesh),
            edge=self._edge_collisions(mesh),
            face=self._face_collisions(mesh),
        )
        if self._debug_due() and counts.total > 0:
            logger.info("Collisions: %d vertex, %d edge, %d face, total=%d",
                        counts.vertex, counts.edge, counts.face, counts.total)
        return counts

    def _vertex_collisions(self, mesh) -> int:
        collisions = 0
        for i, pinned in enumerate(mesh.pinned):
            if pinned:
                continue
            position = mesh.vertices[i].position.copy()
            hit = False

            if position[1] < 0.0:
                position[1] = 0.0
                hit = True
                collisions += 1

            for sphere in mesh.collision_spheres:
                to_vertex = position - sphere.center
                distance = float(np.linalg.norm(to_vertex))
                if distance < sphere.radius:
                    if distance > _EPSILON:
                        position = sphere.center + to_vertex / distance * sphere.radius
                    else:
                        position = sphere.center + np.array([sphere.radius, 0.0, 0.0])
                    hit = True
                    collisions += 1

            if hit:
                mesh.set_vertex_position(i, position)
        return collisions

    def _edge_collisions(self, mesh) -> int:
        collisions = 0
        pinned = mesh.pinned
        for constraint in mesh.distance_constraints:
            a, b = constraint.v0, constraint.v1
            if pinned[a] and pinned[b]:
                continue
            p0 = mesh.vertices[a].position.copy()
            p1 = mesh.vertices[b].position.copy()

            for sphere in mesh.collision_spheres:
                edge = p1 - p0
                edge_length = float(np.linalg.norm(edge))
                if edge_length < _EPSILON:
                    continue
                edge = edge / edge_length
                t = -float(np.dot(p0 - sphere.center, edge))
                t = max(0.0, min(edge_length, t))
                closest = p0 + t * edge
                offset = closest - sphere.center
                dist = float(np.linalg.norm(offset))

                if dist < sphere.radius:
                    normal = offset / dist if dist > _EPSILON else np.array([1.0, 0.0, 0.0])
                    correction = normal * (sphere.radius - dist) * 0.5
                    if not pinned[a]:
                        mesh.set_vertex_position(a, p0 + correction)
                    if not pinned[b]:
                        mesh.set_vertex_position(b, p1 + correction)
                    collisions += 1
        return collisions

    def _face_collisions(self, mesh) -> int:
        collisions = 0
        pinned = mesh.pinned
        for v0, v1, v2 in mesh.triangle_matrix():
            if pinned[v0] and pinned[v1] and pinned[v2]:
                continue
            p0 = mesh.vertices[v0].position.copy()
            p1 = mesh.vertices[v1].position.copy()
            p2 = mesh.vertices[v2].position.copy()

            for sphere in mesh.collision_spheres:
                proximity = point_to_triangle_distance(sphere.center, p0, p1, p2)
                if proximity is None or proximity.distance >= sphere.radius:
                    continue
                normal = proximity.closest_point - sphere.center
                length = float(np.linalg.norm(normal))
                if length > _EPSILON:
                    normal = normal / length
                else:
                    face_normal = np.cross(p1 - p0, p2 - p0)
                    normal = face_normal / np.linalg.norm(face_normal)

                correction = normal * (sphere.radius - proximity.distance) / 3.0
                for index, position in ((v0, p0), (v1, p1), (v2, p2)):
                    if not pinned[index]:
                        mesh.set_vertex_position(int(index), position + correction)
                collisions += 1
        return collisions