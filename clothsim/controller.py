"""Per-vertex position, velocity and force control for a cloth mesh."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)

_FORCE_EPSILON = 1e-8


def _vec(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


def _normalized(vector: np.ndarray) -> np.ndarray:
    """Unit vector in the same direction; a zero vector is returned as is."""
    length = np.linalg.norm(vector)
    if length > 0.0:
        return vector / length
    return vector.copy()


@dataclass
class ControlTarget:
    """The goals and gains applied to one controlled vertex."""

    vertex_index: int = 0
    target_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    target_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    external_force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    position_control_active: bool = False
    velocity_control_active: bool = False
    force_control_active: bool = False
    position_gain: float = 1000.0
    velocity_gain: float = 100.0
    max_force: float = 100.0

    def position_force(self, current_position: np.ndarray) -> np.ndarray:
        """Proportional force pulling the vertex toward its target position."""
        return (self.target_position - current_position) * self.position_gain

    def velocity_force(self, current_velocity: np.ndarray) -> np.ndarray:
        """Force driving the vertex velocity toward its target velocity."""
        return (self.target_velocity - current_velocity) * self.velocity_gain


@dataclass
class Trajectory:
    """Waypoints with their times, followed by piecewise linear interpolation."""

    positions: list[np.ndarray]
    times: list[float]
    loop: bool = False
    start_time: float = 0.0

    def position_at(self, time: float) -> np.ndarray:
        """Interpolated position at a time relative to the trajectory start."""
        if not self.positions:
            return np.zeros(3)

        total_time = self.times[-1]
        if self.loop and time > total_time and total_time != 0.0:
            time = math.fmod(time, total_time)

        segments = zip(self.times, self.times[1:], self.positions, self.positions[1:])
        for t0, t1, p0, p1 in segments:
            if t0 <= time <= t1:
                if t1 == t0:
                    return p1.copy()
                fraction = (time - t0) / (t1 - t0)
                return p0 * (1.0 - fraction) + p1 * fraction

        return self.positions[-1].copy()


class MotionKind(Enum):
    """Shape of a preset periodic motion."""

    CIRCULAR = "circular"
    SINUSOIDAL = "sinusoidal"


@dataclass
class MotionPattern:
    """A periodic target motion for one vertex."""

    kind: MotionKind
    center: np.ndarray
    frequency: float
    start_time: float
    amplitude: np.ndarray = field(default_factory=lambda: np.zeros(3))
    axis: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))
    radius: float = 0.0

    def target_at(self, current_time: float) -> np.ndarray:
        """Target position of the pattern at an absolute controller time."""
        t = current_time - self.start_time
        if self.kind is MotionKind.CIRCULAR:
            angle = 2.0 * math.pi * self.frequency * t
            u = self.axis
            v = _normalized(np.cross(u, np.array([1.0, 0.0, 0.0])))
            if np.linalg.norm(v) < 0.1:
                v = _normalized(np.cross(u, np.array([0.0, 1.0, 0.0])))
            w = np.cross(u, v)
            return self.center + self.radius * (v * math.cos(angle) + w * math.sin(angle))
        return self.center + self.amplitude * math.sin(2.0 * math.pi * self.frequency * t)


class ClothController:
    """Drives chosen cloth vertices with PD-style forces, trajectories and presets."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.targets: dict[int, ControlTarget] = {}
        self.trajectories: dict[int, Trajectory] = {}
        self.motion_patterns: dict[int, MotionPattern] = {}
        self.current_time = 0.0
        self.debug_enabled = False
        self.rng = rng if rng is not None else random.Random()

    def _debug(self, message: str, *args) -> None:
        if self.debug_enabled:
            logger.info(message, *args)

    # Control target management

    def add_position_control(self, vertex_index, target_position, gain=1000.0, max_force=100.0) -> None:
        target = self.targets.setdefault(vertex_index, ControlTarget())
        target.vertex_index = vertex_index
        target.target_position = _vec(target_position)
        target.position_control_active = True
        target.position_gain = float(gain)
        target.max_force = float(max_force)
        self._debug("Added position control for vertex %s target: %s",
                    vertex_index, target.target_position)

    def add_velocity_control(self, vertex_index, target_velocity, gain=100.0, max_force=50.0) -> None:
        target = self.targets.setdefault(vertex_index, ControlTarget())
        target.vertex_index = vertex_index
        target.target_velocity = _vec(target_velocity)
        target.velocity_control_active = True
        target.velocity_gain = float(gain)
        target.max_force = float(max_force)
        self._debug("Added velocity control for vertex %s target: %s",
                    vertex_index, target.target_velocity)

    def add_force_control(self, vertex_index, force) -> None:
        target = self.targets.setdefault(vertex_index, ControlTarget())
        target.vertex_index = vertex_index
        target.external_force = _vec(force)
        target.force_control_active = True
        self._debug("Added force control for vertex %s force: %s",
                    vertex_index, target.external_force)

    def update_position_target(self, vertex_index, new_target) -> None:
        """Change the target position of an existing control; unknown vertices are ignored."""
        target = self.targets.get(vertex_index)
        if target is not None:
            target.target_position = _vec(new_target)
            target.position_control_active = True

    def update_velocity_target(self, vertex_index, new_velocity) -> None:
        target = self.targets.get(vertex_index)
        if target is not None:
            target.target_velocity = _vec(new_velocity)
            target.velocity_control_active = True

    def update_force_target(self, vertex_index, new_force) -> None:
        target = self.targets.get(vertex_index)
        if target is not None:
            target.external_force = _vec(new_force)
            target.force_control_active = True

    def remove_control(self, vertex_index) -> None:
        self.targets.pop(vertex_index, None)
        self.trajectories.pop(vertex_index, None)
        self.motion_patterns.pop(vertex_index, None)
        self._debug("Removed control for vertex %s", vertex_index)

    def remove_all_controls(self) -> None:
        self.targets.clear()
        self.trajectories.clear()
        self.motion_patterns.clear()
        self._debug("Removed all controls")

    # Control execution

    def apply_controls(self, mesh, dt) -> None:
        """Advance controller time and add control accelerations to mesh velocities."""
        self.current_time += dt
        self._update_motion_patterns(self.current_time)
        self.update_trajectories(self.current_time)

        vertex_count = mesh.vertex_count()
        for vertex_index, target in self.targets.items():
            if vertex_index >= vertex_count:
                continue

            position = mesh.vertices[vertex_index].position
            velocity = mesh.velocities[vertex_index]
            total_force = np.zeros(3)

            if target.position_control_active:
                total_force += target.position_force(position)
            if target.velocity_control_active:
                total_force += target.velocity_force(velocity)
            if target.force_control_active:
                total_force += target.external_force

            magnitude = np.linalg.norm(total_force)
            if magnitude > target.max_force:
                total_force = total_force / magnitude * target.max_force

            # Unit mass: the force is the acceleration.
            if np.linalg.norm(total_force) > _FORCE_EPSILON:
                mesh.velocities[vertex_index] = velocity + total_force * dt

            if self.debug_enabled and int(self.current_time * 10) % 30 == 0:
                logger.info("Vertex %s force: %s pos: %s", vertex_index, total_force, position)

    # Trajectory control

    def set_trajectory(self, vertex_index, positions, times, loop=False) -> None:
        """Make a vertex follow waypoints; raises ValueError on empty or mismatched data."""
        positions = [_vec(p) for p in positions]
        times = [float(t) for t in times]
        if not positions or len(positions) != len(times):
            raise ValueError(f"invalid trajectory data for vertex {vertex_index}")

        self.trajectories[vertex_index] = Trajectory(
            positions=positions, times=times, loop=bool(loop), start_time=self.current_time
        )
        self.add_position_control(vertex_index, positions[0])
        self._debug("Set trajectory for vertex %s with %d waypoints",
                    vertex_index, len(positions))

    def update_trajectories(self, current_time) -> None:
        for vertex_index, trajectory in self.trajectories.items():
            relative_time = current_time - trajectory.start_time
            self.update_position_target(vertex_index, trajectory.position_at(relative_time))

    # Queries

    def is_controlled(self, vertex_index) -> bool:
        return vertex_index in self.targets

    def control_force(self, vertex_index) -> np.ndarray:
        """External force set on a vertex, or zero if it is not controlled."""
        target = self.targets.get(vertex_index)
        if target is not None:
            return target.external_force.copy()
        return np.zeros(3)

    def control_count(self) -> int:
        return len(self.targets)

    def controlled_vertices(self) -> list[int]:
        return list(self.targets)

    # Preset patterns

    def add_circular_motion(self, vertex_index, center, radius, frequency, axis=(0.0, 1.0, 0.0)) -> None:
        center = _vec(center)
        self.motion_patterns[vertex_index] = MotionPattern(
            kind=MotionKind.CIRCULAR,
            center=center,
            frequency=float(frequency),
            start_time=self.current_time,
            axis=_normalized(_vec(axis)),
            radius=float(radius),
        )
        self.add_position_control(vertex_index, center + np.array([radius, 0.0, 0.0]))
        self._debug("Added circular motion for vertex %s center: %s radius: %s",
                    vertex_index, center, radius)

    def add_sinusoidal_motion(self, vertex_index, center, amplitude, frequency) -> None:
        center = _vec(center)
        self.motion_patterns[vertex_index] = MotionPattern(
            kind=MotionKind.SINUSOIDAL,
            center=center,
            frequency=float(frequency),
            start_time=self.current_time,
            amplitude=_vec(amplitude),
        )
        self.add_position_control(vertex_index, center)
        self._debug("Added sinusoidal motion for vertex %s center: %s amplitude: %s",
                    vertex_index, center, amplitude)

    def add_wind_force(self, vertex_indices, wind_direction, strength, turbulence=0.0) -> None:
        """Set a constant wind force, optionally with random turbulence, on each vertex."""
        direction = _normalized(_vec(wind_direction))
        indices = list(vertex_indices)
        for vertex_index in indices:
            wind_force = direction * strength
            if turbulence > 0:
                random_dir = _normalized(np.array([self.rng.uniform(-1.0, 1.0) for _ in range(3)]))
                scale = turbulence * strength * (self.rng.random() - 0.5)
                wind_force = wind_force + random_dir * scale
            self.add_force_control(vertex_index, wind_force)
        self._debug("Added wind force to %d vertices, direction: %s strength: %s",
                    len(indices), wind_direction, strength)

    def _update_motion_patterns(self, current_time: float) -> None:
        for vertex_index, pattern in self.motion_patterns.items():
            self.update_position_target(vertex_index, pattern.target_at(current_time))