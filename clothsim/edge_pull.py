"""Pulling one edge of a resting cloth with position controls."""

from __future__ import annotations

import argparse
import logging
from enum import Enum

import numpy as np

from clothsim.cloth import ClothMesh
from clothsim.controller import ClothController
from clothsim.integrator import SemiImplicitEulerIntegrator

GRID_SIZE = 10
GRID_SPACING = 0.1
START_HEIGHT = 0.5
EDGE_COLUMN = 9
CONTROL_MAX_FORCE = 100.0
SUBSTEPS = 3
TIME_STEP = 0.002


class PullDirection(Enum):
    """Direction the controlled edge is pulled in."""

    FORWARD = "Forward (+Z)"
    BACKWARD = "Backward (-Z)"
    RIGHT = "Right (+X)"
    LEFT = "Left (-X)"
    UP = "Up (+Y)"

    @property
    def label(self) -> str:
        return self.value


_DIRECTIONS = {
    PullDirection.FORWARD: (0.0, 0.0, 1.0),
    PullDirection.BACKWARD: (0.0, 0.0, -1.0),
    PullDirection.RIGHT: (1.0, 0.0, 0.0),
    PullDirection.LEFT: (-1.0, 0.0, 0.0),
    PullDirection.UP: (0.0, 1.0, 0.0),
}


def pull_vector(direction, distance) -> np.ndarray:
    """Displacement of the given length along the chosen direction."""
    return np.array(_DIRECTIONS[PullDirection(direction)], dtype=float) * float(distance)


def build_cloth() -> ClothMesh:
    """A flexible 10x10 cloth lying flat at height 0.5."""
    cloth = ClothMesh()
    cloth.create_grid(GRID_SIZE, GRID_SIZE, GRID_SPACING)
    for index, vertex in enumerate(cloth.vertices):
        position = vertex.position.copy()
        position[1] = START_HEIGHT
        cloth.set_vertex_position(index, position)

    props = cloth.properties
    props.stiffness = 800.0
    props.bending_stiffness = 20.0
    props.damping = 0.9
    props.friction = 0.8
    props.gravity = np.array([0.0, -9.81, 0.0])
    return cloth


def edge_vertices(cloth) -> list[int]:
    """Indices of the vertices in the last column of the grid."""
    return [cloth.grid_index(i, EDGE_COLUMN) for i in range(GRID_SIZE)]


def start_pulling(cloth, controller, vertices, direction, distance, height, strength) -> np.ndarray:
    """Replace all controls with position targets that pull and lift the edge.

    Returns the horizontal pull vector used.
    """
    controller.remove_all_controls()
    pull = pull_vector(direction, distance)
    lift = np.array([0.0, float(height), 0.0])
    for index in vertices:
        target = cloth.vertices[index].position + pull + lift
        controller.add_position_control(index, target, strength, CONTROL_MAX_FORCE)
    return pull


def reset_cloth(cloth, controller) -> None:
    """Drop every control and put the cloth back flat at rest."""
    controller.remove_all_controls()
    width = cloth.grid_width
    spacing = cloth.grid_spacing
    for index in range(cloth.vertex_count()):
        row, col = divmod(index, width)
        cloth.set_vertex_position(index, (col * spacing, START_HEIGHT, row * spacing))
        cloth.velocities[index] = 0.0


def _format(vector) -> str:
    return " ".join(format(float(x), "g") for x in vector)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Pull one edge of a cloth.")
    parser.add_argument("--direction", choices=[d.name.lower() for d in PullDirection],
                        default="forward")
    parser.add_argument("--distance", type=float, default=0.3)
    parser.add_argument("--height", type=float, default=0.2)
    parser.add_argument("--strength", type=float, default=1200.0)
    parser.add_argument("--frames", type=int, default=300)
    parser.add_argument("--dt", type=float, default=TIME_STEP)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.INFO)

    cloth = build_cloth()
    integrator = SemiImplicitEulerIntegrator()
    controller = ClothController()
    controller.debug_enabled = args.debug
    vertices = edge_vertices(cloth)
    width = (GRID_SIZE - 1) * GRID_SPACING

    print("=== SIMPLE EDGE PULL DEMO ===")
    print(f"Cloth: {GRID_SIZE}x{GRID_SIZE} grid, size: {width:g} x {width:g}")
    print("Edge vertices to control: " + " ".join(str(i) for i in vertices))

    direction = PullDirection[args.direction.upper()]
    pull = start_pulling(cloth, controller, vertices, direction,
                         args.distance, args.height, args.strength)
    print(f"Started pulling edge in direction: {direction.label}")
    print(f"Pull vector: {_format(pull)}")

    for _ in range(args.frames):
        controller.apply_controls(cloth, args.dt)
        for _ in range(SUBSTEPS):
            integrator.step(cloth, args.dt)

    print(f"Active controls: {controller.control_count()}")
    for index in vertices:
        x, y, z = cloth.vertices[index].position
        print(f"Vertex {index}: ({x:.2f}, {y:.2f}, {z:.2f})")
    return 0