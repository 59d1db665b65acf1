"""Mass-spring cloth built on a regular grid."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from clothsim.mesh import SurfaceMesh


@dataclass(frozen=True)
class Edge:
    """A spring between two vertices with its rest length."""

    v0: int
    v1: int
    rest_length: float


@dataclass
class CollisionSphere:
    """A static sphere the cloth collides with."""

    center: np.ndarray
    radius: float

    def __post_init__(self) -> None:
        self.center = np.array(self.center, dtype=float).reshape(3)
        self.radius = float(self.radius)


@dataclass
class ClothProperties:
    """Physical parameters of the cloth."""

    mass: float = 1.0
    stiffness: float = 1000.0
    damping: float = 0.99
    bending_stiffness: float = 100.0
    friction: float = 0.8
    gravity: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, -9.81]))


def _resized(array: np.ndarray, length: int) -> np.ndarray:
    """Truncate or zero-pad along the first axis, keeping existing rows."""
    result = np.zeros((length,) + array.shape[1:], dtype=array.dtype)
    keep = min(length, len(array))
    result[:keep] = array[:keep]
    return result


class ClothMesh(SurfaceMesh):
    """A grid of vertices joined by structural and bending springs."""

    def __init__(self) -> None:
        super().__init__()
        self.grid_width = 0
        self.grid_height = 0
        self.grid_spacing = 0.1
        self.velocities = np.zeros((0, 3))
        self.forces = np.zeros((0, 3))
        self.pinned = np.zeros(0, dtype=bool)
        self.distance_constraints: list[Edge] = []
        self.bending_constraints: list[Edge] = []
        self.collision_spheres: list[CollisionSphere] = []
        self.properties = ClothProperties()

    def create_grid(self, width, height, spacing=0.1) -> None:
        """Lay out a width x height grid in the XZ plane at height 1."""
        self.clear()
        self.grid_width = width
        self.grid_height = height
        self.grid_spacing = spacing

        for i in range(height):
            for j in range(width):
                self.add_vertex((j * spacing, 1.0, i * spacing))

        for i in range(height - 1):
            for j in range(width - 1):
                top_left = self.grid_index(i, j)
                top_right = self.grid_index(i, j + 1)
                bottom_left = self.grid_index(i + 1, j)
                bottom_right = self.grid_index(i + 1, j + 1)
                self.add_triangle(top_left, bottom_left, top_right)
                self.add_triangle(top_right, bottom_left, bottom_right)

        count = self.vertex_count()
        self.velocities = _resized(self.velocities, count)
        self.forces = _resized(self.forces, count)
        self.pinned = _resized(self.pinned, count)

        self._build_constraints()
        self.compute_normals()

    def grid_index(self, i, j) -> int:
        """Vertex index of row i, column j."""
        return i * self.grid_width + j

    def _build_constraints(self) -> None:
        width, height, spacing = self.grid_width, self.grid_height, self.grid_spacing
        self.distance_constraints = []
        self.bending_constraints = []

        for i in range(height):
            for j in range(width):
                current = self.grid_index(i, j)
                if j < width - 1:
                    self.distance_constraints.append(
                        Edge(current, self.grid_index(i, j + 1), spacing))
                if i < height - 1:
                    self.distance_constraints.append(
                        Edge(current, self.grid_index(i + 1, j), spacing))

        for i in range(height):
            for j in range(width):
                current = self.grid_index(i, j)
                if j < width - 2:
                    self.bending_constraints.append(
                        Edge(current, self.grid_index(i, j + 2), 2.0 * spacing))
                if i < height - 2:
                    self.bending_constraints.append(
                        Edge(current, self.grid_index(i + 2, j), 2.0 * spacing))

    def pin_vertex(self, index) -> None:
        """Fix a vertex in place; indices outside the cloth are ignored."""
        if 0 <= index < len(self.pinned):
            self.pinned[index] = True
            self.velocities[index] = 0.0

    def pin_corners(self) -> None:
        if self.grid_width > 0 and self.grid_height > 0:
            last_row, last_col = self.grid_height - 1, self.grid_width - 1
            for i, j in ((0, 0), (0, last_col), (last_row, 0), (last_row, last_col)):
                self.pin_vertex(self.grid_index(i, j))

    def add_sphere(self, center, radius) -> None:
        self.collision_spheres.append(CollisionSphere(center, radius))

    def clear_spheres(self) -> None:
        self.collision_spheres.clear()