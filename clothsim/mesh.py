"""Triangle surface meshes with per-vertex and per-face normals."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

_EPSILON = 1e-8
_UP = (0.0, 1.0, 0.0)


def _vec(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


@dataclass
class Vertex:
    """A mesh vertex with a position and a unit normal."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    normal: np.ndarray = field(default_factory=lambda: _vec(_UP))

    def __post_init__(self) -> None:
        self.position = _vec(self.position)
        self.normal = _vec(self.normal)


@dataclass
class Triangle:
    """A triangular face given by three vertex indices."""

    indices: tuple[int, int, int] = (0, 0, 0)
    normal: np.ndarray = field(default_factory=lambda: _vec(_UP))

    def __post_init__(self) -> None:
        self.indices = tuple(int(i) for i in self.indices)
        self.normal = _vec(self.normal)


def compute_triangle_normal(v0, v1, v2) -> np.ndarray:
    """Unit normal of a triangle; degenerate triangles get the +Y axis."""
    v0 = _vec(v0)
    normal = np.cross(_vec(v1) - v0, _vec(v2) - v0)
    length = np.linalg.norm(normal)
    if length > _EPSILON:
        return normal / length
    return _vec(_UP)


def compute_triangle_area(v0, v1, v2) -> float:
    """Area of the triangle with the given corners."""
    v0 = _vec(v0)
    return 0.5 * float(np.linalg.norm(np.cross(_vec(v1) - v0, _vec(v2) - v0)))


class SurfaceMesh:
    """A list of vertices and triangular faces."""

    def __init__(self) -> None:
        self.vertices: list[Vertex] = []
        self.triangles: list[Triangle] = []

    def clear(self) -> None:
        self.vertices.clear()
        self.triangles.clear()

    def add_vertex(self, position) -> None:
        self.vertices.append(Vertex(position))

    def add_triangle(self, i0, i1, i2) -> None:
        self.triangles.append(Triangle((i0, i1, i2)))

    def vertex_count(self) -> int:
        return len(self.vertices)

    def triangle_count(self) -> int:
        return len(self.triangles)

    def set_vertex_position(self, index, position) -> None:
        """Move a vertex; indices outside the mesh are ignored."""
        if 0 <= index < len(self.vertices):
            self.vertices[index].position = _vec(position)

    def compute_normals(self) -> None:
        """Recompute face normals and area-unweighted vertex normals."""
        for triangle in self.triangles:
            corners = (self.vertices[i].position for i in triangle.indices)
            triangle.normal = compute_triangle_normal(*corners)

        for vertex in self.vertices:
            vertex.normal = np.zeros(3)

        for triangle in self.triangles:
            for i in triangle.indices:
                self.vertices[i].normal = self.vertices[i].normal + triangle.normal

        for vertex in self.vertices:
            length = np.linalg.norm(vertex.normal)
            if length > _EPSILON:
                vertex.normal = vertex.normal / length
            else:
                vertex.normal = _vec(_UP)

    def vertex_matrix(self) -> np.ndarray:
        """Vertex positions as an (n, 3) float array."""
        if not self.vertices:
            return np.zeros((0, 3))
        return np.array([v.position for v in self.vertices], dtype=float)

    def triangle_matrix(self) -> np.ndarray:
        """Triangle indices as an (m, 3) integer array."""
        if not self.triangles:
            return np.zeros((0, 3), dtype=int)
        return np.array([t.indices for t in self.triangles], dtype=int)