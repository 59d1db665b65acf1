"""Standalone cloth grid generation and a wave-shaped deformation of it."""

from __future__ import annotations

import argparse

import numpy as np


def create_cloth_grid(width, height, spacing=1.0) -> tuple[np.ndarray, np.ndarray]:
    """Vertices (row-major in the XZ plane, y = 0) and triangle faces of a grid."""
    rows, cols = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
    vertices = np.zeros((width * height, 3))
    vertices[:, 0] = cols.reshape(-1) * spacing
    vertices[:, 2] = rows.reshape(-1) * spacing

    faces = []
    for i in range(height - 1):
        for j in range(width - 1):
            top_left = i * width + j
            top_right = top_left + 1
            bottom_left = top_left + width
            bottom_right = bottom_left + 1
            faces.append((top_left, bottom_left, top_right))
            faces.append((top_right, bottom_left, bottom_right))

    face_array = np.array(faces, dtype=int).reshape(-1, 3)
    return vertices, face_array


def add_wave_deformation(vertices, amplitude=0.5, frequency=2.0) -> np.ndarray:
    """Copy of the vertices with y set to amplitude * sin(f x) * cos(f z)."""
    deformed = np.array(vertices, dtype=float, copy=True)
    x = deformed[:, 0]
    z = deformed[:, 2]
    deformed[:, 1] = amplitude * np.sin(frequency * x) * np.cos(frequency * z)
    return deformed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Build a cloth grid and deform it with a wave.")
    parser.add_argument("--width", type=int, default=20)
    parser.add_argument("--height", type=int, default=20)
    parser.add_argument("--spacing", type=float, default=0.1)
    parser.add_argument("--amplitude", type=float, default=0.2)
    parser.add_argument("--frequency", type=float, default=3.0)
    args = parser.parse_args(argv)

    vertices, faces = create_cloth_grid(args.width, args.height, args.spacing)
    deformed = add_wave_deformation(vertices, args.amplitude, args.frequency)

    print("Cloth mesh created with:")
    print(f"  Vertices: {len(vertices)}")
    print(f"  Faces: {len(faces)}")
    print(f"  Dimensions: {args.width}x{args.height}")
    print(f"  Height range: {deformed[:, 1].min():g} to {deformed[:, 1].max():g}")
    return 0