"""Cloth draped over a collision sphere, run headless with timing reports."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass

import numpy as np

from clothsim.cloth import ClothMesh
from clothsim.integrator import SemiImplicitEulerIntegrator

GRID_SIZE = 8
GRID_SPACING = 0.125
START_HEIGHT = 0.8
SPHERE_HEIGHT = 0.5
SPHERE_RADIUS = 0.12
NEAR_MARGIN = 0.02
SUBSTEPS = 8
TIME_STEP = 0.003
REPORT_EVERY = 60


@dataclass(frozen=True)
class FrameReport:
    """How high the cloth hangs and how much of it touches the sphere."""

    average_height: float
    near_sphere: int

    def lines(self) -> list[str]:
        return [
            f"  Average height: {self.average_height:.2f}",
            f"  Vertices near sphere: {self.near_sphere}",
        ]


def _cloth_width() -> float:
    return (GRID_SIZE - 1) * GRID_SPACING


def build_scene() -> tuple[ClothMesh, SemiImplicitEulerIntegrator]:
    """An 8x8 cloth pinned at two corners above a sphere, and its integrator."""
    cloth = ClothMesh()
    cloth.create_grid(GRID_SIZE, GRID_SIZE, GRID_SPACING)

    for index, vertex in enumerate(cloth.vertices):
        position = vertex.position.copy()
        position[1] = START_HEIGHT
        cloth.set_vertex_position(index, position)

    cloth.pin_vertex(cloth.grid_index(0, 0))
    cloth.pin_vertex(cloth.grid_index(0, GRID_SIZE - 1))

    props = cloth.properties
    props.stiffness = 2000.0
    props.bending_stiffness = 200.0
    props.damping = 0.98
    props.friction = 0.7
    props.gravity = np.array([0.0, -9.81, 0.0])

    center = _cloth_width() / 2.0
    cloth.add_sphere((center, SPHERE_HEIGHT, center), SPHERE_RADIUS)

    integrator = SemiImplicitEulerIntegrator()
    integrator.debug_enabled = False
    integrator.debug_frequency = 30
    return cloth, integrator


def frame_report(cloth, sphere_center, sphere_radius) -> FrameReport:
    """Average vertex height and the number of vertices within 2 cm of the sphere."""
    positions = cloth.vertex_matrix()
    if len(positions) == 0:
        raise ValueError("cloth has no vertices")
    center = np.asarray(sphere_center, dtype=float).reshape(3)
    distances = np.linalg.norm(positions - center, axis=1)
    near = int(np.count_nonzero(distances <= sphere_radius + NEAR_MARGIN))
    return FrameReport(float(positions[:, 1].mean()), near)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Drop a pinned cloth onto a sphere.")
    parser.add_argument("--frames", type=int, default=600)
    parser.add_argument("--substeps", type=int, default=SUBSTEPS)
    parser.add_argument("--dt", type=float, default=TIME_STEP)
    parser.add_argument("--report-every", type=int, default=REPORT_EVERY)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)
    if args.report_every <= 0:
        parser.error("--report-every must be positive")

    cloth, integrator = build_scene()
    integrator.debug_enabled = args.debug
    sphere = cloth.collision_spheres[0]
    width = _cloth_width()
    center_text = " ".join(format(float(x), "g") for x in sphere.center)

    print(f"Cloth spans: (0,0,0) to ({width:g},0,{width:g})")
    print(f"Cloth center X,Z: {width / 2.0:g}")
    print(f"PERFORMANCE TEST - {cloth.vertex_count()} vertices")
    print(f"Sphere center: {center_text}")
    print(f"Sphere radius: {sphere.radius:g}")
    print(f"Sphere top: y = {sphere.center[1] + sphere.radius:g}")
    print(f"Sphere bottom: y = {sphere.center[1] - sphere.radius:g}")

    total_sim_ms = 0.0
    for frame in range(1, args.frames + 1):
        start = time.perf_counter()
        for _ in range(args.substeps):
            integrator.step(cloth, args.dt)
        total_sim_ms += (time.perf_counter() - start) * 1000.0

        if frame % args.report_every == 0:
            average_ms = total_sim_ms / frame
            fps = int(1000.0 / average_ms) if average_ms > 0 else 0
            print(f"Frame {frame}")
            print(f"  Sim time: {average_ms:.2f}ms")
            print(f"  Est. FPS: {fps}")
            report = frame_report(cloth, sphere.center, sphere.radius)
            for line in report.lines():
                print(line)
            print()
    return 0