# clothsim

A small mass-spring cloth simulator built on numpy. A cloth is a regular grid
of vertices in the XZ plane, joined by structural springs (neighbouring
vertices) and bending springs (vertices two apart). A semi-implicit Euler
integrator advances the cloth under gravity, keeps it above the ground plane
(y = 0) and pushes vertices, edges and faces out of collision spheres. A
controller can pull chosen vertices toward target positions or velocities,
apply constant forces, or move them along trajectories and circular or
sinusoidal paths.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Library use

```python
import numpy as np

from clothsim.cloth import ClothMesh
from clothsim.controller import ClothController
from clothsim.integrator import SemiImplicitEulerIntegrator

cloth = ClothMesh()
cloth.create_grid(8, 8, 0.125)
cloth.pin_vertex(cloth.grid_index(0, 0))
cloth.pin_vertex(cloth.grid_index(0, 7))
cloth.add_sphere(np.array([0.4375, 0.5, 0.4375]), 0.12)

integrator = SemiImplicitEulerIntegrator()
controller = ClothController()
controller.add_position_control(63, np.array([0.9, 0.6, 0.9]), 1200.0, 100.0)

dt = 0.003
for _ in range(100):
    controller.apply_controls(cloth, dt)
    integrator.step(cloth, dt)

print(cloth.vertex_matrix())
```

Modules:

- `clothsim.mesh`: `SurfaceMesh`, `Vertex`, `Triangle` and the helpers
  `compute_triangle_normal` and `compute_triangle_area`. A mesh exports its
  positions with `vertex_matrix()` and its faces with `triangle_matrix()`.
- `clothsim.cloth`: `ClothMesh`, with `create_grid`, `grid_index`,
  `pin_vertex`, `pin_corners`, `add_sphere` and `clear_spheres`, plus the
  `velocities`, `forces` and `pinned` arrays and the spring lists
  `distance_constraints` and `bending_constraints`. `ClothProperties` holds
  mass, stiffness, bending stiffness, damping, friction and gravity.
- `clothsim.controller`: `ClothController` for position, velocity and force
  control, trajectories (`set_trajectory`, which raises `ValueError` on empty
  or mismatched data), circular and sinusoidal motion, and wind with optional
  random turbulence. It accepts a `random.Random` for reproducible turbulence.
- `clothsim.integrator`: `SemiImplicitEulerIntegrator`, whose
  `handle_collisions` returns a `CollisionCounts`, and
  `point_to_triangle_distance`, which returns a `TriangleProximity` or `None`
  for a degenerate triangle.
- `clothsim.diagnostics`: `DebugInfo`, `compute_debug_info`, and text
  summaries from `force_summary`, `velocity_summary`, `position_bounds` and
  `vertex_report`.
- `clothsim.grid`: `create_cloth_grid` and `add_wave_deformation` for
  building standalone vertex and face arrays.
- `clothsim.simulation`: `build_scene` and `frame_report` behind the
  `clothsim-simulate` command.
- `clothsim.edge_pull`: `PullDirection`, `pull_vector`, `build_cloth`,
  `edge_vertices`, `start_pulling` and `reset_cloth` behind the
  `clothsim-edge-pull` command.

Debug output from the controller and integrator goes through the standard
`logging` module at INFO level.

## Commands

```
clothsim-grid [--width 20] [--height 20] [--spacing 0.1] [--amplitude 0.2] [--frequency 3.0]
```

Builds a grid, applies a wave deformation and prints the vertex and face
counts, the dimensions and the range of heights.

```
clothsim-simulate [--frames 600] [--substeps 8] [--dt 0.003] [--report-every 60] [--debug]
```

Drops an 8×8 cloth, pinned at two corners, onto a sphere. Every
`--report-every` frames it prints the average simulation time per frame, an
estimated frame rate, the average cloth height and the number of vertices
within 2 cm of the sphere.

```
clothsim-edge-pull [--direction forward|backward|right|left|up] [--distance 0.3]
                   [--height 0.2] [--strength 1200.0] [--frames 300] [--dt 0.002] [--debug]
```

Pulls the last column of a 10×10 cloth in the chosen direction and lifts it
with position control, runs the given number of frames, then prints the number
of active controls and where each edge vertex ended up. `--debug` turns on
INFO-level logging.

## What it does not do

- There is no viewer or interactive window: the commands run headless and
  report in text. Use `vertex_matrix()` and `triangle_matrix()` to hand a
  cloth to a renderer of your own.
- The edge-pull command takes its direction, distance, height and strength
  from the command line for one run; it does not offer live controls.
- `ClothProperties.friction` is stored but no part of the integrator uses it.