"""Mass-spring cloth simulation with sphere collisions, vertex control and headless commands."""

__version__ = "0.1.0"
__all__ = [
    "mesh",
    "cloth",
    "controller",
    "diagnostics",
    "grid",
    "integrator",
    "simulation",
    "edge_pull",
]