[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clothsim"
version = "0.1.0"
description = "Mass-spring cloth simulation with sphere collisions and per-vertex control"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["cloth", "simulation", "mass-spring", "physics", "collision", "mesh"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
clothsim-grid = "clothsim.grid:main"
clothsim-simulate = "clothsim.simulation:main"
clothsim-edge-pull = "clothsim.edge_pull:main"

[tool.hatch.build.targets.wheel]
packages = ["clothsim"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
