[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mapfpc"
version = "0.1.0"
description = "Building blocks for multi-agent path finding with precedence constraints: grid instances, conflicts, MDDs and agent dependency checks."
requires-python = ">=3.10"
dependencies = []
keywords = ["mapf", "multi-agent", "path-finding", "mdd", "conflicts", "planning"]
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
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mapfpc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
