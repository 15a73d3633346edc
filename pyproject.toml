[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "gridmatch"
version = "0.1.0"
description = "Grid-based 2D laser scan matching, pose geometry and small statistics utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["slam", "scan matching", "occupancy grid", "laser", "robotics", "icp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["gridmatch*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
