[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mzgeom"
version = "0.1.0"
description = "Time values, quaternions, boxes, grids, planar geometry, a viewing camera and 3D distance fields"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = [
    "geometry",
    "quaternion",
    "distance transform",
    "signed distance field",
    "camera",
    "convex hull",
    "grid",
]
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
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mzgeom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
