[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "objfastload"
version = "0.1.0"
description = "Wavefront .obj and .mtl loader producing flat attribute arrays and interleaved triangle buffers"
requires-python = ">=3.10"
dependencies = [
    "zstandard",
]
keywords = ["wavefront", "obj", "mtl", "mesh", "3d", "loader", "geometry"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
objfastload = "objfastload.viewer:main"

[tool.hatch.build.targets.wheel]
packages = ["objfastload"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
