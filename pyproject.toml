[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "satlink"
version = "0.1.0"
description = "CubeSat power-system simulation, a radio dongle model and ground-station tooling"
requires-python = ">=3.10"
keywords = [
    "cubesat",
    "satellite",
    "eps",
    "power-system",
    "simulation",
    "ground-station",
    "ieee802154",
    "hid",
    "serial",
    "orbit",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Terminals :: Serial",
]
dependencies = [
    "pyserial",
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
satlink-ground = "satlink.ground:main"
satlink-orbit = "satlink.orbit:main"
satlink-launch = "satlink.launcher:main"

[tool.hatch.build.targets.wheel]
packages = ["satlink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
