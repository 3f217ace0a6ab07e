[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "satbackend"
version = "0.1.0"
description = "Constraint graphs, CNF conversion and a pipe interface to an external incremental SAT solver"
requires-python = ">=3.10"
dependencies = []
keywords = ["sat", "cnf", "boolean", "constraint", "solver", "encoding"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["satbackend"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
