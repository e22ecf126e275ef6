[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "navii"
version = "0.1.0"
description = "Resumable geographical navigation over countries, states, cities, postal codes and search queries, backed by SQLite"
requires-python = ">=3.10"
dependencies = []
keywords = ["geography", "navigation", "postal-codes", "cities", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["navii"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
