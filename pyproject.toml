[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "corekv"
version = "0.1.0"
description = "Building blocks for an LSM-tree key-value store: entry codecs, bloom filters, an arena skiplist and a TinyLFU cache."
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "lsm", "skiplist", "bloom-filter", "tinylfu", "cache", "storage"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["corekv"]

[tool.pytest.ini_options]
addopts = "-ra"
