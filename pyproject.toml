[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sksync"
version = "0.0.8"
description = "Synchronize AI agent skill symlinks"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["skills", "symlinks", "agents", "sync", "git"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sksync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
