[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "alpmfiles"
version = "0.1.0"
description = "Readers for ALPM package metadata: the key = value INI dialect and MTREE v2 files"
requires-python = ">=3.10"
dependencies = []
keywords = ["alpm", "pacman", "mtree", "ini", "packaging", "metadata"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
alpm-mtree = "alpmfiles.mtree_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["alpmfiles"]

[tool.pytest.ini_options]
addopts = "-ra"
