[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tpzero"
version = "0.1.0"
description = "Minimal TCP client and server exchanging length-prefixed messages and packages of text values"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "sockets", "client", "server", "serialization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tpzero-client = "tpzero.client:main"
tpzero-server = "tpzero.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tpzero"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
