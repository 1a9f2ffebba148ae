[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "swarmcdn"
version = "0.1.0"
description = "A small content-addressed file distribution network with a central tracker and chunk-serving peers"
requires-python = ">=3.10"
keywords = ["cdn", "p2p", "chunking", "file-sharing", "content-addressed"]
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
    "Topic :: Communications :: File Sharing",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
swarmcdn-server = "swarmcdn.server:main"
swarmcdn-peer = "swarmcdn.peer.client:main"

[tool.hatch.build.targets.wheel]
packages = ["swarmcdn"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
