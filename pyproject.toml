[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "raftstore"
version = "0.1.0"
description = "Raft log identities, votes, an async storage interface, replication events and replication progress tracking"
requires-python = ">=3.10"
keywords = ["raft", "consensus", "replication", "storage", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["raftstore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
