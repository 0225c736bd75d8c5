[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teamrepo"
version = "0.1.0"
description = "Load, query and check a repository of team, people and repository membership data"
requires-python = ">=3.11"
dependencies = []
keywords = ["teams", "membership", "permissions", "mailing-lists", "zulip", "validation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["teamrepo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
