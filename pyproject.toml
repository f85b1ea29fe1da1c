[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "policymatch"
version = "0.1.0"
description = "Matching operators and helpers for access-control policy evaluation: key/path, regex, IP and glob matching, eval-rule rewriting and an LRU cache."
requires-python = ">=3.10"
dependencies = []
keywords = ["access-control", "authorization", "rbac", "abac", "matching", "policy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["policymatch"]

[tool.pytest.ini_options]
addopts = "-ra"
