[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "caseforge"
version = "0.1.0"
description = "Fixture tear-down guards, parametrized-test declaration checks, attribute templates and scratch cargo projects"
requires-python = ">=3.10"
keywords = ["testing", "fixtures", "parametrize", "templates", "cargo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "tomlkit",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["caseforge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
