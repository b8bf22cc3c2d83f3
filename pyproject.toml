[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "easyjson"
version = "0.1.0"
description = "Explicit JSON writing and lexing primitives with raw messages, unknown-field passthrough and naming helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "lexer", "writer", "serialization", "marshaling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: File Formats :: JSON",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["easyjson"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
