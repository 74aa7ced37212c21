[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "juno"
version = "5.0.0"
description = "Chain data aggregator that fetches blocks, transactions and validators from a node and hands them to a database"
requires-python = ">=3.10"
keywords = [
    "blockchain",
    "indexer",
    "cosmos",
    "tendermint",
    "cometbft",
    "bech32",
    "explorer",
]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
    "websocket-client>=1.5",
    "grpcio>=1.50",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["juno"]

[tool.hatch.build.targets.sdist]
include = ["juno", "tests", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
