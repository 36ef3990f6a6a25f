[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "paymentgw"
version = "0.1.0"
description = "Building blocks for event-driven services: domain events, event sourcing, a type registry with JSON and protobuf serdes, and asynchronous event and reply messaging."
requires-python = ">=3.10"
keywords = [
    "ddd",
    "domain-events",
    "event-sourcing",
    "messaging",
    "registry",
    "serialization",
]
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
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "python-dotenv",
    "protobuf",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["paymentgw"]

[tool.hatch.build.targets.sdist]
include = [
    "paymentgw",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
