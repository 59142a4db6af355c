[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reactorkit"
version = "0.1.0"
description = "Building blocks for reactor-style network services: timestamps, time zones, logging, rolling log files, synchronisation helpers, byte buffers, addresses, sockets and event channels."
requires-python = ">=3.10"
dependencies = []
keywords = ["reactor", "networking", "logging", "buffer", "sockets", "timezone"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Logging",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["reactorkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
