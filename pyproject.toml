[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "magninexus"
version = "0.1.0"
description = "TCP and UDP message and attachment exchange with a fixed 128-byte header framing"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "udp", "chat", "asyncio", "networking", "framing"]
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
    "Topic :: Communications :: Chat",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["magninexus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
