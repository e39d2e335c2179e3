[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "suimev"
version = "0.1.0"
description = "Building blocks for Sui DEX trading bots: Shio auction feed and bidding, pool descriptions, simulation context and an override object cache."
requires-python = ">=3.10"
keywords = ["sui", "dex", "mev", "shio", "auction", "arbitrage", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "websockets",
    "pynacl",
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["suimev"]

[tool.hatch.build.targets.sdist]
include = ["suimev", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
