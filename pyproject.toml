[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roxydemo"
version = "0.1.0"
description = "Mock Ethereum JSON-RPC nodes, a demo client and scripted walkthroughs of a JSON-RPC proxy's features"
requires-python = ">=3.10"
dependencies = [
    "aiohttp>=3.9",
]
keywords = [
    "json-rpc",
    "ethereum",
    "proxy",
    "mock",
    "load-balancing",
    "demo",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Testing :: Mocking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["roxydemo"]

[tool.hatch.build.targets.sdist]
include = [
    "roxydemo",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
