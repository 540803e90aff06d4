[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "precompile_kit"
version = "0.1.0"
description = "Toolkit for writing EVM precompiles: Solidity ABI encoding, function selectors, gas costs and precompile set routing."
requires-python = ">=3.10"
keywords = ["evm", "precompile", "abi", "solidity", "keccak", "ethereum"]
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
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["precompile_kit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
