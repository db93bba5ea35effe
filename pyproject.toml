[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zalletrpc"
version = "0.1.0"
description = "JSON-RPC helpers for a Zcash full node wallet: legacy error codes, parameter and amount parsing, privacy policies and request compatibility fixes."
requires-python = ">=3.10"
dependencies = []
keywords = ["zcash", "wallet", "json-rpc", "privacy", "zatoshis"]
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
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zalletrpc"]

[tool.pytest.ini_options]
addopts = "-ra"
