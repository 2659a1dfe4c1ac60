[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asn1der"
version = "0.1.0"
description = "BER/DER encoding and decoding of ASN.1 REAL, string, SEQUENCE, SET and tagged values"
requires-python = ">=3.10"
dependencies = []
keywords = ["asn1", "asn.1", "der", "ber", "x690", "encoding", "parser"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["asn1der"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
