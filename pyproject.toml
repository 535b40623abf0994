[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "s7device"
version = "0.1.0"
description = "PLC address parsing, value conversion and poll groups for Siemens S7 device support"
requires-python = ">=3.10"
dependencies = []
keywords = ["plc", "s7", "siemens", "polling", "device-support", "automation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["s7device"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
