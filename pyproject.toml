[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "psenscan"
version = "0.1.0"
description = "Data types, frame codecs and protocol messages for PSENscan safety laser scanners (firmware version 2)"
requires-python = ">=3.10"
dependencies = []
keywords = ["laser scanner", "safety", "udp", "protocol", "monitoring frame", "crc"]
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
packages = ["psenscan"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
