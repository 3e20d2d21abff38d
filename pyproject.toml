[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trojango"
version = "0.1.0"
description = "Core of a trojan-style proxy: config loading, start-up options, relaying, redirection, geodata decoding and logging"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["proxy", "trojan", "relay", "geoip", "geosite", "config"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
trojango = "trojango.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trojango"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
