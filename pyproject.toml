[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "greenhousectl"
version = "0.1.0"
description = "Greenhouse climate control: relay actuators, control loops and adjustable targets synced with a Blynk-style dashboard"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "greenhouse",
    "home-automation",
    "climate-control",
    "irrigation",
    "lighting",
    "pid",
    "relay",
    "servo",
    "blynk",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["greenhousectl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
