[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "msxdbg"
version = "0.1.0"
description = "Debugger support library for an MSX emulator: control connection, symbol tables, session files, memory layout, stack view and settings"
requires-python = ">=3.10"
dependencies = []
keywords = ["msx", "z80", "debugger", "emulator", "symbols", "assembler"]
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
    "Topic :: Software Development :: Debuggers",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["msxdbg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
