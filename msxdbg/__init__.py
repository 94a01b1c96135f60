"""Debugger support library for an MSX emulator: connection, symbols, layout, stack and settings."""

__version__ = "0.1.0"