"""Vocal trainer: breath challenge and pitch lab driven by the microphone."""

__version__ = "0.1.0"
