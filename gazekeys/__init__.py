"""Blink- and gaze-driven arrow-key commands from close-up eye images."""

__version__ = "0.1.0"