"""gifpicker: multi-perspective reaction GIF generation service."""

__version__ = "0.1.0"
