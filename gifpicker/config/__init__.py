"""Configuration module: exports Settings and load_config."""

from gifpicker.config.loader import load_config
from gifpicker.config.settings import Settings

__all__ = ["Settings", "load_config"]
