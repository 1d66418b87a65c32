"""Configuration module - exports Settings and load_settings."""

from epubrag.config.loader import load_settings
from epubrag.config.settings import Settings

__all__ = ["Settings", "load_settings"]
