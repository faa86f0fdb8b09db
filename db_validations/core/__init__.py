"""Core configuration helpers."""

from .config import Settings, settings
from .logging import configure_logging

__all__ = ["Settings", "settings", "configure_logging"]
