"""Configuration for moodtrack."""

from moodtrack.config.logging import configure_logging
from moodtrack.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
