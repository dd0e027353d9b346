"""
Configuration module.

Handles loading of process settings from the environment, `.env` and an
optional YAML file, and the per-session Moodle connection config.
"""

from .loader import ConfigLoader, load_settings
from .models import DatabaseSettings, MoodleConfig, Settings

__all__ = ["ConfigLoader", "load_settings", "DatabaseSettings", "MoodleConfig", "Settings"]
