"""Configuration management.

This package provides:
- SettingsManager: settings.conf INI management (from settings.py)
- Paths: Path constants and utilities (from paths.py)
"""

from create_react_app.config.paths import Paths
from create_react_app.config.settings import SettingsManager
from create_react_app.domain.types import NetworkSettings, Settings

__all__ = [
    "NetworkSettings",
    "Paths",
    "Settings",
    "SettingsManager",
]
