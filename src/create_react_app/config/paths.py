"""Path constants and utilities for create-react-app configuration."""

import os
from pathlib import Path

from create_react_app.constants import (
    CONFIG_DIR_ENV_VAR,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
)


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    DEFAULT_CONFIG_DIR = HOME_DIR / CONFIG_DIR_NAME / DEFAULT_CONFIG_SUBDIR

    @classmethod
    def config_dir(cls) -> Path:
        """Return the configuration directory.

        ``CREATE_REACT_APP_CONFIG_DIR`` overrides the default location.
        """
        override = os.getenv(CONFIG_DIR_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return cls.DEFAULT_CONFIG_DIR

    @classmethod
    def settings_file(cls, config_dir: Path | None = None) -> Path:
        """Return the path of settings.conf inside ``config_dir``."""
        return (config_dir or cls.config_dir()) / CONFIG_FILE_NAME
