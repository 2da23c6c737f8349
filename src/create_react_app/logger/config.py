"""Bootstrap log settings and runtime updates from settings.conf.

The logger is imported by every module, including the config package, so
it starts from hardcoded defaults and picks up the INI levels later via
``update_logger_from_config``.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from create_react_app.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_LOG_LEVEL,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
    LOG_DIR_ENV_VAR,
    LOG_FILE_NAME,
)

if TYPE_CHECKING:
    from create_react_app.config import Settings
    from create_react_app.logger.state import _LoggerState


def load_log_settings() -> tuple[str, str, Path]:
    """Load default console level, file level and log file path.

    Environment Variable Override:
        CREATE_REACT_APP_LOG_DIR: Directory for the log file. The test
        suite points it at a temporary directory through pytest-env.

    Returns:
        Tuple of (console_level, file_level, log_path)

    """
    env_log_dir = os.getenv(LOG_DIR_ENV_VAR)
    if env_log_dir:
        log_path = Path(env_log_dir).expanduser() / LOG_FILE_NAME
    else:
        log_path = (
            Path.home()
            / CONFIG_DIR_NAME
            / DEFAULT_CONFIG_SUBDIR
            / "logs"
            / LOG_FILE_NAME
        )

    return DEFAULT_CONSOLE_LOG_LEVEL, DEFAULT_LOG_LEVEL, log_path


def apply_log_levels(state: "_LoggerState", settings: "Settings") -> None:
    """Set console and file handler levels from loaded settings.

    Only handler levels change; handlers are never added or removed here.

    Args:
        state: Logger state object
        settings: Loaded settings

    """
    console_level = getattr(
        logging,
        settings.get(KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL),
        logging.WARNING,
    )
    file_level = getattr(
        logging,
        settings.get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL),
        logging.INFO,
    )

    if state.queue_listener is not None:
        for handler in state.queue_listener.handlers:
            if isinstance(handler, RotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(console_level)

    state.config_applied = True


def update_logger_from_config(state: "_LoggerState") -> None:
    """Apply log levels from settings.conf to the running handlers.

    Args:
        state: Logger state object

    Note:
        A settings file that cannot be read leaves the bootstrap levels
        in place.

    """
    # Late import: config imports the logger
    from create_react_app.config import SettingsManager  # noqa: PLC0415

    try:
        settings = SettingsManager().load_settings()
    except (OSError, ValueError) as e:
        logging.getLogger(__name__).debug(
            "Keeping bootstrap log levels: %s", e
        )
        return

    apply_log_levels(state, settings)
