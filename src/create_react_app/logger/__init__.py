"""Logging utilities for create-react-app.

Architecture:
    Application → QueueHandler → Queue → QueueListener Thread
                                              ↓
                                    Console + File Handlers

Usage:
    >>> from create_react_app.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Creating a new React app in %s.", root)

Environment Variables:
    CREATE_REACT_APP_LOG_DIR: Directory for create-react-app.log.

Rules:
    1. Always use: logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Never attach handlers to child loggers
    4. Use %-formatting in log calls, never f-strings
"""

from create_react_app.logger.config import (
    update_logger_from_config as _update_config,
)
from create_react_app.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
)
from create_react_app.logger.handlers import ConfigurationError
from create_react_app.logger.logger import (
    flush_all_handlers,
    get_logger,
    setup_logging,
)
from create_react_app.logger.state import get_state

__all__ = [
    "ColoredConsoleFormatter",
    "ConfigurationError",
    "HybridConsoleFormatter",
    "SimpleConsoleFormatter",
    "flush_all_handlers",
    "get_logger",
    "setup_logging",
    "update_logger_from_config",
]


def update_logger_from_config() -> None:
    """Apply settings.conf log levels to the global logger state."""
    _update_config(get_state())
