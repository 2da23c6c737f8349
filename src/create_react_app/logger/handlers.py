"""Handler creation for the create-react-app logging system.

All handlers hang off a QueueListener; loggers only ever see a
QueueHandler, so coroutines never block on terminal or file I/O while a
package manager is streaming its own output.
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from create_react_app.constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_DATE_FORMAT,
    LOG_CONSOLE_FORMAT,
    LOG_FILE_DATE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_ROTATION_THRESHOLD_BYTES,
)
from create_react_app.logger.formatters import HybridConsoleFormatter
from create_react_app.logger.state import _LoggerState

ROOT_LOGGER_NAME = "create_react_app"


class ConfigurationError(Exception):
    """Raised when the log file cannot be set up."""


def _level(name: str, fallback: int) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else fallback


def build_handlers(
    console_level: str,
    file_level: str,
    log_file: Path,
    enable_file_logging: bool,  # noqa: FBT001
) -> list[logging.Handler]:
    """Create the terminal handler and, optionally, the log file handler.

    Args:
        console_level: Level name for terminal output
        file_level: Level name for the log file
        log_file: Log file path; its directory is created if missing
        enable_file_logging: Whether to add the file handler

    Returns:
        Handlers for the QueueListener

    Raises:
        ConfigurationError: If the log file cannot be opened

    """
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        HybridConsoleFormatter(
            LOG_CONSOLE_FORMAT, datefmt=LOG_CONSOLE_DATE_FORMAT
        )
    )
    console.setLevel(_level(console_level, logging.INFO))
    handlers: list[logging.Handler] = [console]

    if not enable_file_logging:
        return handlers

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_ROTATION_THRESHOLD_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        msg = f"Cannot write log file {log_file}: {e}"
        raise ConfigurationError(msg) from e

    file_handler.setFormatter(
        logging.Formatter(LOG_FILE_FORMAT, datefmt=LOG_FILE_DATE_FORMAT)
    )
    file_handler.setLevel(_level(file_level, logging.INFO))
    handlers.append(file_handler)
    return handlers


def setup_root_logger(
    state: _LoggerState,
    console_level: str,
    file_level: str,
    log_file: Path,
    enable_file_logging: bool,  # noqa: FBT001
) -> None:
    """Attach a single QueueHandler to the ``create_react_app`` logger.

    The root logger accepts everything; filtering happens per handler
    behind the listener.

    Raises:
        ConfigurationError: If the log file cannot be opened

    """
    handlers = build_handlers(
        console_level, file_level, log_file, enable_file_logging
    )

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    root_logger.propagate = False
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    state.log_queue = queue.Queue(-1)
    state.queue_listener = QueueListener(
        state.log_queue, *handlers, respect_handler_level=True
    )
    state.queue_listener.start()
    root_logger.addHandler(QueueHandler(state.log_queue))
    state.root_initialized = True
