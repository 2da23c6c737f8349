"""Console formatters for the create-react-app logger.

INFO records are the user-facing progress lines ("Installing packages...")
and print bare; everything else keeps timestamp, logger name and a
coloured level so warnings about dropped templates or offline mode stand
out in the terminal next to npm's own output.
"""

import logging

from create_react_app.constants import LOG_COLORS


class ColoredConsoleFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI colour codes."""

    def format(self, record: logging.LogRecord) -> str:
        """Format record with a coloured level name.

        The record's levelname is restored afterwards so other handlers
        (the rotating file handler) see the plain value.

        Args:
            record: The log record to format

        Returns:
            Formatted log message with ANSI color codes for the level name

        """
        if record.levelname in LOG_COLORS:
            original_levelname = record.levelname
            record.levelname = (
                f"{LOG_COLORS[original_levelname]}{original_levelname}"
                f"{LOG_COLORS['RESET']}"
            )
            try:
                return super().format(record)
            finally:
                record.levelname = original_levelname

        return super().format(record)


class SimpleConsoleFormatter(logging.Formatter):
    """Formatter that outputs the message only."""

    def format(self, record: logging.LogRecord) -> str:
        """Return the interpolated message without metadata."""
        return record.getMessage()


class HybridConsoleFormatter(logging.Formatter):
    """Plain output for INFO, structured coloured output for other levels.

    Example Output:
        INFO:     "Installing packages. This might take a couple of minutes."
        WARNING:  "12:30:45 - create_react_app.core.orchestrator - WARNING
                  - You appear to be offline."

    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
    ) -> None:
        """Initialize hybrid formatter.

        Args:
            fmt: Format string for structured messages
            datefmt: Date format string for timestamps

        """
        super().__init__(fmt, datefmt)
        self._simple_formatter = SimpleConsoleFormatter()
        self._colored_formatter = ColoredConsoleFormatter(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format record using the simple or structured format by level."""
        if record.levelno == logging.INFO:
            return self._simple_formatter.format(record)
        return self._colored_formatter.format(record)
