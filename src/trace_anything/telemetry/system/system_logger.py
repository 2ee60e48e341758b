"""System logger for operational events.

This module provides a singleton system logger for diagnostics of the engine
itself (e.g., a class swap refused by the interpreter, a member that could
not be read during classification). These are not trace records: trace
records always go to the configured sink.

Logging strategy:
- Console (stderr) only, WARNING and above by default
- Engine diagnostics are logged at DEBUG; raise the level with
  ``get_system_logger().setLevel(logging.DEBUG)`` to see them
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "get_system_logger",
]

import logging
import sys

from trace_anything.constants import APP_NAME


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human-readable console output.

        Args:
            record: The log record to format.

        Returns:
            str: Formatted log message with level prefix.
        """
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


# Module-level singleton logger
_system_logger: logging.Logger | None = None


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with a stderr handler.

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> from trace_anything.telemetry.system import get_system_logger
        >>> get_system_logger().debug({"event": "class_swap_refused", "message": "..."})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.WARNING)
    _system_logger.propagate = False  # Don't propagate to root logger

    # Close and remove any existing handlers to avoid duplicates and resource leaks
    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger
