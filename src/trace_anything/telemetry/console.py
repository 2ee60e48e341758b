"""Console sink for trace log records.

The default sink hands every record to the stdlib logger
'trace-anything.trace', which writes one line per record to stderr:

    TraceAnything: (ID Player_1) Player.play(1.5) => True
    TraceAnything: (ID Player_1) Player.volume = 0.5
    TraceAnything: (ID Player_1) Player volumechange event <Event> => 0.5

Levels follow the record: WARNING for warnings, ERROR when something was
thrown, DEBUG otherwise. create_console_logger() builds further sinks, for
other streams or JSON-lines output.
"""

from __future__ import annotations

__all__ = [
    "TraceConsoleFormatter",
    "create_console_logger",
    "default_logger",
    "format_trace_log",
]

import itertools
import logging
import sys
from collections.abc import Callable
from typing import IO, Any

from trace_anything.constants import APP_NAME, LOG_PREFIX
from trace_anything.telemetry.models import LogType, TraceLog
from trace_anything.utils.logging.iso_formatter import ISO8601Formatter
from trace_anything.utils.logging.logging_helpers import safe_repr

_console_counter = itertools.count(1)

# (stream, json_output) -> logger, so repeated sinks for one stream share a logger
_console_loggers: dict[tuple[IO[str], bool], logging.Logger] = {}


def _format_call_args(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    parts = [safe_repr(arg) for arg in args]
    parts.extend(f"{key}={safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(parts)


def format_trace_log(log: TraceLog) -> str:
    """Render one record as a single human-readable line.

    Args:
        log: Trace log record.

    Returns:
        str: Line starting with "TraceAnything: (ID <id>)", or with
        "TraceAnything: " for records without an instance (warnings).
    """
    fields = log.model_fields_set
    prefix = f"{LOG_PREFIX}: "
    if "instance_id" in fields:
        prefix += f"(ID {log.instance_id}) "

    if log.type == LogType.WARNING:
        return prefix + log.message

    threw = getattr(log, "threw", None) if "threw" in fields else None

    if log.type in (LogType.CONSTRUCTOR, LogType.METHOD):
        if log.type == LogType.CONSTRUCTOR:
            head = f"new {log.class_name}"
        else:
            head = f"{log.class_name}.{log.method_name}"
        call = f"{prefix}{head}({_format_call_args(log.args, log.kwargs)})"
        if threw is not None:
            return f"{call} threw {safe_repr(threw)}"
        return f"{call} => {safe_repr(log.result)}"

    if log.type == LogType.GETTER:
        head = f"{prefix}{log.class_name}.{log.member_name}"
        if threw is not None:
            return f"{head} threw {safe_repr(threw)}"
        return f"{head} => {safe_repr(log.result)}"

    if log.type == LogType.SETTER:
        head = f"{prefix}{log.class_name}.{log.member_name} = {safe_repr(log.value)}"
        if threw is not None:
            return f"{head} threw {safe_repr(threw)}"
        return head

    # Event
    head = f"{prefix}{log.class_name} {log.event_name} event {safe_repr(log.event)}"
    if "value" in fields:
        return f"{head} => {safe_repr(log.value)}"
    return head


def _level_for(log: TraceLog) -> int:
    if log.type == LogType.WARNING:
        return logging.WARNING
    if "threw" in log.model_fields_set:
        return logging.ERROR
    return logging.DEBUG


class TraceConsoleFormatter(logging.Formatter):
    """Human-readable formatter for trace records.

    Falls back to the standard format for messages that are not records.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, TraceLog):
            return format_trace_log(record.msg)
        return super().format(record)


def _configure_logger(
    logger: logging.Logger,
    stream: IO[str] | None,
    json_output: bool,
) -> logging.Logger:
    logger.setLevel(logging.DEBUG)
    logger.propagate = False  # Don't propagate to root logger

    # Close and remove any existing handlers to avoid duplicates and resource leaks
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ISO8601Formatter() if json_output else TraceConsoleFormatter())
    logger.addHandler(handler)
    return logger


# Module-level singleton logger behind default_logger
_trace_logger: logging.Logger | None = None


def _get_trace_logger() -> logging.Logger:
    global _trace_logger

    if _trace_logger is None:
        _trace_logger = _configure_logger(
            logging.getLogger(f"{APP_NAME}.trace"), stream=None, json_output=False
        )
    return _trace_logger


def default_logger(log: TraceLog) -> None:
    """Default sink: write the record to stderr as one line."""
    _get_trace_logger().log(_level_for(log), log)


def create_console_logger(
    stream: IO[str] | None = None,
    *,
    json_output: bool = False,
) -> Callable[[TraceLog], None]:
    """Create a sink writing records to a console stream.

    Sinks for the same stream and output format share one stdlib logger
    ('trace-anything.console.<n>'). Like every stdlib logger it lives
    for the rest of the process, and so does its stream.

    Args:
        stream: Text stream to write to. Defaults to stderr.
        json_output: Write JSON lines (ISO 8601 'time' field first) instead
            of human-readable lines.

    Returns:
        Callable accepting a TraceLog, usable as the 'logger' option.

    Example:
        >>> trace_object(player, logger=create_console_logger(sys.stdout, json_output=True))
    """
    key = (stream if stream is not None else sys.stderr, json_output)
    logger = _console_loggers.get(key)
    if logger is None:
        logger = _configure_logger(
            logging.getLogger(f"{APP_NAME}.console.{next(_console_counter)}"),
            stream=key[0],
            json_output=json_output,
        )
        _console_loggers[key] = logger

    def console_logger(log: TraceLog) -> None:
        logger.log(_level_for(log), log)

    return console_logger
