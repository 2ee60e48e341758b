"""Logging utilities and helpers.

This package provides logging infrastructure for trace-anything:
- iso_formatter: ISO 8601 timestamp formatting for JSON-lines output
- logging_helpers: Record serialization, sanitization and error metadata

Import directly from submodules to avoid circular imports:
    from trace_anything.utils.logging.logging_helpers import serialize_trace_log
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
