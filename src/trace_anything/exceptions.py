"""Custom exceptions for trace-anything.

The engine never raises on behalf of a traced object: failures of the
original operations are re-raised unchanged, and capabilities the engine
lacks are reported as Warning log records. The exceptions here cover
misuse of the engine itself.

Usage:
    from trace_anything.exceptions import ConfigurationError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "TraceAnythingError",
]


class TraceAnythingError(Exception):
    """Base error for all trace-anything operations."""


class ConfigurationError(TraceAnythingError, ValueError):
    """Raised when tracing options cannot be resolved or loaded.

    Subclasses ValueError so callers validating user input can catch
    either.
    """
