"""Logging helper utilities.

Provides generic utilities for trace log output:
- Record serialization (JSON-safe dicts of trace log records)
- Sanitization (log injection prevention, repr truncation)
- Error metadata extraction
"""

from __future__ import annotations

__all__ = [
    # Record serialization
    "serialize_trace_log",
    "to_json_safe",
    # Sanitization
    "safe_repr",
    "sanitize_for_logging",
    # Error handling
    "extract_error_metadata",
]

import traceback
from enum import Enum
from typing import Any

from trace_anything.constants import RESULT_REPR_MAX_LENGTH
from trace_anything.telemetry.models import TraceLog

# Containers nested deeper than this are logged as reprs
_MAX_JSON_DEPTH = 4


# ============================================================================
# Record Serialization
# ============================================================================


def serialize_trace_log(record: TraceLog) -> dict[str, Any]:
    """Serialize a trace log record for JSON logging.

    Only fields that describe the occurrence are included: 'type' always,
    every other field only if it was set when the record was built. Objects
    become truncated reprs and exceptions become error metadata.

    Args:
        record: Trace log record.

    Returns:
        dict: JSON-serializable record data, in field declaration order.

    Example:
        >>> serialize_trace_log(MethodLog(timestamp=1.0, method_name="play", ...))
        {"type": "Method", "timestamp": 1.0, "duration": 0.0, "method_name": "play", ...}
    """
    data: dict[str, Any] = {}
    for name in type(record).model_fields:
        if name != "type" and name not in record.model_fields_set:
            continue
        data[name] = to_json_safe(getattr(record, name))
    return data


def to_json_safe(value: Any, _depth: int = 0) -> Any:
    """Convert a value into something json.dumps accepts.

    Args:
        value: Any value found in a record.

    Returns:
        JSON primitives unchanged, containers converted element-wise,
        exceptions as error metadata, anything else as a truncated repr.
    """
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseException):
        return extract_error_metadata(value)
    if _depth < _MAX_JSON_DEPTH:
        # Exact types only; subclasses may be traced objects with custom reprs
        if type(value) in (list, tuple, set, frozenset):
            return [to_json_safe(item, _depth + 1) for item in value]
        if type(value) is dict:
            return {str(k): to_json_safe(v, _depth + 1) for k, v in value.items()}
    return safe_repr(value)


# ============================================================================
# Sanitization
# ============================================================================


def sanitize_for_logging(value: str) -> str:
    """Sanitize string values for safe single-line logging.

    Prevents log injection by escaping newlines and control characters.

    Args:
        value: String value to sanitize.

    Returns:
        str: Sanitized string safe for line-oriented logs.

    Example:
        >>> sanitize_for_logging("first\\nsecond")
        'first\\\\nsecond'
    """
    if not isinstance(value, str):
        return str(value)

    # Escape newlines and carriage returns to prevent log injection
    sanitized = value.replace("\n", "\\n").replace("\r", "\\r")
    sanitized = sanitized.replace("\t", "\\t")

    return sanitized


def safe_repr(value: Any, max_length: int = RESULT_REPR_MAX_LENGTH) -> str:
    """repr() that never raises and never exceeds max_length.

    Args:
        value: Object to represent.
        max_length: Maximum length before truncation.

    Returns:
        str: Sanitized, possibly truncated repr.
    """
    try:
        text = repr(value)
    except Exception as e:
        text = f"<{type(value).__name__} object (repr failed: {type(e).__name__})>"

    text = sanitize_for_logging(text)
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


# ============================================================================
# Error Handling
# ============================================================================


def extract_error_metadata(error: BaseException) -> dict[str, Any]:
    """Extract metadata from an exception.

    Args:
        error: The exception to extract metadata from.

    Returns:
        dict with error metadata:
            - error: str representation
            - error_type: exception class name
            - error_traceback: traceback of the exception, if it was raised
    """
    metadata: dict[str, Any] = {
        "error": str(error),
        "error_type": type(error).__name__,
    }

    if error.__traceback__ is not None:
        metadata["error_traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return metadata
