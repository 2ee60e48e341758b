"""Log formatting utilities for JSONL output.

Provides ISO 8601 timestamp formatting for JSON-lines trace output.
Record serialization lives in logging_helpers.py.
"""

from __future__ import annotations

__all__ = ["ISO8601Formatter"]

import json
import logging
from datetime import datetime, timezone

from trace_anything.telemetry.models import TraceLog
from trace_anything.utils.logging.logging_helpers import serialize_trace_log


class ISO8601Formatter(logging.Formatter):
    """Formatter with ISO 8601 timestamps (UTC) for JSONL output.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: 2025-12-04T10:48:37.123Z
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSONL with ISO 8601 timestamp.

        Args:
            record: The log record to format

        Returns:
            str: JSON-formatted log entry with timestamp
        """
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        # Trace records (passed as the message by the console sink)
        if isinstance(record.msg, TraceLog):
            log_data = serialize_trace_log(record.msg)
        # Dict messages (structured logging)
        elif isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {"message": record.getMessage()}

        # Timestamp as first field
        log_entry = {"time": timestamp, **log_data}
        return json.dumps(log_entry, default=str)
