"""Drafting of trace log records.

A LogDraft is opened when an occurrence starts (timestamp and perf counter
are taken then), collects the outcome as it becomes known, and is turned
into one frozen record when emitted. Outcome setters keep 'result' and
'threw' mutually exclusive.
"""

from __future__ import annotations

__all__ = [
    "LogDraft",
    "now_ms",
]

import time
from typing import Any

from trace_anything.telemetry.models import TraceLog


def now_ms() -> float:
    """Milliseconds since the epoch, as used for record timestamps."""
    return time.time() * 1000


class LogDraft:
    """Mutable builder for one trace log record."""

    def __init__(self, model: type[TraceLog], **fields: Any) -> None:
        self.model = model
        self.fields = fields
        self.timestamp = now_ms()
        self._start = time.perf_counter()

    def set_result(self, value: Any) -> None:
        self.fields.pop("threw", None)
        self.fields["result"] = value

    def set_threw(self, error: BaseException) -> None:
        self.fields.pop("result", None)
        self.fields["threw"] = error

    def build(self, *, timed: bool = True) -> TraceLog:
        """Create the frozen record.

        Args:
            timed: Measure duration since the draft was opened. Untimed
                records (events, plain setters) carry duration 0.

        Returns:
            Record of the draft's model with only the collected fields set.
        """
        duration = round((time.perf_counter() - self._start) * 1000, 2) if timed else 0.0
        return self.model(timestamp=self.timestamp, duration=duration, **self.fields)
