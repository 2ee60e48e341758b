"""Pydantic models for trace log records."""

from trace_anything.telemetry.models.records import (
    ConstructorLog,
    EventLog,
    GetterLog,
    LogType,
    MethodLog,
    SetterLog,
    TraceLog,
    WarningLog,
)

__all__ = [
    "ConstructorLog",
    "EventLog",
    "GetterLog",
    "LogType",
    "MethodLog",
    "SetterLog",
    "TraceLog",
    "WarningLog",
]
