"""Pydantic models for trace log records.

One record is emitted per observed occurrence (constructor call, method
call, getter, setter, event, warning) and handed to the configured sink.

IMPORTANT: Fields that do not apply to an occurrence are left UNSET rather
than set to None, because None is a legitimate result or value:
- A method that raised has no 'result' ("result" not in model_fields_set)
- A method that returned has no 'threw'
- Warning records carry no instance, instance_id or class_name

Use ``record.model_dump(exclude_unset=True)`` to get only the fields that
describe the occurrence. Records are frozen and built once, at emission
(see trace_anything.telemetry.recorder.LogDraft).
"""

from __future__ import annotations

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

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LogType(str, Enum):
    """Kind of a trace log record."""

    CONSTRUCTOR = "Constructor"
    METHOD = "Method"
    GETTER = "Getter"
    SETTER = "Setter"
    EVENT = "Event"
    WARNING = "Warning"


class TraceLog(BaseModel):
    """
    Common fields of every trace log record.

    Attributes:
        type: Record kind.
        timestamp: When the occurrence started, in milliseconds since the epoch (UTC).
        duration: Elapsed milliseconds; 0 for events, plain setters and warnings.
        instance: The traced value the occurrence happened on.
        instance_id: Display identity of the instance (see IdentityRegistry).
        class_name: Name of the instance's class.
    """

    type: LogType
    timestamp: float
    duration: float = 0.0

    instance: Any = None
    instance_id: Any = None
    class_name: Optional[str] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class ConstructorLog(TraceLog):
    """A traced class was instantiated.

    'result' is the traced instance; 'threw' is set instead when the
    original constructor raised.
    """

    type: Literal[LogType.CONSTRUCTOR] = LogType.CONSTRUCTOR
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    threw: Optional[BaseException] = None


class MethodLog(TraceLog):
    """A traced method was called.

    For deferred results 'result' is either the raw awaitable/future
    (logged immediately) or the settled value (logged at settlement).
    """

    type: Literal[LogType.METHOD] = LogType.METHOD
    method_name: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    threw: Optional[BaseException] = None


class GetterLog(TraceLog):
    """A traced accessor was read."""

    type: Literal[LogType.GETTER] = LogType.GETTER
    member_name: str
    result: Any = None
    threw: Optional[BaseException] = None


class SetterLog(TraceLog):
    """A traced member was written."""

    type: Literal[LogType.SETTER] = LogType.SETTER
    member_name: str
    value: Any = None
    threw: Optional[BaseException] = None


class EventLog(TraceLog):
    """A listener on a traced value fired.

    'value' is the correlated member's value at fire time, or a mapping of
    names to values when several members are correlated. Unset when no
    member correlates with the event.
    """

    type: Literal[LogType.EVENT] = LogType.EVENT
    event_name: str
    event: Any = None
    value: Any = None


class WarningLog(TraceLog):
    """The engine could not trace something and left it untouched."""

    type: Literal[LogType.WARNING] = LogType.WARNING
    message: str
