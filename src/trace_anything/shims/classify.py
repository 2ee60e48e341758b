"""Member classification: which shim a member of a traced value gets."""

from __future__ import annotations

__all__ = [
    "MemberKind",
    "candidate_members",
    "classify_member",
]

from enum import Enum
from typing import TYPE_CHECKING, Any

from trace_anything.deferred import can_observe
from trace_anything.shims.descriptors import is_writable
from trace_anything.shims.events import event_name_for
from trace_anything.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig


class MemberKind(str, Enum):
    METHOD = "method"
    PROPERTY = "property"
    PROMISE_PROPERTY = "promise_property"
    EVENT_LISTENER_PROPERTY = "event_listener_property"
    SILENT = "silent"


def candidate_members(obj: Any, config: TraceConfig) -> list[str]:
    """Names of the members a traced value gets shims for.

    Public names from dir(obj) minus config.skip_properties, followed by
    config.extra_properties (which may name private or missing members),
    without duplicates.
    """
    names = [
        name
        for name in dir(obj)
        if not name.startswith("_") and name not in config.skip_properties
    ]
    names.extend(config.extra_properties)
    return list(dict.fromkeys(names))


def classify_member(obj: Any, name: str, config: TraceConfig, *, events: bool = True) -> MemberKind:
    """Classify one member of obj.

    A member named like a listener property (on<event>) is routed to the
    event subsystem only when it holds None or a callable and can be
    assigned; otherwise it is classified like any other member.

    Args:
        obj: Original object.
        name: Member name.
        config: Options of the tracing pass.
        events: Whether listener properties are routed to the event subsystem.

    Returns:
        The member's kind. A member whose getter fails (or that does not
        exist yet) is a PROPERTY; its getter shim reports the failure when
        the application reads it.
    """
    listener_named = events and config.events and event_name_for(name) is not None

    try:
        value = getattr(obj, name)
    except Exception as e:
        if not isinstance(e, AttributeError):
            get_system_logger().debug(
                {
                    "event": "member_read_failed",
                    "member": name,
                    "class_name": type(obj).__name__,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "message": f"Reading {name} on {type(obj).__name__} failed during classification",
                }
            )
        elif listener_named and is_writable(obj, name):
            return MemberKind.EVENT_LISTENER_PROPERTY
        return MemberKind.PROPERTY if config.properties else MemberKind.SILENT

    if listener_named and (value is None or callable(value)) and is_writable(obj, name):
        return MemberKind.EVENT_LISTENER_PROPERTY

    if callable(value):
        return MemberKind.METHOD if config.methods else MemberKind.SILENT

    if config.properties and config.treat_promise_properties_as_events and can_observe(value):
        return MemberKind.PROMISE_PROPERTY

    return MemberKind.PROPERTY if config.properties else MemberKind.SILENT
