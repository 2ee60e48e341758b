"""Return-value propagation.

Values returned by traced methods (and settled deferred values) are traced
if their exact type was registered by a class shim, so instances created
where the application cannot see them (factories, native code) are traced
too. Named fields of other values are explored recursively.
"""

from __future__ import annotations

__all__ = ["propagate"]

from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

from trace_anything.shims.descriptors import MISSING, read_untraced
from trace_anything.shims.objects import trace_object
from trace_anything.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.engine import TraceEngine


def propagate(engine: TraceEngine, value: Any, config: TraceConfig, _seen: set[int] | None = None) -> Any:
    """Trace value if its type is registered, else explore its fields.

    Args:
        engine: Engine owning the shim registry.
        value: Returned value.
        config: Options of the pass that returned the value;
            config.explore_result_fields names the fields to explore.

    Returns:
        The traced value for registered types, otherwise value itself
        (with explored fields replaced where their traced value differs).
    """
    if value is None or engine.is_traced(value):
        return value

    registered = engine.registry.get(type(value))
    if registered is not None:
        return trace_object(engine, value, registered)

    if not config.explore_result_fields:
        return value

    seen = _seen if _seen is not None else set()
    if id(value) in seen:
        return value
    seen.add(id(value))

    for field in config.explore_result_fields:
        if isinstance(value, Mapping):
            current = value.get(field, MISSING)
        else:
            try:
                current = read_untraced(value, field)
            except AttributeError:
                current = MISSING
        if current is MISSING:
            continue

        explored = propagate(engine, current, config, seen)
        if explored is current:
            continue

        try:
            if isinstance(value, MutableMapping):
                value[field] = explored
            else:
                setattr(value, field, explored)
        except (AttributeError, TypeError) as e:
            get_system_logger().debug(
                {
                    "event": "result_field_not_writable",
                    "field": field,
                    "class_name": type(value).__name__,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "message": f"Could not replace {field} on {type(value).__name__} with its traced value",
                }
            )
    return value
