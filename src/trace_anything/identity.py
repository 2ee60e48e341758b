"""Markers and display identities of traced values.

Markers (traced flag, observed event names, generated identity) are kept
where the value can carry them:

1. on the per-instance shim class or wrapper class, when the value has one
   and is the instance the class was made for (copies share the class)
2. in the instance __dict__
3. in a side table owned by the engine, keyed by object identity

The side table holds a strong reference to each value it stamps, so ids
are never reused while a stamp exists.
"""

from __future__ import annotations

__all__ = [
    "IdentityRegistry",
    "StampStore",
]

from typing import TYPE_CHECKING, Any

from trace_anything.constants import GENERATED_ID_MARKER, SHIM_CLASS_MARKER, STAMP_OWNER_MARKER
from trace_anything.shims.descriptors import MISSING, instance_dict, read_untraced
from trace_anything.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig


class StampStore:
    """Reads and writes engine markers on arbitrary values."""

    def __init__(self) -> None:
        self._side_table: dict[int, tuple[Any, dict[str, Any]]] = {}

    def _namespace(self, value: Any, *, create: bool) -> Any:
        klass = type(value)
        if SHIM_CLASS_MARKER in klass.__dict__:
            owner = klass.__dict__.get(STAMP_OWNER_MARKER, MISSING)
            if owner is MISSING and create:
                setattr(klass, STAMP_OWNER_MARKER, value)
                owner = value
            if owner is value:
                return klass

        namespace = instance_dict(value)
        if namespace is not None:
            return namespace

        entry = self._side_table.get(id(value))
        if entry is None:
            if not create:
                return None
            entry = (value, {})
            self._side_table[id(value)] = entry
        return entry[1]

    def get(self, value: Any, key: str, default: Any = None) -> Any:
        namespace = self._namespace(value, create=False)
        if namespace is None:
            return default
        if isinstance(namespace, type):
            return namespace.__dict__.get(key, default)
        return namespace.get(key, default)

    def set(self, value: Any, key: str, stamp: Any) -> None:
        namespace = self._namespace(value, create=True)
        if isinstance(namespace, type):
            setattr(namespace, key, stamp)
        else:
            namespace[key] = stamp


class IdentityRegistry:
    """Assigns display identities to traced values.

    Generated identities are "<ClassName>_<n>"; counters are per class name,
    start at 1 and are never reset.
    """

    def __init__(self, stamps: StampStore) -> None:
        self._stamps = stamps
        self._counters: dict[str, int] = {}

    def get_identity(self, instance: Any, class_name: str, config: TraceConfig) -> Any:
        """Display identity of instance.

        Args:
            instance: Traced value.
            class_name: Class name used for generated identities.
            config: Options; config.id_property names the preferred member.

        Returns:
            Current value of the id member if present (read without
            producing a record), else the generated identity.
        """
        if config.id_property:
            try:
                return read_untraced(instance, config.id_property)
            except AttributeError:
                pass
            except Exception as e:
                get_system_logger().debug(
                    {
                        "event": "id_property_read_failed",
                        "id_property": config.id_property,
                        "class_name": class_name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "message": f"Reading {config.id_property} on {class_name} failed, using generated id",
                    }
                )

        generated = self._stamps.get(instance, GENERATED_ID_MARKER)
        if generated is None:
            counter = self._counters.get(class_name, 0) + 1
            self._counters[class_name] = counter
            generated = f"{class_name}_{counter}"
            self._stamps.set(instance, GENERATED_ID_MARKER, generated)
        return generated
