"""Descriptor plumbing shared by all member shims.

Every shim the engine installs derives from Shim, which can report the
member's current value without producing a record (peek). The engine uses
this for its own reads: identities, correlated event values, and captured
listeners are never logged as Getter records.

Lookups here are static (type and instance dictionaries) so that objects
with __getattr__ hooks (mocks, proxies, wrappers) are never asked for
members they do not define.
"""

from __future__ import annotations

__all__ = [
    "MISSING",
    "Shim",
    "find_shim",
    "has_setter",
    "instance_dict",
    "is_data_descriptor",
    "is_writable",
    "lookup_static",
    "read_untraced",
]

import types
from typing import Any


class _Missing:
    """Sentinel for absent members."""

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Shim:
    """Base class of every descriptor or callable installed by the engine.

    Attributes:
        name: Member name the shim is installed under.
    """

    name: str

    def peek(self, instance: Any, default: Any = MISSING) -> Any:
        """Current value of the member on instance, without producing a record.

        Raises:
            AttributeError: If the member is absent and no default was given.
        """
        raise NotImplementedError


def instance_dict(value: Any) -> dict[str, Any] | None:
    """The instance __dict__ of value, if it has a writable one."""
    try:
        namespace = object.__getattribute__(value, "__dict__")
    except (AttributeError, TypeError):
        return None
    return namespace if isinstance(namespace, dict) else None


def lookup_static(klass: type, name: str) -> Any:
    """Find name in the class dictionaries along klass.__mro__.

    Returns:
        The raw class attribute (descriptors are not invoked), or MISSING.
    """
    for base in klass.__mro__:
        namespace = base.__dict__
        if name in namespace:
            return namespace[name]
    return MISSING


def is_data_descriptor(attr: Any) -> bool:
    """Whether attr takes precedence over instance dictionaries."""
    attr_type = type(attr)
    return hasattr(attr_type, "__set__") or hasattr(attr_type, "__delete__")


def has_setter(raw: Any) -> bool:
    """Whether the data descriptor raw accepts assignments."""
    if isinstance(raw, property):
        return raw.fset is not None
    return hasattr(type(raw), "__set__")


def is_writable(obj: Any, name: str) -> bool:
    """Whether assigning name on obj can succeed, judged without assigning.

    Data descriptors decide through their setter; anything else needs an
    instance __dict__ to hold the new value.
    """
    raw = lookup_static(type(obj), name)
    if raw is not MISSING and is_data_descriptor(raw):
        return has_setter(raw)
    return instance_dict(obj) is not None


def find_shim(instance: Any, name: str) -> Shim | None:
    """The engine shim serving name on instance, if any."""
    namespace = instance_dict(instance)
    if namespace is not None:
        stored = namespace.get(name)
        # Callables in the instance dict are shimmed as bound methods
        if isinstance(stored, types.MethodType) and isinstance(stored.__func__, Shim):
            return stored.__func__

    attr = lookup_static(type(instance), name)
    if isinstance(attr, Shim):
        return attr
    return None


def read_untraced(instance: Any, name: str, default: Any = MISSING) -> Any:
    """Read a member the way the application would, minus the records.

    Args:
        instance: Traced or untraced value.
        name: Member name.
        default: Returned when the member is absent.

    Returns:
        The member's current value.

    Raises:
        AttributeError: If the member is absent and no default was given.
    """
    shim = find_shim(instance, name)
    if shim is not None:
        return shim.peek(instance, default)

    try:
        return getattr(instance, name)
    except AttributeError:
        if default is MISSING:
            raise
        return default
