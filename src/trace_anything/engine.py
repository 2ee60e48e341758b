"""The trace engine and the process default engine.

TraceEngine owns all state that outlives a single tracing call:

- the shim registry (class -> options), written by trace_class and read
  when values are returned from traced methods
- identity counters and markers (see identity.py)
- element tag names and observed element sources (see elements.py)

The module-level functions operate on the process default engine returned
by get_engine(). Tests and embedders that need isolation create their own
TraceEngine.

Example usage:
    from trace_anything import trace_class, trace_object

    Player = trace_class(Player)            # every new Player is traced
    session = trace_object(session, in_place=False, skip_properties={"raw"})
"""

from __future__ import annotations

__all__ = [
    "TraceEngine",
    "get_engine",
    "scan_for_new_elements",
    "trace_class",
    "trace_element",
    "trace_member",
    "trace_object",
    "trace_prototype",
]

import threading
from collections.abc import Mapping
from typing import Any

from trace_anything import elements as _elements
from trace_anything.config import TraceConfig, resolve_config
from trace_anything.constants import TRACED_MARKER
from trace_anything.identity import IdentityRegistry, StampStore
from trace_anything.shims import classes as _classes
from trace_anything.shims import objects as _objects
from trace_anything.shims import propagate as _propagate
from trace_anything.telemetry.models import TraceLog

ConfigArg = TraceConfig | Mapping[str, Any] | None


class TraceEngine:
    """Owner of the shim registry, identities and element registrations.

    Attributes:
        registry: Traced class -> options used for its instances.
        stamps: Marker storage for traced values.
        identities: Display identity assignment.
        elements: Element tag names and observed sources.
    """

    def __init__(self) -> None:
        self.registry: dict[type, TraceConfig] = {}
        self.stamps = StampStore()
        self.identities = IdentityRegistry(self.stamps)
        self.elements = _elements.ElementRegistry()
        self._sink_state = threading.local()

    # ------------------------------------------------------------------
    # Shared by all shims
    # ------------------------------------------------------------------

    def is_traced(self, value: Any) -> bool:
        return bool(self.stamps.get(value, TRACED_MARKER, False))

    def emit(self, config: TraceConfig, record: TraceLog) -> None:
        """Hand one record to the configured sink.

        Occurrences caused by the sink itself (a repr reading a traced
        property, for instance) are not recorded.
        """
        if getattr(self._sink_state, "active", False):
            return
        self._sink_state.active = True
        try:
            config.logger(record)
        finally:
            self._sink_state.active = False

    def propagate(self, value: Any, config: TraceConfig) -> Any:
        return _propagate.propagate(self, value, config)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def trace_class(self, cls: type, config: ConfigArg = None, /, **overrides: Any) -> type:
        """Trace every instance of cls. Returns the replacement class."""
        return _classes.trace_class(self, cls, resolve_config(config, **overrides))

    def trace_object(self, obj: Any, config: ConfigArg = None, /, **overrides: Any) -> Any:
        """Trace every member of obj. Returns the traced value."""
        return _objects.trace_object(self, obj, resolve_config(config, **overrides))

    def trace_member(self, obj: Any, name: str, config: ConfigArg = None, /, **overrides: Any) -> Any:
        """Trace one member of obj. Returns the traced member."""
        return _objects.trace_member(self, obj, name, resolve_config(config, **overrides))

    def trace_prototype(self, cls: type, name: str, config: ConfigArg = None, /, **overrides: Any) -> Any:
        """Trace one member of cls for all instances. Returns the shim."""
        return _objects.trace_prototype(self, cls, name, resolve_config(config, **overrides))

    def trace_element(
        self,
        source: _elements.ElementSource,
        tag_name: str,
        config: ConfigArg = None,
        /,
        **overrides: Any,
    ) -> None:
        """Trace existing and future elements of source with tag_name."""
        _elements.trace_element(self, source, tag_name, resolve_config(config, **overrides))

    def scan_for_new_elements(self, source: _elements.ElementSource) -> None:
        """Trace current elements of source for every remembered tag name."""
        _elements.scan_for_new_elements(self, source)


# Module-level default engine - created on first use
_engine: TraceEngine | None = None


def get_engine() -> TraceEngine:
    """Get the process default engine, creating it on first call."""
    global _engine

    if _engine is None:
        _engine = TraceEngine()
    return _engine


def trace_class(cls: type, config: ConfigArg = None, /, **overrides: Any) -> type:
    return get_engine().trace_class(cls, config, **overrides)


def trace_object(obj: Any, config: ConfigArg = None, /, **overrides: Any) -> Any:
    return get_engine().trace_object(obj, config, **overrides)


def trace_member(obj: Any, name: str, config: ConfigArg = None, /, **overrides: Any) -> Any:
    return get_engine().trace_member(obj, name, config, **overrides)


def trace_prototype(cls: type, name: str, config: ConfigArg = None, /, **overrides: Any) -> Any:
    return get_engine().trace_prototype(cls, name, config, **overrides)


def trace_element(
    source: _elements.ElementSource,
    tag_name: str,
    config: ConfigArg = None,
    /,
    **overrides: Any,
) -> None:
    get_engine().trace_element(source, tag_name, config, **overrides)


def scan_for_new_elements(source: _elements.ElementSource) -> None:
    get_engine().scan_for_new_elements(source)
