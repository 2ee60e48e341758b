"""Event subsystem: Event records for listeners of traced values.

Events are intercepted at the listener, not at the source: every listener
the application hands to a traced value is wrapped in a ListenerWrapper,
which emits an Event record and then forwards the call. Three routes lead
there:

- listener properties (on<event> / on_<event>): assignments are wrapped
- dynamic discovery: the first registration of an event name through the
  listener registration method also registers a recording no-op listener
- forced events (extra_events): a recording no-op listener is registered
  up front
"""

from __future__ import annotations

__all__ = [
    "DiscoveryShim",
    "ListenerPropertyShim",
    "ListenerWrapper",
    "correlate_event",
    "event_name_for",
    "register_forced_events",
]

from typing import TYPE_CHECKING, Any

from trace_anything.constants import CHANGE_EVENT_SUFFIX, EVENT_PROPERTY_PREFIX, EVENTS_MARKER
from trace_anything.shims.descriptors import MISSING, read_untraced
from trace_anything.shims.methods import MethodShim
from trace_anything.shims.properties import PropertyShim
from trace_anything.telemetry.models import EventLog
from trace_anything.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.shims.context import ShimContext


def _noop(*args: Any, **kwargs: Any) -> None:
    return None


def event_name_for(member_name: str) -> str | None:
    """Event name of a listener property, or None if member_name is not one.

    Example:
        >>> event_name_for("on_message"), event_name_for("onvolumechange")
        ('message', 'volumechange')
    """
    if not member_name.startswith(EVENT_PROPERTY_PREFIX):
        return None
    event_name = member_name[len(EVENT_PROPERTY_PREFIX) :]
    if event_name.startswith("_"):
        event_name = event_name[1:]
    return event_name or None


def correlate_event(instance: Any, event_name: str, config: TraceConfig) -> str | tuple[str, ...] | None:
    """Member name(s) whose value is reported with event_name.

    config.event_properties wins. Otherwise the first member of instance
    whose name equals the event name case-insensitively, after removing a
    trailing "change" and trailing underscores ("volumechange" and
    "volume_change" both correlate with "volume").
    """
    mapped = config.event_properties.get(event_name)
    if mapped is not None:
        return mapped

    wanted = event_name.lower()
    if wanted.endswith(CHANGE_EVENT_SUFFIX):
        wanted = wanted[: -len(CHANGE_EVENT_SUFFIX)]
    wanted = wanted.rstrip("_")
    if not wanted:
        return None

    for name in dir(instance):
        if name.lower() == wanted:
            return name
    return None


class ListenerWrapper:
    """Callable replacing a listener; records the event, then forwards.

    Args:
        instance: Traced value the listener is attached to.
        listener: Original listener: a callable or an object with handle_event.
        event_name: Event the listener is registered for.
        ctx: Shim context of the tracing pass.
    """

    def __init__(self, instance: Any, listener: Any, event_name: str, ctx: ShimContext) -> None:
        self.instance = instance
        self.listener = listener
        self.event_name = event_name
        self.ctx = ctx
        self.correlated = correlate_event(instance, event_name, ctx.config)
        self.__wrapped__ = listener

    def __repr__(self) -> str:
        return f"<traced listener {self.ctx.class_name} {self.event_name} {self.listener!r}>"

    def _extract(self, name: str) -> Any:
        try:
            value = read_untraced(self.instance, name, None)
            return value() if callable(value) else value
        except Exception as e:
            get_system_logger().warning(
                {
                    "event": "event_value_extraction_failed",
                    "member": name,
                    "event_name": self.event_name,
                    "class_name": self.ctx.class_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "message": f"Could not read {name} for {self.event_name} event on {self.ctx.class_name}",
                }
            )
            return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        ctx = self.ctx
        payload = args[0] if len(args) == 1 else args

        draft = ctx.start(EventLog, self.instance, event_name=self.event_name, event=payload)
        if isinstance(self.correlated, (list, tuple)):
            draft.fields["value"] = {name: self._extract(name) for name in self.correlated}
        elif self.correlated:
            draft.fields["value"] = self._extract(self.correlated)
        ctx.emit(draft, timed=False)

        if callable(self.listener):
            return self.listener(*args, **kwargs)
        return self.listener.handle_event(*args, **kwargs)


class ListenerPropertyShim(PropertyShim):
    """Data descriptor for an on<event> member.

    Reads return the stored listener without a record; assignments store a
    ListenerWrapper around the assigned listener (a no-op when falsy), so the
    event keeps being recorded after the application clears its listener.
    """

    def __init__(self, name: str, event_name: str, raw: Any, ctx: ShimContext, *, target: Any = MISSING) -> None:
        super().__init__(name, raw, ctx, target=target)
        self.event_name = event_name

    def __repr__(self) -> str:
        return f"<traced listener property {self.ctx.class_name}.{self.name}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self._read(instance)

    def __set__(self, instance: Any, listener: Any) -> None:
        if not listener:
            listener = _noop
        self._write(instance, ListenerWrapper(instance, listener, self.event_name, self.ctx))


class DiscoveryShim(MethodShim):
    """Listener registration method that discovers event names.

    The first registration of an unseen, unskipped event name also registers
    a recording no-op listener through the untraced original. The caller's
    registration is then forwarded unchanged, as a traced call when methods
    are traced.
    """

    def __init__(self, name: str, original: Any, ctx: ShimContext, *, traced_calls: bool) -> None:
        super().__init__(name, original, ctx, bound=True)
        self.traced_calls = traced_calls

    def __repr__(self) -> str:
        return f"<traced listener registration {self.ctx.class_name}.{self.name}>"

    def __call__(self, instance: Any, *args: Any, **kwargs: Any) -> Any:
        ctx = self.ctx
        if args and isinstance(args[0], str):
            event_name = args[0]
            seen = ctx.engine.stamps.get(instance, EVENTS_MARKER)
            if seen is not None and event_name not in seen and event_name not in ctx.config.skip_events:
                seen.add(event_name)
                self.original(event_name, ListenerWrapper(instance, _noop, event_name, ctx))

        if self.traced_calls:
            return super().__call__(instance, *args, **kwargs)
        return self.original(*args, **kwargs)


def register_forced_events(ctx: ShimContext, traced: Any) -> None:
    """Listen for every config.extra_events name on traced.

    Each name is added to the observed-event set before its recording no-op
    listener is registered through the untraced registration method. Values
    without a registration method get a Warning record instead.
    """
    config = ctx.config
    if not config.extra_events:
        return

    register = None
    if config.listener_method:
        register = read_untraced(traced, config.listener_method, None)
        if not callable(register):
            register = None

    seen = ctx.engine.stamps.get(traced, EVENTS_MARKER)
    for event_name in config.extra_events:
        if register is None:
            ctx.warn(f"Unable to listen for {event_name} on {ctx.class_name}: no {config.listener_method} method!")
            continue
        if seen is not None:
            seen.add(event_name)
        register(event_name, ListenerWrapper(traced, _noop, event_name, ctx))
