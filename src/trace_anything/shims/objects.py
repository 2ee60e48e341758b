"""Object shim: instruments every member of one value.

Steps, in order:

1. Already-traced values are returned unchanged.
2. The target is chosen: the value itself (class swap) or a wrapper.
3. Candidate members are collected and all classified before any shim is
   installed, so getters run during classification see the original object.
4. Member shims are installed; listener properties are set aside.
5. The observed-event set is created, then listener properties, dynamic
   discovery and forced events are set up (when events are traced).
6. The traced marker is set and the identity assigned, last, so neither
   becomes a traced member.
"""

from __future__ import annotations

__all__ = [
    "shim_member",
    "trace_member",
    "trace_object",
    "trace_prototype",
]

from typing import TYPE_CHECKING, Any

from trace_anything.constants import EVENTS_MARKER, TRACED_MARKER
from trace_anything.shims.classify import MemberKind, candidate_members, classify_member
from trace_anything.shims.context import ShimContext
from trace_anything.shims.descriptors import (
    MISSING,
    instance_dict,
    is_data_descriptor,
    lookup_static,
    read_untraced,
)
from trace_anything.shims.events import (
    DiscoveryShim,
    ListenerPropertyShim,
    event_name_for,
    register_forced_events,
)
from trace_anything.shims.methods import MethodShim
from trace_anything.shims.properties import PropertyShim, SilentShim, observe_promise_property
from trace_anything.shims.targets import ShimTarget

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.engine import TraceEngine


def _unable_in_place(ctx: ShimContext, name: str) -> None:
    ctx.warn(f"Unable to trace {name} on {ctx.class_name} in-place!")


# ============================================================================
# Member shims
# ============================================================================


def shim_member(ctx: ShimContext, target: ShimTarget, name: str, kind: MemberKind) -> None:
    """Install the shim for one classified member.

    Args:
        ctx: Shim context of the tracing pass.
        target: Target receiving the shim.
        name: Member name.
        kind: Classification of the member (not EVENT_LISTENER_PROPERTY).
    """
    original = target.original

    if kind is MemberKind.METHOD:
        shim = MethodShim(name, getattr(original, name), ctx, bound=True)
        if not target.install_method(name, shim):
            _unable_in_place(ctx, name)

    elif kind is MemberKind.PROPERTY:
        raw = lookup_static(type(original), name)
        if target.in_place:
            shim = PropertyShim(name, raw, ctx)
        else:
            shim = PropertyShim(name, raw, ctx, target=original)
        if not target.install(name, shim):
            _unable_in_place(ctx, name)

    elif kind is MemberKind.PROMISE_PROPERTY:
        observe_promise_property(ctx, target.value, name, getattr(original, name))

    elif kind is MemberKind.SILENT and not target.in_place:
        target.install(name, SilentShim(name, original))


def _shim_listener_property(ctx: ShimContext, target: ShimTarget, name: str) -> None:
    event_name = event_name_for(name)
    if event_name is None or event_name in ctx.config.skip_events:
        return

    original = target.original
    current = read_untraced(original, name, None)
    raw = lookup_static(type(original), name)
    if target.in_place:
        shim = ListenerPropertyShim(name, event_name, raw, ctx)
    else:
        shim = ListenerPropertyShim(name, event_name, raw, ctx, target=original)

    if not target.install(name, shim):
        _unable_in_place(ctx, name)
        return

    # Wraps the listener already set (or a no-op) right away
    try:
        setattr(target.value, name, current)
    except (AttributeError, TypeError) as e:
        target.uninstall(name)
        ctx.warn(f"Unable to listen for {event_name} on {ctx.class_name}: {e}")
        return

    seen = ctx.engine.stamps.get(target.value, EVENTS_MARKER)
    seen.add(event_name)


def _shim_listener_method(ctx: ShimContext, target: ShimTarget) -> None:
    config = ctx.config
    if not config.listener_method:
        return

    register = read_untraced(target.value, config.listener_method, None)
    if not callable(register):
        return

    shim = DiscoveryShim(config.listener_method, register, ctx, traced_calls=config.methods)
    if not target.install_method(config.listener_method, shim):
        _unable_in_place(ctx, config.listener_method)


# ============================================================================
# Entry points
# ============================================================================


def trace_object(engine: TraceEngine, obj: Any, config: TraceConfig, *, base: type | None = None) -> Any:
    """Trace every member of obj.

    Args:
        engine: Engine owning registries and identities.
        obj: Value to trace.
        config: Resolved options.
        base: Class the per-instance class derives from in place
            (the replacement class when called from a class shim).

    Returns:
        The traced value: obj itself in place, else a wrapper.
    """
    if engine.is_traced(obj):
        return obj

    ctx = ShimContext(engine, config, type(obj).__name__)

    if config.in_place:
        target = ShimTarget.in_place_of(obj, base)
        if target.shim_class is None and instance_dict(obj) is None:
            ctx.warn(f"Unable to trace {ctx.class_name} in-place!")
            engine.stamps.set(obj, TRACED_MARKER, True)
            return obj
    else:
        target = ShimTarget.wrapper_of(obj)

    traced = target.value
    classified = [(name, classify_member(obj, name, config)) for name in candidate_members(obj, config)]

    listener_properties = []
    for name, kind in classified:
        if kind is MemberKind.EVENT_LISTENER_PROPERTY:
            listener_properties.append(name)
        else:
            shim_member(ctx, target, name, kind)

    engine.stamps.set(traced, EVENTS_MARKER, set())

    if config.events:
        for name in listener_properties:
            _shim_listener_property(ctx, target, name)
        _shim_listener_method(ctx, target)
        register_forced_events(ctx, traced)

    engine.stamps.set(traced, TRACED_MARKER, True)
    ctx.identity(traced)
    return traced


def trace_member(engine: TraceEngine, obj: Any, name: str, config: TraceConfig) -> Any:
    """Trace one member of one value.

    No event routing, no traced marker, no identity assignment.

    Returns:
        The traced member, read from the traced value (in place: obj;
        otherwise a wrapper carrying only this shim).
    """
    ctx = ShimContext(engine, config, type(obj).__name__)
    target = ShimTarget.in_place_of(obj) if config.in_place else ShimTarget.wrapper_of(obj)
    shim_member(ctx, target, name, classify_member(obj, name, config, events=False))
    return getattr(target.value, name)


def trace_prototype(engine: TraceEngine, cls: type, name: str, config: TraceConfig) -> Any:
    """Trace one member of a class, for all of its instances.

    The calling instance is the receiver of every record. In place the
    class attribute is replaced; otherwise the shim is only built and
    returned, for the caller to install.

    Returns:
        The shim (callable as shim(instance, *args) for methods), or the
        original attribute (None if absent) when the member is not traced.
    """
    if not isinstance(cls, type):
        raise TypeError(f"trace_prototype() expects a class, got {type(cls).__name__}")

    ctx = ShimContext(engine, config, cls.__name__)
    raw = lookup_static(cls, name)

    if raw is not MISSING and not is_data_descriptor(raw) and (
        callable(raw) or isinstance(raw, (staticmethod, classmethod))
    ):
        if not config.methods:
            return raw
        shim: Any = MethodShim(name, raw, ctx, bound=False)
    else:
        if not config.properties:
            return None if raw is MISSING else raw
        shim = PropertyShim(name, raw, ctx)

    if config.in_place:
        try:
            setattr(cls, name, shim)
        except TypeError:
            _unable_in_place(ctx, name)
            return None if raw is MISSING else raw
    return shim
