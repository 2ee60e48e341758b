"""Property shims: Getter/Setter records for non-callable members.

Two kinds of members are told apart by the original class attribute:

- Accessors (data descriptors: property, __slots__ members, custom
  descriptors). Reads and writes go through the original descriptor and
  are both recorded, with durations.
- Plain values (instance __dict__ entries, plain class attributes,
  non-data descriptors such as functools.cached_property, members that do
  not exist yet). Reads cannot have side effects and are not recorded;
  writes are recorded (duration 0) before the value is stored.

Deletion is forwarded without a record.

Future-valued members are not shimmed; their settlement is reported as an
Event record by observe_promise_property().
"""

from __future__ import annotations

__all__ = [
    "PropertyShim",
    "SilentShim",
    "observe_promise_property",
]

from typing import TYPE_CHECKING, Any

from trace_anything.shims.descriptors import (
    MISSING,
    Shim,
    has_setter,
    instance_dict,
    is_data_descriptor,
)
from trace_anything.telemetry.models import EventLog, GetterLog, SetterLog

if TYPE_CHECKING:
    from trace_anything.shims.context import ShimContext


class PropertyShim(Shim):
    """Data descriptor tracing one non-callable member.

    Args:
        name: Member name.
        raw: Original class attribute (MISSING if none).
        ctx: Shim context of the tracing pass.
        target: Original object for wrappers; reads and writes are then
            delegated to it with getattr/setattr. MISSING when the shim is
            installed on the object's own class.
    """

    def __init__(self, name: str, raw: Any, ctx: ShimContext, *, target: Any = MISSING) -> None:
        self.name = name
        self.raw = raw
        self.ctx = ctx
        self.target = target
        self.accessor = raw is not MISSING and is_data_descriptor(raw)

    def __repr__(self) -> str:
        kind = "accessor" if self.accessor else "value"
        return f"<traced {kind} {self.ctx.class_name}.{self.name}>"

    # ------------------------------------------------------------------
    # Untraced access
    # ------------------------------------------------------------------

    def _missing(self) -> AttributeError:
        return AttributeError(f"'{self.ctx.class_name}' object has no attribute '{self.name}'")

    def _read_only(self) -> AttributeError:
        return AttributeError(f"'{self.ctx.class_name}' object attribute '{self.name}' is read-only")

    def _read(self, instance: Any) -> Any:
        if self.target is not MISSING:
            return getattr(self.target, self.name)
        if self.accessor:
            return self.raw.__get__(instance, type(instance))

        namespace = instance_dict(instance)
        if namespace is not None and self.name in namespace:
            return namespace[self.name]
        if self.raw is MISSING:
            raise self._missing()
        if hasattr(type(self.raw), "__get__"):
            return self.raw.__get__(instance, type(instance))
        return self.raw

    def _write(self, instance: Any, value: Any) -> None:
        if self.target is not MISSING:
            setattr(self.target, self.name, value)
        elif self.accessor:
            self.raw.__set__(instance, value)
        else:
            namespace = instance_dict(instance)
            if namespace is None:
                raise self._read_only()
            namespace[self.name] = value

    def peek(self, instance: Any, default: Any = MISSING) -> Any:
        try:
            return self._read(instance)
        except AttributeError:
            if default is MISSING:
                raise
            return default

    # ------------------------------------------------------------------
    # Descriptor protocol
    # ------------------------------------------------------------------

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        if not self.accessor:
            return self._read(instance)

        ctx = self.ctx
        draft = ctx.start(GetterLog, instance, member_name=self.name)
        try:
            value = self._read(instance)
        except Exception as e:
            draft.set_threw(e)
            ctx.emit(draft)
            raise
        draft.set_result(value)
        ctx.emit(draft)
        return value

    def __set__(self, instance: Any, value: Any) -> None:
        ctx = self.ctx

        if not self.accessor:
            if self.target is MISSING and instance_dict(instance) is None:
                raise self._read_only()
            ctx.emit(ctx.start(SetterLog, instance, member_name=self.name, value=value), timed=False)
            self._write(instance, value)
            return

        if not has_setter(self.raw):
            raise AttributeError(f"property '{self.name}' of '{ctx.class_name}' object has no setter")

        draft = ctx.start(SetterLog, instance, member_name=self.name, value=value)
        try:
            self._write(instance, value)
        except Exception as e:
            draft.set_threw(e)
            ctx.emit(draft)
            raise
        ctx.emit(draft)

    def __delete__(self, instance: Any) -> None:
        if self.target is not MISSING:
            delattr(self.target, self.name)
        elif self.accessor:
            if not hasattr(type(self.raw), "__delete__"):
                raise AttributeError(f"property '{self.name}' of '{self.ctx.class_name}' object has no deleter")
            self.raw.__delete__(instance)
        else:
            namespace = instance_dict(instance)
            if namespace is None or self.name not in namespace:
                raise self._missing()
            del namespace[self.name]


class SilentShim(Shim):
    """Data descriptor forwarding one member of a wrapper to the original.

    Used for members a wrapper must expose but options exclude from tracing.
    """

    def __init__(self, name: str, target: Any) -> None:
        self.name = name
        self.target = target

    def __repr__(self) -> str:
        return f"<forwarded member {self.name}>"

    def peek(self, instance: Any, default: Any = MISSING) -> Any:
        if default is MISSING:
            return getattr(self.target, self.name)
        return getattr(self.target, self.name, default)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return getattr(self.target, self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        setattr(self.target, self.name, value)

    def __delete__(self, instance: Any) -> None:
        delattr(self.target, self.name)


def observe_promise_property(ctx: ShimContext, traced: Any, name: str, future: Any) -> None:
    """Report settlement of a future-valued member as an Event record.

    Emits "<name> Promise resolved" with event {"result": value} or
    "<name> Promise rejected" with event {"threw": error}. Cancellation
    emits nothing. The future itself is not altered.

    Args:
        ctx: Shim context of the tracing pass.
        traced: Traced value owning the member.
        name: Member name.
        future: Current value of the member (has add_done_callback).
    """

    def _settled(done: Any) -> None:
        if done.cancelled():
            return

        error = done.exception()
        if error is None:
            event_name = f"{name} Promise resolved"
            event: dict[str, Any] = {"result": done.result()}
        else:
            event_name = f"{name} Promise rejected"
            event = {"threw": error}
        ctx.emit(ctx.start(EventLog, traced, event_name=event_name, event=event), timed=False)

    future.add_done_callback(_settled)
