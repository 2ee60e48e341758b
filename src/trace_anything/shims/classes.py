"""Class shim: every instance of a class is traced as it is constructed."""

from __future__ import annotations

__all__ = ["trace_class"]

import types
from typing import TYPE_CHECKING, Any

from trace_anything.shims.context import ShimContext
from trace_anything.shims.objects import trace_object
from trace_anything.telemetry.models import ConstructorLog
from trace_anything.telemetry.recorder import LogDraft

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.engine import TraceEngine


def trace_class(engine: TraceEngine, cls: type, config: TraceConfig) -> type:
    """Register cls for tracing and build its replacement class.

    The replacement is a subclass of cls with the same metaclass, name,
    qualname, module and docstring, no extra slots, and __wrapped__ set to
    cls. Constructing it constructs cls, traces the instance (in place or as
    a wrapper) and emits one Constructor record. Subclasses of the
    replacement construct normally.

    Instances of cls created elsewhere are traced when a traced method
    returns them (see shims.propagate).

    Args:
        engine: Engine owning the shim registry.
        cls: Class to trace.
        config: Resolved options, also used for instances met later.

    Returns:
        The replacement class.

    Raises:
        TypeError: If cls is not a class.
    """
    if not isinstance(cls, type):
        raise TypeError(f"trace_class() expects a class, got {type(cls).__name__}")

    engine.registry[cls] = config
    ctx = ShimContext(engine, config, cls.__name__)

    def __new__(klass: type, *args: Any, **kwargs: Any) -> Any:
        if klass is not replacement:
            parent_new = super(replacement, klass).__new__
            if parent_new is object.__new__:
                return parent_new(klass)
            return parent_new(klass, *args, **kwargs)

        draft = LogDraft(ConstructorLog, class_name=cls.__name__, args=args, kwargs=kwargs)
        try:
            instance = cls(*args, **kwargs)
        except Exception as e:
            draft.set_threw(e)
            engine.emit(config, draft.build())
            raise

        traced = trace_object(engine, instance, config, base=replacement)
        draft.fields["instance"] = traced
        draft.fields["instance_id"] = ctx.identity(traced)
        draft.set_result(traced)
        engine.emit(config, draft.build())
        return traced

    def __init__(self: Any, *args: Any, **kwargs: Any) -> None:
        # Instances built by __new__ above are already initialized
        if engine.is_traced(self):
            return
        if _inherited_init(type(self)) is object.__init__:
            return
        super(replacement, self).__init__(*args, **kwargs)

    def _inherited_init(klass: type) -> Any:
        mro = klass.__mro__
        for base in mro[mro.index(replacement) + 1 :]:
            if "__init__" in base.__dict__:
                return base.__dict__["__init__"]
        return object.__init__

    def _fill(namespace: dict[str, Any]) -> None:
        namespace.update(
            {
                "__slots__": (),
                "__module__": cls.__module__,
                "__qualname__": cls.__qualname__,
                "__doc__": cls.__doc__,
                "__wrapped__": cls,
                "__new__": __new__,
                "__init__": __init__,
            }
        )

    replacement = types.new_class(cls.__name__, (cls,), {}, _fill)
    return replacement
