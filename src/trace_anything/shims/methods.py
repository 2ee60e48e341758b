"""Method shim: one Method record per call.

Wraps a callable member. The call is forwarded unchanged; the outcome is
recorded and the exception, if any, re-raised as is:

    start = now
    try:
        result = original(*args, **kwargs)
    except Exception as e:
        record threw; raise
    record result; return result

Returned values pass through the return-value propagator, so instances of
traced classes created outside the application's sight come back traced.
Deferred results (awaitables, futures) are chained instead of returned
(see trace_anything.deferred).
"""

from __future__ import annotations

__all__ = ["MethodShim"]

import types
from typing import TYPE_CHECKING, Any

from trace_anything.deferred import chain_deferred, is_deferred
from trace_anything.shims.descriptors import MISSING, Shim
from trace_anything.telemetry.models import MethodLog

if TYPE_CHECKING:
    from trace_anything.shims.context import ShimContext
    from trace_anything.telemetry.recorder import LogDraft


def _bind(raw: Any, instance: Any) -> Any:
    binder = getattr(type(raw), "__get__", None)
    if binder is None:
        return raw
    return binder(raw, instance, type(instance))


class MethodShim(Shim):
    """Non-data descriptor tracing calls of one method.

    The receiver of a call is the instance the shim is accessed on; it is
    the record's instance and the source of its identity.

    Args:
        name: Method name.
        original: Original callable. Already bound for object shims; the raw
            class attribute for prototype shims (bound per call).
        ctx: Shim context of the tracing pass.
        bound: Whether original is already bound.
    """

    def __init__(self, name: str, original: Any, ctx: ShimContext, *, bound: bool) -> None:
        self.name = name
        self.original = original
        self.ctx = ctx
        self.bound = bound
        self.__wrapped__ = original
        self.__name__ = name
        self.__doc__ = getattr(original, "__doc__", None)

    def __repr__(self) -> str:
        return f"<traced method {self.ctx.class_name}.{self.name}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def peek(self, instance: Any, default: Any = MISSING) -> Any:
        if self.bound:
            return self.original
        return _bind(self.original, instance)

    def __call__(self, instance: Any, *args: Any, **kwargs: Any) -> Any:
        ctx = self.ctx
        draft = ctx.start(MethodLog, instance, method_name=self.name, args=args, kwargs=kwargs)
        target = self.peek(instance)

        try:
            result = target(*args, **kwargs)
        except Exception as e:
            draft.set_threw(e)
            ctx.emit(draft)
            raise

        if is_deferred(result):
            return self._defer(draft, result)

        result = ctx.propagate(result)
        draft.set_result(result)
        ctx.emit(draft)
        return result

    def _defer(self, draft: LogDraft, pending: Any) -> Any:
        ctx = self.ctx

        if ctx.config.log_async_results_immediately:
            # Record the raw deferred value now; settlement is not recorded
            draft.set_result(pending)
            ctx.emit(draft)
            return chain_deferred(pending, ctx.propagate)

        def _on_success(value: Any) -> Any:
            value = ctx.propagate(value)
            draft.set_result(value)
            ctx.emit(draft)
            return value

        def _on_failure(error: BaseException) -> None:
            draft.set_threw(error)
            ctx.emit(draft)

        return chain_deferred(pending, _on_success, _on_failure)
