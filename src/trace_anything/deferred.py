"""Deferred values: awaitables and futures.

A traced method may return a value that settles later. The engine never
alters such a value; it chains a new deferred value of the same family that
settles with the same outcome, after observing it:

- asyncio futures and tasks -> a new asyncio future on the same loop
- concurrent.futures futures (and other objects whose type has a callable
  add_done_callback) -> a new concurrent.futures.Future
- any other awaitable (coroutines) -> a coroutine awaiting the original

Cancellation is mirrored in both directions for futures and produces no
callbacks.
"""

from __future__ import annotations

__all__ = [
    "can_observe",
    "chain_deferred",
    "is_deferred",
]

import asyncio
import concurrent.futures
import inspect
from collections.abc import Callable
from typing import Any


def can_observe(value: Any) -> bool:
    """Whether completion of value can be observed with add_done_callback.

    Checked on the type, so objects answering every attribute (mocks,
    forwarding proxies) do not qualify.
    """
    return callable(getattr(type(value), "add_done_callback", None))


def is_deferred(value: Any) -> bool:
    """Whether value settles later (awaitable or observable future)."""
    return inspect.isawaitable(value) or can_observe(value)


def chain_deferred(
    pending: Any,
    on_success: Callable[[Any], Any],
    on_failure: Callable[[BaseException], None] | None = None,
) -> Any:
    """Chain a new deferred value onto pending.

    Args:
        pending: Awaitable or future returned by the original operation.
        on_success: Maps the settled value; its return value becomes the
            chained value. If it raises, the chained value fails with that error.
        on_failure: Observes the error the original failed with. The chained
            value fails with the same error.

    Returns:
        New deferred value of the same family as pending.
    """
    if isinstance(pending, asyncio.Future):
        chained = pending.get_loop().create_future()
    elif can_observe(pending):
        chained = concurrent.futures.Future()
    else:
        return _chain_awaitable(pending, on_success, on_failure)

    def _transfer(source: Any) -> None:
        if chained.done():
            return
        if source.cancelled():
            chained.cancel()
            return

        error = source.exception()
        if error is not None:
            try:
                if on_failure is not None:
                    on_failure(error)
            finally:
                chained.set_exception(error)
            return

        try:
            value = on_success(source.result())
        except Exception as e:
            chained.set_exception(e)
            return
        chained.set_result(value)

    def _cancel_source(target: Any) -> None:
        if target.cancelled() and not pending.done():
            pending.cancel()

    pending.add_done_callback(_transfer)
    chained.add_done_callback(_cancel_source)
    return chained


async def _chain_awaitable(
    pending: Any,
    on_success: Callable[[Any], Any],
    on_failure: Callable[[BaseException], None] | None,
) -> Any:
    try:
        value = await pending
    except Exception as e:
        if on_failure is not None:
            on_failure(e)
        raise
    return on_success(value)
