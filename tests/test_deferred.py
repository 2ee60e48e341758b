"""Unit tests for deferred value chaining.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import asyncio
import concurrent.futures
from typing import Any

import pytest

from trace_anything.deferred import can_observe, chain_deferred, is_deferred


class AnswersEverything:
    """Object that pretends to have every attribute."""

    def __getattr__(self, name: str) -> Any:
        return lambda *args, **kwargs: None


async def _answer() -> int:
    return 42


class TestDetection:
    """Tests for deferred value detection."""

    def test_future_is_observable(self) -> None:
        """Given a concurrent future, it can be observed and is deferred."""
        # Arrange
        future: concurrent.futures.Future[int] = concurrent.futures.Future()

        # Act & Assert
        assert can_observe(future)
        assert is_deferred(future)

    def test_coroutine_is_deferred(self) -> None:
        """Given a coroutine, it is deferred but not observable."""
        # Arrange
        coro = _answer()

        # Act & Assert
        try:
            assert is_deferred(coro)
            assert not can_observe(coro)
        finally:
            coro.close()

    def test_forwarding_proxy_not_observable(self) -> None:
        """Given an object answering every attribute, it is not treated as a future."""
        # Act & Assert
        assert not can_observe(AnswersEverything())
        assert not is_deferred(AnswersEverything())

    def test_plain_values_not_deferred(self) -> None:
        """Given plain values, none is deferred."""
        # Act & Assert
        assert not is_deferred(3)
        assert not is_deferred("text")
        assert not is_deferred(None)


class TestChainConcurrentFuture:
    """Tests for chaining concurrent.futures futures."""

    def test_success_mapped(self) -> None:
        """Given a future that resolves, the chained future resolves with the mapped value."""
        # Arrange
        pending: concurrent.futures.Future[int] = concurrent.futures.Future()
        chained = chain_deferred(pending, lambda value: value * 2)

        # Act
        pending.set_result(21)

        # Assert
        assert isinstance(chained, concurrent.futures.Future)
        assert chained is not pending
        assert chained.result(timeout=1) == 42

    def test_failure_observed_and_forwarded(self) -> None:
        """Given a future that fails, on_failure sees the error and the chained future fails with it."""
        # Arrange
        pending: concurrent.futures.Future[int] = concurrent.futures.Future()
        seen: list[BaseException] = []
        chained = chain_deferred(pending, lambda value: value, seen.append)
        error = ValueError("bad")

        # Act
        pending.set_exception(error)

        # Assert
        assert seen == [error]
        assert chained.exception(timeout=1) is error

    def test_mapping_error_fails_chained(self) -> None:
        """Given on_success that raises, the chained future fails with that error."""

        # Arrange
        def _explode(value: Any) -> Any:
            raise RuntimeError("mapping failed")

        pending: concurrent.futures.Future[int] = concurrent.futures.Future()
        chained = chain_deferred(pending, _explode)

        # Act
        pending.set_result(1)

        # Assert
        assert isinstance(chained.exception(timeout=1), RuntimeError)

    def test_cancelling_chained_cancels_source(self) -> None:
        """Given the chained future is cancelled, the source future is cancelled too."""
        # Arrange
        pending: concurrent.futures.Future[int] = concurrent.futures.Future()
        seen: list[Any] = []
        chained = chain_deferred(pending, seen.append, seen.append)

        # Act
        chained.cancel()

        # Assert
        assert pending.cancelled()
        assert seen == []

    def test_cancelled_source_cancels_chained(self) -> None:
        """Given the source future is cancelled, the chained future is cancelled without callbacks."""
        # Arrange
        pending: concurrent.futures.Future[int] = concurrent.futures.Future()
        seen: list[Any] = []
        chained = chain_deferred(pending, seen.append, seen.append)

        # Act
        pending.cancel()

        # Assert
        assert chained.cancelled()
        assert seen == []


class TestChainAsync:
    """Tests for chaining asyncio futures and coroutines."""

    @pytest.mark.anyio
    async def test_asyncio_future_chained_on_same_loop(self) -> None:
        """Given an asyncio future, the chained value is an asyncio future of the same loop."""
        # Arrange
        loop = asyncio.get_running_loop()
        pending = loop.create_future()
        chained = chain_deferred(pending, lambda value: value + 1)

        # Act
        pending.set_result(1)
        result = await chained

        # Assert
        assert isinstance(chained, asyncio.Future)
        assert chained.get_loop() is loop
        assert result == 2

    @pytest.mark.anyio
    async def test_cancelling_chained_asyncio_future(self) -> None:
        """Given the chained asyncio future is cancelled, the source is cancelled."""
        # Arrange
        pending = asyncio.get_running_loop().create_future()
        chained = chain_deferred(pending, lambda value: value)

        # Act
        chained.cancel()
        await asyncio.sleep(0)

        # Assert
        assert pending.cancelled()

    @pytest.mark.anyio
    async def test_coroutine_chained(self) -> None:
        """Given a coroutine, the chained coroutine returns the mapped value."""
        # Act
        result = await chain_deferred(_answer(), lambda value: value + 1)

        # Assert
        assert result == 43

    @pytest.mark.anyio
    async def test_failing_coroutine(self) -> None:
        """Given a coroutine that raises, on_failure sees the error and it propagates."""

        # Arrange
        async def _fail() -> None:
            raise KeyError("missing")

        seen: list[BaseException] = []

        # Act
        with pytest.raises(KeyError) as exc_info:
            await chain_deferred(_fail(), lambda value: value, seen.append)

        # Assert
        assert seen == [exc_info.value]
