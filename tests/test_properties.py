"""Unit tests for property tracing.

Tests Getter and Setter records for accessors and plain values, and Event
records for future-valued members.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import asyncio
import concurrent.futures

import pytest

from trace_anything.config import TraceConfig, resolve_config
from trace_anything.engine import TraceEngine
from trace_anything.telemetry.models import LogType, TraceLog


class Thermostat:
    def __init__(self) -> None:
        self._target = 20
        self.label = "hall"

    @property
    def target(self) -> int:
        return self._target

    @target.setter
    def target(self, value: int) -> None:
        if value < 0:
            raise ValueError("negative target")
        self._target = value

    @property
    def reading(self) -> int:
        return 21

    @property
    def sensor(self) -> int:
        raise RuntimeError("sensor offline")


class Loader:
    def __init__(self, ready: object) -> None:
        self.ready = ready


class TestAccessors:
    """Tests for data descriptor members."""

    def test_getter_logged(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a property read, one Getter record with the value is emitted."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        value = thermostat.target

        # Assert
        assert value == 20
        [record] = records
        assert record.type == LogType.GETTER
        assert record.member_name == "target"
        assert record.result == 20
        assert record.duration >= 0

    def test_setter_logged(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a property write, one Setter record with the value is emitted and the setter runs."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        thermostat.target = 25

        # Assert
        [record] = records
        assert record.type == LogType.SETTER
        assert record.member_name == "target"
        assert record.value == 25
        assert "threw" not in record.model_fields_set
        assert thermostat._target == 25

    def test_setter_exception_propagated(
        self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]
    ) -> None:
        """Given a setter that raises, the exception reaches the caller and is recorded."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        with pytest.raises(ValueError) as exc_info:
            thermostat.target = -1

        # Assert
        [record] = records
        assert record.threw is exc_info.value
        assert thermostat._target == 20

    def test_getter_exception_propagated(
        self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]
    ) -> None:
        """Given a getter that raises, the exception reaches the caller and is recorded."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        with pytest.raises(RuntimeError) as exc_info:
            thermostat.sensor

        # Assert
        [record] = records
        assert record.type == LogType.GETTER
        assert record.threw is exc_info.value
        assert "result" not in record.model_fields_set

    def test_read_only_property(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a write to a property without setter, AttributeError is raised and nothing is recorded."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act & Assert
        with pytest.raises(AttributeError):
            thermostat.reading = 5
        assert records == []

    def test_private_members_untraced(
        self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]
    ) -> None:
        """Given a private member, reads and writes emit nothing."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        thermostat._target = 30

        # Assert
        assert records == []


class TestPlainValues:
    """Tests for plain value members."""

    def test_read_not_logged(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a plain value read, nothing is recorded."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        label = thermostat.label

        # Assert
        assert label == "hall"
        assert records == []

    def test_write_logged_untimed(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a plain value write, one Setter record with duration 0 is emitted and the value stored."""
        # Arrange
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        thermostat.label = "kitchen"

        # Assert
        [record] = records
        assert record.type == LogType.SETTER
        assert record.value == "kitchen"
        assert record.duration == 0.0
        assert thermostat.label == "kitchen"
        assert vars(thermostat)["label"] == "kitchen"

    def test_extra_property_not_yet_existing(self, engine: TraceEngine, records: list[TraceLog]) -> None:
        """Given an extra property that does not exist yet, its first write is recorded."""
        # Arrange
        config = resolve_config(logger=records.append, extra_properties=["mode"])
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        with pytest.raises(AttributeError):
            thermostat.mode
        thermostat.mode = "eco"

        # Assert
        [record] = records
        assert record.member_name == "mode"
        assert thermostat.mode == "eco"

    def test_properties_disabled(self, engine: TraceEngine, records: list[TraceLog]) -> None:
        """Given properties disabled, reads and writes emit nothing."""
        # Arrange
        config = resolve_config(logger=records.append, properties=False)
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        thermostat.target = 22
        thermostat.label = "attic"

        # Assert
        assert thermostat.target == 22
        assert records == []

    def test_skipped_property(self, engine: TraceEngine, records: list[TraceLog]) -> None:
        """Given a skipped property, reads and writes emit nothing."""
        # Arrange
        config = resolve_config(logger=records.append, skip_properties={"target"})
        thermostat = engine.trace_object(Thermostat(), config)

        # Act
        thermostat.target = 22

        # Assert
        assert thermostat.target == 22
        assert records == []


class TestPromiseProperties:
    """Tests for future-valued members."""

    @pytest.mark.anyio
    async def test_resolution_logged_as_event(
        self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]
    ) -> None:
        """Given a future member that resolves, an Event record '<name> Promise resolved' is emitted."""
        # Arrange
        future = asyncio.get_running_loop().create_future()
        loader = engine.trace_object(Loader(future), config)

        # Act
        future.set_result("done")
        await asyncio.sleep(0)

        # Assert
        [record] = records
        assert record.type == LogType.EVENT
        assert record.event_name == "ready Promise resolved"
        assert record.event == {"result": "done"}
        assert record.instance is loader
        assert loader.ready is future

    def test_rejection_logged_as_event(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a future member that fails, an Event record '<name> Promise rejected' is emitted."""
        # Arrange
        future: concurrent.futures.Future[str] = concurrent.futures.Future()
        engine.trace_object(Loader(future), config)
        error = OSError("disk")

        # Act
        future.set_exception(error)

        # Assert
        [record] = records
        assert record.event_name == "ready Promise rejected"
        assert record.event == {"threw": error}

    def test_cancellation_not_logged(self, engine: TraceEngine, config: TraceConfig, records: list[TraceLog]) -> None:
        """Given a future member that is cancelled, nothing is recorded."""
        # Arrange
        future: concurrent.futures.Future[str] = concurrent.futures.Future()
        engine.trace_object(Loader(future), config)

        # Act
        future.cancel()

        # Assert
        assert records == []

    def test_promise_events_disabled(self, engine: TraceEngine, records: list[TraceLog]) -> None:
        """Given promise events disabled, settlement is not recorded."""
        # Arrange
        config = resolve_config(logger=records.append, treat_promise_properties_as_events=False)
        future: concurrent.futures.Future[str] = concurrent.futures.Future()
        engine.trace_object(Loader(future), config)

        # Act
        future.set_result("done")

        # Assert
        assert records == []
