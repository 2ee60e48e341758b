"""Unit tests for trace log records, drafts and their serialization.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import pytest
from pydantic import ValidationError

from trace_anything.telemetry.models import EventLog, LogType, MethodLog, SetterLog, WarningLog
from trace_anything.telemetry.recorder import LogDraft
from trace_anything.utils.logging.logging_helpers import (
    extract_error_metadata,
    safe_repr,
    sanitize_for_logging,
    serialize_trace_log,
    to_json_safe,
)


class TestRecords:
    """Tests for record models."""

    def test_type_defaults_per_model(self) -> None:
        """Given each record model, its type is fixed."""
        # Act
        method = MethodLog(timestamp=1.0, method_name="play")
        warning = WarningLog(timestamp=1.0, message="nope")

        # Assert
        assert method.type == LogType.METHOD
        assert warning.type == LogType.WARNING
        assert LogType.METHOD == "Method"

    def test_unset_fields_not_in_fields_set(self) -> None:
        """Given a record built without result, 'result' is unset rather than None."""
        # Act
        record = MethodLog(timestamp=1.0, method_name="play", threw=ValueError("x"))

        # Assert
        assert "threw" in record.model_fields_set
        assert "result" not in record.model_fields_set

    def test_records_are_frozen(self) -> None:
        """Given a record, assignment is rejected."""
        # Arrange
        record = SetterLog(timestamp=1.0, member_name="volume", value=0.5)

        # Act & Assert
        with pytest.raises(ValidationError):
            record.value = 1.0

    def test_instance_kept_by_reference(self) -> None:
        """Given an instance, the record holds the same object."""
        # Arrange
        instance = object()

        # Act
        record = EventLog(timestamp=1.0, event_name="ended", instance=instance)

        # Assert
        assert record.instance is instance


class TestLogDraft:
    """Tests for record drafts."""

    def test_result_and_threw_exclusive(self) -> None:
        """Given set_result after set_threw, only result is kept."""
        # Arrange
        draft = LogDraft(MethodLog, method_name="play")
        draft.set_threw(ValueError("first"))

        # Act
        draft.set_result(3)
        record = draft.build()

        # Assert
        assert record.result == 3
        assert "threw" not in record.model_fields_set

    def test_timed_build_measures_duration(self) -> None:
        """Given a timed build, duration is non-negative and timestamp is when the draft opened."""
        # Arrange
        draft = LogDraft(MethodLog, method_name="play")

        # Act
        record = draft.build()

        # Assert
        assert record.duration >= 0
        assert record.timestamp == draft.timestamp

    def test_untimed_build_has_zero_duration(self) -> None:
        """Given an untimed build, duration is 0."""
        # Arrange
        draft = LogDraft(EventLog, event_name="ended")

        # Act
        record = draft.build(timed=False)

        # Assert
        assert record.duration == 0.0


class TestSerializeTraceLog:
    """Tests for JSON-safe record serialization."""

    def test_only_set_fields_included(self) -> None:
        """Given a record, only type and the set fields are serialized."""
        # Arrange
        record = MethodLog(timestamp=1.0, method_name="play", args=(1, "a"), result=True)

        # Act
        data = serialize_trace_log(record)

        # Assert
        assert data == {
            "type": "Method",
            "timestamp": 1.0,
            "method_name": "play",
            "args": [1, "a"],
            "result": True,
        }

    def test_threw_serialized_as_error_metadata(self) -> None:
        """Given a record with threw, the exception becomes error metadata."""
        # Arrange
        record = MethodLog(timestamp=1.0, method_name="play", threw=KeyError("gone"))

        # Act
        data = serialize_trace_log(record)

        # Assert
        assert data["threw"] == {"error": "'gone'", "error_type": "KeyError"}

    def test_objects_serialized_as_repr(self) -> None:
        """Given an arbitrary object, it is serialized as its repr."""

        # Arrange
        class Track:
            def __repr__(self) -> str:
                return "<Track intro>"

        # Act & Assert
        assert to_json_safe(Track()) == "<Track intro>"
        assert to_json_safe({"tracks": [Track()]}) == {"tracks": ["<Track intro>"]}

    def test_deep_nesting_truncated_to_repr(self) -> None:
        """Given deeply nested containers, the deepest levels become reprs."""
        # Arrange
        nested = [[[[["deep"]]]]]

        # Act
        data = to_json_safe(nested)

        # Assert
        assert data == [[[["['deep']"]]]]


class TestSanitization:
    """Tests for repr sanitization."""

    def test_newlines_escaped(self) -> None:
        """Given a string with control characters, they are escaped."""
        # Act & Assert
        assert sanitize_for_logging("a\nb\tc") == "a\\nb\\tc"

    def test_long_repr_truncated(self) -> None:
        """Given a long value, its repr is truncated."""
        # Act
        text = safe_repr("x" * 50, max_length=10)

        # Assert
        assert text == "'xxxxxxxxx..."

    def test_failing_repr_does_not_raise(self) -> None:
        """Given an object whose repr raises, returns a placeholder."""

        # Arrange
        class Broken:
            def __repr__(self) -> str:
                raise RuntimeError("no")

        # Act & Assert
        assert safe_repr(Broken()) == "<Broken object (repr failed: RuntimeError)>"

    def test_error_metadata_includes_traceback_when_raised(self) -> None:
        """Given a raised exception, metadata includes its traceback."""
        # Arrange
        try:
            raise ValueError("bad")
        except ValueError as e:
            error = e

        # Act
        metadata = extract_error_metadata(error)

        # Assert
        assert metadata["error_type"] == "ValueError"
        assert "ValueError: bad" in metadata["error_traceback"]
