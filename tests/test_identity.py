"""Unit tests for markers and display identities.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from trace_anything.config import resolve_config
from trace_anything.identity import IdentityRegistry, StampStore


class Point:
    __slots__ = ("x",)

    def __init__(self, x: int) -> None:
        self.x = x


class Plain:
    pass


class TestStampStore:
    """Tests for marker storage."""

    def test_missing_stamp_returns_default(self) -> None:
        """Given a value never stamped, returns the default."""
        # Arrange
        stamps = StampStore()

        # Act & Assert
        assert stamps.get(Plain(), "marker") is None
        assert stamps.get(Plain(), "marker", "fallback") == "fallback"

    def test_stamp_in_instance_dict(self) -> None:
        """Given a value with an instance __dict__, the stamp is stored there."""
        # Arrange
        stamps = StampStore()
        value = Plain()

        # Act
        stamps.set(value, "_marker", True)

        # Assert
        assert vars(value) == {"_marker": True}
        assert stamps.get(value, "_marker") is True

    def test_stamp_on_slotted_value(self) -> None:
        """Given a value without __dict__, the stamp is kept in the side table."""
        # Arrange
        stamps = StampStore()
        value = Point(1)

        # Act
        stamps.set(value, "_marker", "stamped")

        # Assert
        assert stamps.get(value, "_marker") == "stamped"
        assert stamps.get(Point(1), "_marker") is None

    def test_stamp_on_builtin(self) -> None:
        """Given an immutable builtin, the stamp is kept in the side table."""
        # Arrange
        stamps = StampStore()
        value = (1, 2)

        # Act
        stamps.set(value, "_marker", 3)

        # Assert
        assert stamps.get(value, "_marker") == 3


class TestIdentityRegistry:
    """Tests for display identity assignment."""

    def test_generated_identities_count_per_class(self) -> None:
        """Given instances of two classes, counters are per class name and start at 1."""
        # Arrange
        identities = IdentityRegistry(StampStore())
        config = resolve_config()
        first, second, other = Plain(), Plain(), Point(0)

        # Act
        ids = [
            identities.get_identity(first, "Plain", config),
            identities.get_identity(second, "Plain", config),
            identities.get_identity(other, "Point", config),
        ]

        # Assert
        assert ids == ["Plain_1", "Plain_2", "Point_1"]

    def test_generated_identity_is_stable(self) -> None:
        """Given the same value twice, the same identity is returned."""
        # Arrange
        identities = IdentityRegistry(StampStore())
        config = resolve_config()
        value = Plain()

        # Act
        first = identities.get_identity(value, "Plain", config)
        second = identities.get_identity(value, "Plain", config)

        # Assert
        assert first == second == "Plain_1"

    def test_id_property_preferred(self) -> None:
        """Given a value with an id member, its current value is the identity."""
        # Arrange
        identities = IdentityRegistry(StampStore())
        config = resolve_config()
        value = Plain()
        value.id = "track-7"

        # Act & Assert
        assert identities.get_identity(value, "Plain", config) == "track-7"
        value.id = "track-8"
        assert identities.get_identity(value, "Plain", config) == "track-8"

    def test_custom_id_property(self) -> None:
        """Given id_property naming another member, that member is used."""
        # Arrange
        identities = IdentityRegistry(StampStore())
        config = resolve_config(id_property="key")
        value = Plain()
        value.id = "ignored"
        value.key = "k1"

        # Act & Assert
        assert identities.get_identity(value, "Plain", config) == "k1"

    def test_id_property_disabled(self) -> None:
        """Given id_property None, identities are always generated."""
        # Arrange
        identities = IdentityRegistry(StampStore())
        config = resolve_config(id_property=None)
        value = Plain()
        value.id = "ignored"

        # Act & Assert
        assert identities.get_identity(value, "Plain", config) == "Plain_1"

    def test_failing_id_property_falls_back(self) -> None:
        """Given an id getter that raises, a generated identity is used."""

        # Arrange
        class Faulty:
            @property
            def id(self) -> str:
                raise RuntimeError("not ready")

        identities = IdentityRegistry(StampStore())
        config = resolve_config()

        # Act & Assert
        assert identities.get_identity(Faulty(), "Faulty", config) == "Faulty_1"
