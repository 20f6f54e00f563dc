"""
Unit tests for generated archive names.
"""

from ulid import ULID

from envarchive.ids import NameGenerator, generate_name


class TestNameGenerator:
    """Tests for NameGenerator."""

    def test_names_are_ulids(self):
        """Generated names parse as ULIDs."""
        name = generate_name()

        assert len(name) == 26
        assert str(ULID.from_str(name)) == name

    def test_strictly_increasing(self):
        """A burst of names sorts in generation order with no repeats."""
        gen = NameGenerator()
        names = [gen() for _ in range(2000)]

        assert names == sorted(names)
        assert len(set(names)) == len(names)

    def test_bumps_within_same_millisecond(self, monkeypatch):
        """A candidate not above the previous name is bumped by one."""
        gen = NameGenerator()
        fixed = ULID.from_int(10**30)
        monkeypatch.setattr("envarchive.ids.ULID", _FixedULID(fixed))

        first = gen()
        second = gen()

        assert first == str(fixed)
        assert second == str(ULID.from_int(10**30 + 1))


class _FixedULID:
    """Stand-in for the ULID class that always produces the same value."""

    def __init__(self, value):
        self._value = value

    def __call__(self):
        return self._value

    def from_int(self, value):
        return ULID.from_int(value)
