"""Tests for test tree cloning and parsing."""

import logging
from typing import Any

import pytest

from seqtest.models.tree import (
    EmptyEntry,
    InvalidEntry,
    TestCase,
    TestReference,
    TestSuite,
    clone,
    normalize_root,
    parse_node,
    parse_suite,
    takes_callback,
)


def _callback_test(callback: Any) -> None:
    callback(None, "done")


def _deferred_test() -> str:
    return "done"


class TestClone:
    """Tests for clone."""

    def test_keeps_functions_by_reference(self) -> None:
        """Functions are shared, mappings are recreated."""
        original: dict[str, Any] = {
            "a": _deferred_test,
            "b": {"c": _callback_test},
        }

        cloned = clone(original)

        assert cloned["a"] is _deferred_test
        assert cloned["b"]["c"] is _callback_test
        assert cloned is not original
        assert cloned["b"] is not original["b"]

    def test_lists_become_indexed(self) -> None:
        """Lists are copied as index-keyed dicts."""
        cloned = clone({"b": [_deferred_test, _callback_test]})

        assert cloned == {"b": {0: _deferred_test, 1: _callback_test}}

    def test_does_not_mutate_original(self) -> None:
        """Mutating the clone leaves the original untouched."""
        original: dict[str, Any] = {"b": {"c": _callback_test}}

        cloned = clone(original)
        del cloned["b"]["c"]

        assert original == {"b": {"c": _callback_test}}

    def test_invalid_root(self, caplog: pytest.LogCaptureFixture) -> None:
        """A non-mapping root is logged and yields an empty copy."""
        with caplog.at_level(logging.ERROR):
            cloned = clone(42)

        assert cloned == {}
        assert "Invalid series 42" in caplog.text


class TestNormalizeRoot:
    """Tests for normalize_root."""

    def test_mapping_is_unchanged(self) -> None:
        """Mappings are returned as is."""
        tree = {"a": _deferred_test}

        assert normalize_root(tree) is tree

    def test_bare_function(self) -> None:
        """A function becomes a single entry named after it."""
        assert normalize_root(_deferred_test) == {"_deferred_test": _deferred_test}

    def test_list(self) -> None:
        """A list becomes an index-keyed mapping."""
        assert normalize_root([_deferred_test]) == {0: _deferred_test}

    def test_reference(self) -> None:
        """A string becomes a single reference entry."""
        assert normalize_root("pkg.mod:tests") == {"pkg.mod:tests": "pkg.mod:tests"}


class TestParseNode:
    """Tests for parse_node."""

    def test_callback_function(self) -> None:
        """One-argument functions are callback style."""
        node = parse_node(_callback_test)

        assert node == TestCase(function=_callback_test, takes_callback=True)

    def test_deferred_function(self) -> None:
        """Zero-argument functions are deferred style."""
        node = parse_node(_deferred_test)

        assert node == TestCase(function=_deferred_test, takes_callback=False)

    @pytest.mark.parametrize("value", [None, False, 0, ""])
    def test_falsy_values_are_empty(self, value: Any) -> None:
        """Falsy scalars are empty slots."""
        assert parse_node(value) == EmptyEntry(value=value)

    def test_empty_mapping_is_empty_suite(self) -> None:
        """An empty mapping is a suite without entries, not an empty slot."""
        assert parse_node({}) == TestSuite(entries=())

    def test_string_is_reference(self) -> None:
        """Strings are references."""
        assert parse_node("pkg.mod:test") == TestReference(target="pkg.mod:test")

    def test_other_values_are_invalid(self) -> None:
        """Other values cannot run."""
        assert parse_node(42) == InvalidEntry(value=42)

    def test_nested_suite(self) -> None:
        """Mappings and lists are parsed recursively in order."""
        suite = parse_suite({"a": _deferred_test, "b": [_callback_test]})

        assert [key for key, _ in suite.entries] == ["a", "b"]
        nested = suite.entries[1][1]
        assert isinstance(nested, TestSuite)
        assert nested.entries[0][0] == 0


def test_takes_callback_ignores_defaults() -> None:
    """Arguments with defaults do not make a callback-style test."""

    def with_default(callback: Any = None) -> None:
        pass

    assert not takes_callback(with_default)
    assert takes_callback(lambda callback: None)
