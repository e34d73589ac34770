"""Models for test trees: cloning, normalization and parsing into nodes."""

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

log = logging.getLogger(__name__)

Key: TypeAlias = str | int
TestNode: TypeAlias = "TestCase | TestSuite | TestReference | EmptyEntry | InvalidEntry"


@dataclass(frozen=True, kw_only=True)
class TestCase:
    """A test function.

    Callback-style functions take the completion handler as their only
    argument; deferred-style functions take no arguments and may return an
    awaitable.
    """

    __test__ = False

    function: Callable[..., Any]
    takes_callback: bool


@dataclass(frozen=True, kw_only=True)
class TestSuite:
    """An ordered group of named test nodes."""

    __test__ = False

    entries: Sequence[tuple[Key, TestNode]]


@dataclass(frozen=True, kw_only=True)
class TestReference:
    """A reference to a test function or tree, resolved when it runs."""

    __test__ = False

    target: str


@dataclass(frozen=True, kw_only=True)
class EmptyEntry:
    """An empty slot in a test tree."""

    value: Any = None


@dataclass(frozen=True, kw_only=True)
class InvalidEntry:
    """A value that cannot be run as a test."""

    value: Any


def takes_callback(function: Callable[..., Any]) -> bool:
    """Check if a function expects a completion callback argument."""
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return False
    return any(
        parameter.kind
        in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is parameter.empty
        for parameter in signature.parameters.values()
    )


def parse_node(value: Any) -> TestNode:
    """Classify a single value of a test tree."""
    if callable(value):
        return TestCase(function=value, takes_callback=takes_callback(value))
    if isinstance(value, Mapping | list | tuple):
        return parse_suite(value)
    if not value:
        return EmptyEntry(value=value)
    if isinstance(value, str):
        return TestReference(target=value)
    return InvalidEntry(value=value)


def parse_suite(series: Mapping[Key, Any] | Sequence[Any]) -> TestSuite:
    """Parse a mapping (or list) of test values into a suite."""
    items = series.items() if isinstance(series, Mapping) else enumerate(series)
    return TestSuite(entries=tuple((key, parse_node(value)) for key, value in items))


def normalize_root(tree: Any) -> Any:
    """Turn a bare function, list or reference into a mapping of tests."""
    if isinstance(tree, Mapping):
        return tree
    if isinstance(tree, list | tuple):
        return dict(enumerate(tree))
    if callable(tree):
        return {getattr(tree, "__name__", "test"): tree}
    if isinstance(tree, str) and tree:
        return {tree: tree}
    return tree


def clone(series: Any) -> dict[Key, Any]:
    """Copy a test tree so that running it never touches the original.

    Functions and strings are kept by reference, mappings and lists are
    recreated (lists as index-keyed dicts).
    """
    if isinstance(series, list | tuple):
        series = dict(enumerate(series))
    if not isinstance(series, Mapping):
        log.error("Invalid series %r", series)
        return {}
    copy: dict[Key, Any] = {}
    for key, value in series.items():
        if isinstance(value, Mapping | list | tuple):
            copy[key] = clone(value)
        else:
            copy[key] = value
    return copy
