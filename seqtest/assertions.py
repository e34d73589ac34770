"""Assertion helpers that report through a test's completion callback.

Every helper takes an optional node-style `callback(error, value)`. With a
callback the outcome is sent to it; without one it is only logged.
"""

import json
import logging
from collections.abc import Callable
from typing import Any, TypeAlias

log = logging.getLogger(__name__)

Callback: TypeAlias = Callable[..., object]

_errors = 0


def error_count() -> int:
    """Return the number of failures reported so far."""
    return _errors


def remove_error() -> None:
    """Forget one reported failure, after an intentional one."""
    global _errors
    _errors = max(_errors - 1, 0)


def success(message: Any = True, callback: Callback | None = None) -> object:
    """Report a success for the current test."""
    if callback is not None:
        return callback(None, message)
    if _errors:
        log.warning("With errors: %s", message)
    else:
        log.info("%s", message)
    return None


def failure(message: Any = "Failure", callback: Callback | None = None) -> object:
    """Report a failure for the current test."""
    global _errors
    _errors += 1
    if callback is not None:
        return callback(message or "Failure")
    log.error("%s", message)
    return None


def verify(
    condition: object,
    message: str = "Assertion error",
    callback: Callback | None = None,
) -> object:
    """Report a failure unless `condition` holds."""
    if condition:
        return None
    return failure(message, callback)


def equals(
    actual: Any,
    expected: Any,
    message: str = "Assertion error",
    callback: Callback | None = None,
) -> object:
    """Report a failure unless both values are equal."""
    if _are_equal(actual, expected):
        return None
    return failure(f"{message}: expected {expected!r} but got {actual!r}", callback)


def not_equals(
    actual: Any,
    unexpected: Any,
    message: str = "Assertion error",
    callback: Callback | None = None,
) -> object:
    """Report a failure if both values are equal."""
    if not _are_equal(actual, unexpected):
        return None
    return failure(f"{message}: expected {actual!r} to differ", callback)


def check(
    error: Any,
    message: str = "Check failed",
    callback: Callback | None = None,
) -> object:
    """Report a failure if `error` is set."""
    if not error:
        return None
    return failure(f"{message}: {error}", callback)


def _are_equal(first: Any, second: Any) -> bool:
    if first == second:
        return True
    # values with the same JSON form are equal (e.g. tuples and lists)
    try:
        return json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)
    except (TypeError, ValueError):
        return False
