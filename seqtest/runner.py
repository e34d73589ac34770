"""Entry points to run test trees."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeAlias

from seqtest.config import HarnessConfig
from seqtest.guard import uncaught_guard
from seqtest.models.result import GroupResult
from seqtest.models.tree import clone, normalize_root, parse_suite
from seqtest.scheduler import Scheduler

log = logging.getLogger(__name__)

ROOT_NAME = "main"
FAILURE_NAME = "failure"
TIMEOUT_MESSAGE = "Tests did not call back"

RunCallback: TypeAlias = Callable[[Any, GroupResult | None], object]


class HarnessError(Exception):
    """Raised when the harness could not run a test tree."""


class RunFailedError(Exception):
    """Raised when at least one test has failed."""

    def __init__(self, result: GroupResult) -> None:
        super().__init__(result.summary())
        self.result = result


class RunTimeoutError(HarnessError, TimeoutError):
    """Raised when tests did not call back in time."""


def run_all(
    tree: Any,
    callback: RunCallback,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> None:
    """Run a test tree sequentially on the event loop.

    Args:
        tree: Mapping of test functions and nested trees; a list, a bare
            function or a reference string is accepted as well
        callback: Called once as `callback(error, result)`. When any test
            failed, the root result is relabelled "failure" and passed as
            the error instead
        loop: Event loop to run on (default: the running loop)

    """
    loop = loop or asyncio.get_running_loop()
    suite = parse_suite(clone(normalize_root(tree)))
    uncaught_guard.install(loop)
    scheduler = Scheduler(ROOT_NAME, suite, loop=loop, guard=uncaught_guard)

    def on_finished(error: Any, result: GroupResult | None) -> None:
        uncaught_guard.remove(loop)
        if result is not None and result.failure:
            result.key = FAILURE_NAME
            callback(result, None)
            return
        callback(error, result)

    scheduler.run(on_finished)


def run(
    tree: Any,
    callback: RunCallback,
    timeout: float | None = None,
    *,
    config: HarnessConfig | None = None,
) -> None:
    """Run a test tree with an advisory timeout.

    When the timeout expires the callback receives a `RunTimeoutError`; the
    stalled test is not stopped, and its completion is discarded if it ever
    arrives.

    Args:
        tree: Test tree, as accepted by `run_all`
        callback: Called once as `callback(error, result)`
        timeout: Seconds to wait (default: from the configuration)
        config: Harness configuration

    """
    config = config or HarnessConfig()
    if timeout is None:
        timeout = config.get_timeout(count_tests(tree))

    loop = asyncio.get_running_loop()
    delivered = False

    def deliver(error: Any, result: GroupResult | None) -> None:
        nonlocal delivered
        if delivered:
            log.warning("Discarding late completion of tests")
            return
        delivered = True
        timer.cancel()
        callback(error, result)

    def expire() -> None:
        log.error("%s within %s seconds", TIMEOUT_MESSAGE, timeout)
        # stray exceptions must not resume the abandoned tests
        uncaught_guard.target = None
        deliver(RunTimeoutError(TIMEOUT_MESSAGE), None)

    timer = loop.call_later(timeout, expire)
    run_all(tree, deliver, loop=loop)


async def run_tests(
    tree: Any,
    timeout: float | None = None,
    *,
    config: HarnessConfig | None = None,
) -> GroupResult:
    """Run a test tree and wait for its result.

    Returns:
        The root result when no test failed

    Raises:
        RunFailedError: If any test failed; carries the root result
        RunTimeoutError: If tests did not call back in time
        HarnessError: If the tree could not be run

    """
    future: asyncio.Future[GroupResult] = asyncio.get_running_loop().create_future()

    def on_finished(error: Any, result: GroupResult | None) -> None:
        if future.done():
            return
        if isinstance(error, GroupResult):
            future.set_exception(RunFailedError(error))
        elif isinstance(error, BaseException):
            future.set_exception(error)
        elif error or result is None:
            future.set_exception(HarnessError(str(error)))
        else:
            future.set_result(result)

    run(tree, on_finished, timeout, config=config)
    return await future


def count_tests(tree: Any) -> int:
    """Return the number of top-level entries of a test tree."""
    root = normalize_root(tree)
    try:
        return len(root)
    except TypeError:
        return 0
