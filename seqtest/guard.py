"""Redirect of uncaught event loop exceptions to the running test case."""

import asyncio
import logging
import traceback
from collections.abc import Callable
from typing import Any, TypeAlias

log = logging.getLogger(__name__)

ExceptionHandler: TypeAlias = Callable[[asyncio.AbstractEventLoop, dict[str, Any]], object]


class UncaughtGuard:
    """Event loop exception handler with a single active target.

    The loop reports exceptions raised in callbacks and orphaned tasks out of
    band from the test that caused them. While installed, the guard sends
    them to `target`, the completion handler of the most recently dispatched
    case. There is a single target, not a stack: the guard is not re-entrant
    across cases running at the same time.
    """

    def __init__(self) -> None:
        self.target: Callable[..., None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous: ExceptionHandler | None = None
        self._depth = 0

    @property
    def installed(self) -> bool:
        """Whether the guard is currently the loop exception handler."""
        return self._loop is not None

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Become the exception handler of `loop`, saving the previous one."""
        if self._loop is loop:
            self._depth += 1
            return
        self._previous = loop.get_exception_handler()
        loop.set_exception_handler(self._handle)
        self._loop = loop
        self._depth = 1

    def remove(self, loop: asyncio.AbstractEventLoop) -> None:
        """Restore the previous exception handler once every run is done."""
        if self._loop is not loop:
            return
        self._depth -= 1
        if self._depth > 0:
            return
        loop.set_exception_handler(self._previous)
        self._loop = None
        self._previous = None
        self.target = None

    def _handle(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exception = context.get("exception")
        if exception is not None:
            trace = "".join(traceback.format_exception(exception))
        else:
            trace = context.get("message", "unknown error")
        if self.target is None:
            log.error("Uncaught exception without a running test: %s", trace)
            return
        self.target(f"uncaught exception: {trace}")


uncaught_guard = UncaughtGuard()
