"""Sequential scheduler for test trees."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Collection
from typing import Any, TypeAlias

from seqtest.guard import UncaughtGuard
from seqtest.models.result import CaseResult, GroupResult
from seqtest.models.tree import (
    EmptyEntry,
    InvalidEntry,
    Key,
    TestCase,
    TestNode,
    TestReference,
    TestSuite,
    parse_node,
)
from seqtest.references import resolve_reference

log = logging.getLogger(__name__)

Continuation: TypeAlias = Callable[[Any, GroupResult | None], None]
CompletionHandler: TypeAlias = Callable[..., None]


def get_display_name(
    key: Key, function: Callable[..., Any], taken: Collection[str] = ()
) -> str:
    """Prefer the function name for tests listed by index.

    Falls back to the index when the name is in `taken`, so that tests sharing
    a name do not replace each other's results.
    """
    name = getattr(function, "__name__", None)
    if isinstance(key, int) and name and name != "<lambda>" and name not in taken:
        return str(name)
    return str(key)


class Scheduler:
    """Runs the entries of one suite one at a time, in order.

    Nested suites get their own scheduler and are finished completely before
    the parent moves on. Every step after the first is scheduled on the event
    loop, so long suites do not grow the stack.
    """

    def __init__(
        self,
        name: str,
        suite: TestSuite,
        *,
        loop: asyncio.AbstractEventLoop,
        guard: UncaughtGuard,
    ) -> None:
        self.name = name
        self.suite = suite
        self.loop = loop
        self.guard = guard
        self.result = GroupResult(key=name)
        self.finished = False
        self._completed = [False] * len(suite.entries)
        self._callback: Continuation | None = None

    def run(self, callback: Continuation) -> None:
        """Run all entries and call `callback(error, result)` exactly once."""
        self._callback = callback
        self.result.start()
        self._run_next()

    def _run_next(self) -> None:
        index = next(
            (i for i, completed in enumerate(self._completed) if not completed),
            None,
        )
        if index is None:
            self._complete(None)
            return
        key, node = self.suite.entries[index]
        self._dispatch(index, key, node)

    def _dispatch(self, index: int, key: Key, node: TestNode) -> None:
        if isinstance(node, EmptyEntry):
            self._complete(f"Empty test for {key}")
        elif isinstance(node, TestSuite):
            self._run_suite(index, key, node)
        elif isinstance(node, TestCase):
            self._run_case(index, key, node)
        elif isinstance(node, TestReference):
            self._run_reference(index, key, node)
        else:
            log.error("Key %s has an invalid value %r", key, node.value)
            self._advance(index)

    def _run_suite(self, index: int, key: Key, suite: TestSuite) -> None:
        child = Scheduler(str(key), suite, loop=self.loop, guard=self.guard)

        def on_finished(error: Any, result: GroupResult | None) -> None:
            if error:
                log.error("Could not run all tests in %s: %s", child.name, error)
                child.result.fail(error)
            self.result.add(child.result)
            self._advance(index)

        child.run(on_finished)

    def _run_reference(self, index: int, key: Key, reference: TestReference) -> None:
        try:
            target = resolve_reference(reference.target)
        except Exception as error:
            log.error("Cannot resolve test %s: %s", reference.target, error)
            case_result = CaseResult(key=str(key))
            case_result.complete(error)
            self.result.add(case_result)
            self._advance(index)
            return

        node = parse_node(target)
        if isinstance(node, TestReference):
            # a reference resolving to another string is not followed
            node = InvalidEntry(value=node.target)
        self._dispatch(index, key, node)

    def _run_case(self, index: int, key: Key, case: TestCase) -> None:
        taken = {str(other) for other, _ in self.suite.entries}
        taken.update(self.result.results)
        case_result = CaseResult(key=get_display_name(key, case.function, taken))

        def complete(error: Any = None, value: Any = None) -> None:
            case_result.complete(error, value)
            self.result.add(case_result)
            self._advance(index)

        self.guard.target = complete
        try:
            if case.takes_callback:
                outcome = case.function(complete)
            else:
                outcome = case.function()
        except Exception as error:
            complete(error)
            return

        if inspect.isawaitable(outcome):
            self._bridge(outcome, complete, report_value=not case.takes_callback)
        elif not case.takes_callback:
            complete(None, outcome)

    def _bridge(
        self,
        awaitable: Awaitable[Any],
        complete: CompletionHandler,
        *,
        report_value: bool,
    ) -> None:
        """Complete the case once the awaitable resolves or fails."""
        future = asyncio.ensure_future(awaitable, loop=self.loop)

        def on_done(done: asyncio.Future[Any]) -> None:
            if done.cancelled():
                complete("Test was cancelled")
            elif (error := done.exception()) is not None:
                complete(error)
            elif report_value:
                complete(None, done.result())

        future.add_done_callback(on_done)

    def _advance(self, index: int) -> None:
        if self._completed[index]:
            # already run
            return
        self._completed[index] = True
        self.loop.call_soon(self._run_next)

    def _complete(self, error: Any) -> None:
        if self.finished:
            return
        self.finished = True
        self.result.finish()
        if error:
            log.error("Error in test %s: %s", self.name, error)
        else:
            log.info("Finished test %s: %s", self.name, self.result.summary())
        if self._callback is not None:
            self._callback(error, None if error else self.result)
