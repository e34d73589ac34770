"""Models for test execution results."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

log = logging.getLogger(__name__)

ResultStatus: TypeAlias = Literal["success", "failure", "invalid", "unknown"]
ResultNode: TypeAlias = "CaseResult | GroupResult"

DUPLICATED_MESSAGE = "Duplicated call to callback"
SEPARATOR = ": "

MARKERS: dict[ResultStatus, str] = {
    "success": "✓ ",
    "failure": "✕ ",
    "invalid": "??? ",
    "unknown": "? ",
}
COLORS: dict[ResultStatus, str] = {
    "success": "\033[32m",
    "failure": "\033[1;31m",
    "invalid": "\033[1;35m",
    "unknown": "\033[1;35m",
}
RESET = "\033[0m"


def get_status(success: bool, failure: bool) -> ResultStatus:
    """Map the pair of outcome flags to a status."""
    if success and failure:
        return "invalid"
    if success:
        return "success"
    if failure:
        return "failure"
    return "unknown"


def get_printable(
    status: ResultStatus, message: str, indent: int = 0, *, color: bool = False
) -> str:
    """Return `message` prefixed with the status marker, indented with tabs."""
    line = MARKERS[status] + message
    if color:
        line = COLORS[status] + line + RESET
    return "\t" * indent + line


@dataclass(kw_only=True)
class CaseResult:
    """Outcome of a single test case.

    A case must report completion exactly once. A second completion after a
    success is recorded as a failure while the success flag is kept, so
    `success and failure` flags a misbehaving test.
    """

    key: str
    success: bool = False
    failure: bool = False
    message: Any = None
    finished: bool = False

    @property
    def status(self) -> ResultStatus:
        """Status derived from the outcome flags."""
        return get_status(self.success, self.failure)

    def complete(self, error: Any = None, value: Any = None) -> None:
        """Record the outcome reported by a node-style callback.

        Args:
            error: Failure reason; any truthy value marks the case as failed
            value: Result of a successful case; a value carrying a truthy
                `failure` attribute (such as a nested result) fails the case

        """
        if self.failure:
            # only the first failure is kept
            return
        if self.finished:
            self._record(failure=True, message=DUPLICATED_MESSAGE)
        elif error:
            self._record(success=False, failure=True, message=error)
        elif getattr(value, "failure", False):
            self._record(success=False, failure=True, message=value)
        else:
            self._record(success=True, message=value)

    def _record(
        self,
        *,
        message: Any,
        success: bool | None = None,
        failure: bool | None = None,
    ) -> None:
        if success is not None:
            self.success = success
        if failure is not None:
            self.failure = failure
        self.message = message
        self.finished = True
        log.info("%s", self.render())

    def render(self, indent: int = 0, *, color: bool = False) -> str:
        """Return a printable line for this result."""
        message = self.key
        if self.message:
            message += SEPARATOR + str(self.message)
        return get_printable(self.status, message, indent, color=color)

    def summary(self) -> str:
        """Return the marker and key only."""
        return get_printable(self.status, self.key)

    def __str__(self) -> str:
        return self.render()


@dataclass(kw_only=True)
class GroupResult:
    """Aggregate outcome of a group of results.

    Failure is sticky: once a failed child has been added the group never
    becomes successful again. A group without children is neither.
    """

    key: str
    success: bool = False
    failure: bool = False
    results: dict[str, ResultNode] = field(default_factory=dict)
    error: Any = None
    start_time: float | None = None
    elapsed_time: float | None = None

    @property
    def status(self) -> ResultStatus:
        """Status derived from the outcome flags."""
        return get_status(self.success, self.failure)

    def add(self, result: ResultNode) -> None:
        """Add a child result and update the aggregate flags."""
        self.results[result.key] = result
        if result.success and not self.failure:
            self.success = True
        if result.failure:
            self.success = False
            self.failure = True

    def fail(self, error: Any) -> None:
        """Record a structural error that stopped this group."""
        self.error = error
        self.success = False
        self.failure = True

    def start(self) -> None:
        """Take the start timestamp."""
        self.start_time = time.monotonic()

    def finish(self) -> None:
        """Compute the elapsed time since `start()`."""
        if self.start_time is None:
            raise RuntimeError("Missing start time")
        self.elapsed_time = time.monotonic() - self.start_time

    def render(self, indent: int = 0, *, color: bool = False) -> str:
        """Return a printable block with all children, one level deeper."""
        heading = self.key + SEPARATOR
        if self.error:
            heading += str(self.error)
        lines = [get_printable(self.status, heading, indent, color=color)]
        lines.append("\t" * indent + "{")
        for result in self.results.values():
            lines.append(result.render(indent + 1, color=color) + ",")
        lines.append("\t" * indent + "}")
        return "\n".join(lines)

    def summary(self) -> str:
        """Return the marker and key only, without children."""
        return get_printable(self.status, self.key)

    def __str__(self) -> str:
        return self.render()
