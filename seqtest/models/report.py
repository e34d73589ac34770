"""Flattened, serialisable report of a result tree."""

from collections.abc import Iterator, Sequence

from pydantic import Field

from seqtest.models.base import Model
from seqtest.models.result import CaseResult, GroupResult, ResultNode, ResultStatus

PATH_SEPARATOR = "/"


class CaseReport(Model):
    """Outcome of one test case, addressed by its path in the tree."""

    path: str = Field(..., description="Keys from the root, joined by '/'")
    status: ResultStatus = Field(..., description="Outcome of the test")
    message: str | None = Field(default=None, description="Reported message")


class RunReport(Model):
    """Summary of a whole run."""

    status: ResultStatus
    elapsed_time: float | None = Field(
        default=None, description="Seconds taken by the run"
    )
    total: int = 0
    passed: int = 0
    failed: int = 0
    invalid: int = 0
    unknown: int = 0
    results: Sequence[CaseReport] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: GroupResult) -> "RunReport":
        """Build a report from the root result of a run.

        Groups stopped by a structural error are listed as failed entries
        of their own, next to the cases they ran.
        """
        cases = list(_walk(result, ""))
        statuses = [case.status for case in cases]
        return cls(
            status=result.status,
            elapsed_time=result.elapsed_time,
            total=len(cases),
            passed=statuses.count("success"),
            failed=statuses.count("failure"),
            invalid=statuses.count("invalid"),
            unknown=statuses.count("unknown"),
            results=cases,
        )


def _walk(node: ResultNode, prefix: str) -> Iterator[CaseReport]:
    if isinstance(node, CaseResult):
        yield CaseReport(
            path=prefix + node.key,
            status=node.status,
            message=None if node.message is None else str(node.message),
        )
        return
    path = prefix + node.key + PATH_SEPARATOR if prefix else PATH_SEPARATOR
    if node.error:
        yield CaseReport(path=path, status="failure", message=str(node.error))
    for child in node.results.values():
        yield from _walk(child, path)
