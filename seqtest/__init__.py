"""Sequential asynchronous test harness."""

from seqtest.assertions import check, equals, failure, not_equals, success, verify
from seqtest.config import HarnessConfig
from seqtest.models.result import CaseResult, GroupResult
from seqtest.models.tree import clone
from seqtest.runner import (
    HarnessError,
    RunFailedError,
    RunTimeoutError,
    run,
    run_all,
    run_tests,
)

__all__ = [
    "CaseResult",
    "GroupResult",
    "HarnessConfig",
    "HarnessError",
    "RunFailedError",
    "RunTimeoutError",
    "check",
    "clone",
    "equals",
    "failure",
    "not_equals",
    "run",
    "run_all",
    "run_tests",
    "success",
    "verify",
]
