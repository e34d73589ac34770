"""Tests for CLI module."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from seqtest.cli import build_tree, log_results_summary, run
from seqtest.models.result import CaseResult, GroupResult
from seqtest.runner import HarnessError, RunFailedError, RunTimeoutError


def _successful_result() -> GroupResult:
    result = GroupResult(key="main")
    result.add(CaseResult(key="a", success=True, message="a", finished=True))
    result.start()
    result.finish()
    return result


def _failed_result() -> GroupResult:
    result = GroupResult(key="failure")
    result.add(CaseResult(key="e", failure=True, message="e", finished=True))
    return result


def test_log_results_summary(caplog: pytest.LogCaptureFixture) -> None:
    """Logs the rendered tree and the elapsed time."""
    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), _successful_result())

    assert "Test Results Summary:" in caplog.text
    assert "✓ main: " in caplog.text
    assert "\t✓ a: a," in caplog.text
    assert "Elapsed: " in caplog.text


def test_log_results_summary_without_timing(caplog: pytest.LogCaptureFixture) -> None:
    """Omits the elapsed time for results that never finished."""
    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), _failed_result())

    assert "✕ failure: " in caplog.text
    assert "Elapsed" not in caplog.text


def test_build_tree() -> None:
    """Maps each target to itself."""
    assert build_tree(["a:b", "suite"]) == {"a:b": "a:b", "suite": "suite"}


async def test_run_returns_zero_on_success() -> None:
    """Returns exit code 0 when all tests pass."""
    with patch(
        "seqtest.cli.run_tests", AsyncMock(return_value=_successful_result())
    ) as run_tests:
        exit_code = await run(["pkg.mod:tests"], timeout=3.0)

    assert exit_code == 0
    run_tests.assert_awaited_once()
    args, kwargs = run_tests.call_args
    assert args == ({"pkg.mod:tests": "pkg.mod:tests"}, 3.0)
    assert kwargs["config"].timeout is None


async def test_run_returns_one_on_failure() -> None:
    """Returns exit code 1 when a test fails."""
    with patch(
        "seqtest.cli.run_tests",
        AsyncMock(side_effect=RunFailedError(_failed_result())),
    ):
        exit_code = await run(["pkg.mod:tests"])

    assert exit_code == 1


@pytest.mark.parametrize(
    "error",
    [HarnessError("Empty test for a"), RunTimeoutError("Tests did not call back")],
)
async def test_run_returns_one_on_harness_error(
    error: Exception, caplog: pytest.LogCaptureFixture
) -> None:
    """Returns exit code 1 when tests could not complete."""
    with (
        patch("seqtest.cli.run_tests", AsyncMock(side_effect=error)),
        caplog.at_level(logging.ERROR),
    ):
        exit_code = await run(["pkg.mod:tests"])

    assert exit_code == 1
    assert "Tests could not complete" in caplog.text


async def test_run_without_targets() -> None:
    """Returns exit code 0 without running anything."""
    with patch("seqtest.cli.run_tests", AsyncMock()) as run_tests:
        exit_code = await run([])

    assert exit_code == 0
    run_tests.assert_not_called()


async def test_run_prints_json_report(capsys: pytest.CaptureFixture[str]) -> None:
    """Prints the report on stdout when requested."""
    with patch(
        "seqtest.cli.run_tests",
        AsyncMock(side_effect=RunFailedError(_failed_result())),
    ):
        await run(["pkg.mod:tests"], json_output=True)

    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "failure"
    assert output["failed"] == 1
    assert output["results"] == [{"path": "/e", "status": "failure", "message": "e"}]


async def test_run_passes_config() -> None:
    """Builds the harness config from JSON."""
    with patch(
        "seqtest.cli.run_tests", AsyncMock(return_value=_successful_result())
    ) as run_tests:
        await run(["pkg.mod:tests"], config_json='{"seconds_per_test": 2.5}')

    assert run_tests.call_args.kwargs["config"].seconds_per_test == 2.5
