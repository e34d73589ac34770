"""CLI entry point for the sequential test harness."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from seqtest.config import HarnessConfig
from seqtest.models.report import RunReport
from seqtest.models.result import GroupResult
from seqtest.runner import HarnessError, RunFailedError, run_tests


def log_results_summary(
    log: logging.Logger, result: GroupResult, *, color: bool = False
) -> None:
    """Log the rendered result tree with the elapsed time."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for line in result.render(color=color).splitlines():
        log.info("%s", line)

    if result.elapsed_time is not None:
        log.info("Elapsed: %.2fs", result.elapsed_time)


def build_tree(targets: Sequence[str]) -> dict[str, str]:
    """Map every target to itself, so each one runs as a test reference."""
    return {target: target for target in targets}


async def run(
    targets: Sequence[str],
    config_json: str = "",
    timeout: float | None = None,
    json_output: bool = False,
) -> int:
    """Run the referenced tests and return exit code."""
    log = logging.getLogger("seqtest")

    config = HarnessConfig(**json.loads(config_json)) if config_json else HarnessConfig()

    if not targets:
        log.info("No tests to run")
        return 0

    log.info("Running %d test target(s)...", len(targets))

    try:
        result = await run_tests(build_tree(targets), timeout, config=config)
    except RunFailedError as error:
        result = error.result
    except HarnessError as error:
        log.error("Tests could not complete: %s", error)
        return 1

    log_results_summary(log, result, color=config.color)

    if json_output:
        print(RunReport.from_result(result).model_dump_json(indent=2))

    return 1 if result.failure else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run test trees one test at a time")
    parser.add_argument(
        "targets",
        nargs="*",
        help="Tests as 'package.module:attribute' or registered suite names",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall timeout in seconds (default: one second per target)",
    )
    parser.add_argument(
        "--config",
        default="",
        help="JSON configuration for the harness",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON report on stdout",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            targets=args.targets,
            config_json=args.config,
            timeout=args.timeout,
            json_output=args.json,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
