"""CLI entry point for running a suite class."""

import argparse
import logging
import sys

from suite_runner.errors import HarnessError, SuiteTeardownError
from suite_runner.loading import SuiteNotFoundError, load_suite
from suite_runner.models.result import SuiteReport, Verdict
from suite_runner.suite import SuiteExecutor

VERDICT_SYMBOLS = {
    Verdict.OK: "✓",
    Verdict.FAILED: "✗",
    Verdict.IGNORED: "-",
}

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def log_results_summary(log: logging.Logger, report: SuiteReport) -> None:
    """Log one line per test result."""
    log.info("=" * 80)
    log.info("Test Results Summary: %s", report.suite)
    log.info("=" * 80)

    for result in report:
        symbol = VERDICT_SYMBOLS.get(result.verdict, "?")
        log.info(
            "%s %s: %s (%dms)",
            symbol,
            result.name,
            result.verdict,
            result.elapsed_millis,
        )
        if result.message:
            log.info("  Message: %s", result.message)

    log.info(
        "Total: %d, passed: %d, failed: %d, ignored: %d",
        len(report),
        report.passed,
        report.failed,
        report.ignored,
    )


def run(target: str) -> int:
    """Run the suite named by target and return exit code."""
    log = logging.getLogger("suite_runner")

    try:
        suite = load_suite(target)
        report = SuiteExecutor.for_type(suite).run_all()
    except SuiteTeardownError as exc:
        log.error("%s", exc)
        log_results_summary(log, exc.report)
        return EXIT_FAILED
    except (HarnessError, SuiteNotFoundError) as exc:
        log.error("Suite run aborted: %s", exc)
        return EXIT_FATAL

    log_results_summary(log, report)
    return EXIT_FAILED if report.has_failures else EXIT_OK


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run the tests of a suite class")
    parser.add_argument(
        "target",
        help="Suite as 'package.module:ClassName' or a registered suite key",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    sys.exit(run(args.target))


if __name__ == "__main__":  # pragma: no cover
    main()
