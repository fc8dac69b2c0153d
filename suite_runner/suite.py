"""Suite executor coordinating one full run of a suite class."""

import logging
from dataclasses import dataclass

from suite_runner.catalog import MethodCatalog
from suite_runner.errors import (
    SuiteInstantiationError,
    SuiteSetupError,
    SuiteTeardownError,
)
from suite_runner.executor import TestCaseExecutor, attempt
from suite_runner.models.result import SuiteReport, TestResult

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SuiteExecutor[T]:
    """Runs every test of a suite class against one shared instance."""

    target: type[T]
    catalog: MethodCatalog[T]

    @classmethod
    def for_type(cls, target: type[T]) -> "SuiteExecutor[T]":
        """Create an executor, cataloging the target's marked methods once."""
        return cls(target=target, catalog=MethodCatalog.scan(target))

    @property
    def name(self) -> str:
        return self.target.__qualname__

    def run_all(self) -> SuiteReport:
        """Run the suite.

        Returns:
            Results of all tests, in catalog order

        Raises:
            SuiteInstantiationError: If the target cannot be instantiated
            SuiteSetupError: If a suite setup hook fails; no test runs
            SuiteTeardownError: If a suite teardown hook fails; the error
                carries the computed report
            HandleInvocationError: If a handle cannot be invoked at all

        """
        log.info("Running suite %s (%d test(s))", self.name, len(self.catalog.tests))

        try:
            instance = self.target()
        except Exception as exc:
            log.error("Cannot instantiate suite %s: %s", self.name, exc, exc_info=exc)
            raise SuiteInstantiationError(
                f"Cannot instantiate {self.name}: {exc}"
            ) from exc

        for hook in self.catalog.suite_setup:
            if (error := attempt(hook, instance)) is not None:
                log.error("Suite setup %s failed: %s", hook.name, error, exc_info=error)
                raise SuiteSetupError(
                    f"Suite setup {hook.name} failed: {error}"
                ) from error

        report = SuiteReport(suite=self.name, results=self._run_tests(instance))

        errors = self._run_suite_teardown(instance)
        if errors:
            raise SuiteTeardownError(
                f"{len(errors)} suite teardown hook(s) failed: {errors[0]}",
                report=report,
                errors=errors,
            ) from errors[0]

        log.info(
            "Suite %s completed: %d passed, %d failed, %d ignored",
            self.name,
            report.passed,
            report.failed,
            report.ignored,
        )
        return report

    def _run_tests(self, instance: T) -> tuple[TestResult, ...]:
        executor = TestCaseExecutor(
            setups=self.catalog.test_setup,
            teardowns=self.catalog.test_teardown,
        )
        return tuple(executor.run(test, instance) for test in self.catalog.tests)

    def _run_suite_teardown(self, instance: T) -> list[Exception]:
        errors: list[Exception] = []
        for hook in self.catalog.suite_teardown:
            if (error := attempt(hook, instance)) is not None:
                log.error(
                    "Suite teardown %s failed: %s", hook.name, error, exc_info=error
                )
                errors.append(error)
        return errors
