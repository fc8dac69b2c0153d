"""Execution of a single test and classification of its verdict."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from suite_runner.catalog import HookDescriptor, TestDescriptor
from suite_runner.errors import HandleInvocationError
from suite_runner.models.result import FailureStage, TestResult, Verdict
from suite_runner.models.tags import ExpectedFailure

log = logging.getLogger(__name__)

MISSING_EXCEPTION_MESSAGE = "Expected exception was not thrown."


@dataclass(frozen=True, kw_only=True)
class TestCaseExecutor[T]:
    """Runs one test body between the per-test hooks.

    Hooks and body form one sequential chain: a failing setup stops the
    remaining setups and the body, teardowns always run, and the last
    exception to escape the chain decides the verdict.
    """

    __test__ = False

    setups: Sequence[HookDescriptor[T]] = ()
    teardowns: Sequence[HookDescriptor[T]] = ()
    clock: Callable[[], int] = time.monotonic_ns

    def run(self, test: TestDescriptor[T], instance: T) -> TestResult:
        """Run a test on the suite instance.

        Raises:
            HandleInvocationError: If a handle cannot be invoked at all, or
                the expected-failure check itself raises.

        """
        if test.ignored:
            log.info("Test ignored: name=%s reason=%s", test.name, test.ignore_reason)
            return TestResult(
                name=test.name,
                verdict=Verdict.IGNORED,
                message=test.ignore_reason or "",
            )

        start = self.clock()
        error, stage = self._run_chain(test, instance)
        elapsed_millis = max(0, (self.clock() - start) // 1_000_000)

        result = self._classify(test, error, stage, elapsed_millis)
        log.info(
            "Test completed: name=%s verdict=%s elapsed=%dms",
            result.name,
            result.verdict,
            result.elapsed_millis,
        )
        return result

    def _run_chain(
        self, test: TestDescriptor[T], instance: T
    ) -> tuple[Exception | None, FailureStage | None]:
        error: Exception | None = None
        stage: FailureStage | None = None

        for hook in self.setups:
            if (error := attempt(hook, instance)) is not None:
                stage = FailureStage.SETUP
                break
        else:
            if (error := attempt(test, instance)) is not None:
                stage = FailureStage.BODY

        for hook in self.teardowns:
            if (teardown_error := attempt(hook, instance)) is not None:
                if error is not None:
                    log.warning(
                        "Teardown %s of %s replaced earlier failure: %s",
                        hook.name,
                        test.name,
                        error,
                    )
                error, stage = teardown_error, FailureStage.TEARDOWN

        return error, stage

    @staticmethod
    def _classify(
        test: TestDescriptor[T],
        error: Exception | None,
        stage: FailureStage | None,
        elapsed_millis: int,
    ) -> TestResult:
        expected = test.expected_failure

        if error is None:
            if expected is None:
                return TestResult(
                    name=test.name, verdict=Verdict.OK, elapsed_millis=elapsed_millis
                )
            return TestResult(
                name=test.name,
                verdict=Verdict.FAILED,
                message=MISSING_EXCEPTION_MESSAGE,
                elapsed_millis=elapsed_millis,
                stage=FailureStage.BODY,
            )

        if expected is not None and _matches(test, expected, error):
            return TestResult(
                name=test.name, verdict=Verdict.OK, elapsed_millis=elapsed_millis
            )
        return TestResult(
            name=test.name,
            verdict=Verdict.FAILED,
            message=str(error),
            elapsed_millis=elapsed_millis,
            stage=stage,
        )


def _matches[T](
    test: TestDescriptor[T], expected: ExpectedFailure, error: Exception
) -> bool:
    try:
        return expected.matches(error)
    except Exception as exc:
        raise HandleInvocationError(
            f"Expected-failure check {expected.label!r} of {test.name!r} failed: {exc}"
        ) from exc


def attempt[T](hook: HookDescriptor[T], instance: T) -> Exception | None:
    """Invoke a hook and return the exception it raised, if any.

    ``HandleInvocationError`` is not caught: a handle the harness cannot call
    is a fatal error, not a test failure.
    """
    call = hook.bind(instance)
    log.debug("Invoking %s", hook.name)
    try:
        call()
    except Exception as exc:
        return exc
    return None
