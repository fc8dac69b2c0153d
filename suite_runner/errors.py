"""Fatal errors raised by the harness.

Anything raised from here aborts a suite run. Failures inside a test body or
a per-test hook never surface as one of these; they become FAILED results.
"""

from collections.abc import Sequence

from suite_runner.models.result import SuiteReport


class HarnessError(Exception):
    """Base class for errors that abort a suite run."""


class CatalogError(HarnessError):
    """Raised when role metadata on a target cannot be read or is malformed."""


class HandleInvocationError(HarnessError):
    """Raised when the harness cannot call a registered handle on the instance."""


class SuiteInstantiationError(HarnessError):
    """Raised when the target class cannot be instantiated."""


class SuiteSetupError(HarnessError):
    """Raised when a suite setup hook fails."""


class SuiteTeardownError(HarnessError):
    """Raised when one or more suite teardown hooks fail.

    The report computed before teardown is kept so callers still get the
    test outcomes alongside the error.
    """

    def __init__(
        self, message: str, *, report: SuiteReport, errors: Sequence[Exception]
    ) -> None:
        super().__init__(message)
        self.report = report
        self.errors = tuple(errors)
