"""Models for the per-test declaration surface."""

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import Field

from suite_runner.models.base import Model


@dataclass(frozen=True, kw_only=True)
class ExpectedFailure:
    """Predicate deciding whether a raised exception is the one a test expects."""

    label: str
    matches: Callable[[Exception], bool]

    @classmethod
    def of_type(cls, *types: type[Exception]) -> "ExpectedFailure":
        """Expect an exception of one of the given types or any of their subtypes."""
        if not types:
            raise ValueError("At least one exception type is required")
        for exc_type in types:
            if not (isinstance(exc_type, type) and issubclass(exc_type, Exception)):
                raise TypeError(f"Not an exception type: {exc_type!r}")

        return cls(
            label=" | ".join(t.__name__ for t in types),
            matches=lambda exc: isinstance(exc, types),
        )


class TestTag(Model):
    """Options attached to a test body by the ``test`` decorator."""

    __test__ = False

    expected: type[Exception] | ExpectedFailure | None = Field(
        default=None,
        description="Exception the body must raise (None means none expected)",
    )
    ignore: str = Field(
        default="",
        description="Reason to skip the test (empty means the test runs)",
    )

    @property
    def expected_failure(self) -> ExpectedFailure | None:
        """The expectation normalised to a predicate."""
        if self.expected is None or isinstance(self.expected, ExpectedFailure):
            return self.expected
        return ExpectedFailure.of_type(self.expected)

    @property
    def ignore_reason(self) -> str | None:
        return self.ignore or None
