"""Models for test execution results."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum


class Verdict(StrEnum):
    """Final classification of one test execution."""

    OK = "ok"
    FAILED = "failed"
    IGNORED = "ignored"


class FailureStage(StrEnum):
    """Part of the per-test chain whose exception decided a FAILED verdict."""

    SETUP = "setup"
    BODY = "body"
    TEARDOWN = "teardown"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test execution.

    ``elapsed_millis`` covers per-test setup, body and teardown. ``stage`` is
    only set for FAILED results.
    """

    __test__ = False

    name: str
    verdict: Verdict
    message: str = ""
    elapsed_millis: int = 0
    stage: FailureStage | None = None


@dataclass(frozen=True, kw_only=True)
class SuiteReport:
    """Ordered results of one suite run, one entry per test body."""

    suite: str
    results: Sequence[TestResult] = ()

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[TestResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> TestResult:
        return self.results[index]

    def _count(self, verdict: Verdict) -> int:
        return sum(1 for result in self.results if result.verdict is verdict)

    @property
    def passed(self) -> int:
        return self._count(Verdict.OK)

    @property
    def failed(self) -> int:
        return self._count(Verdict.FAILED)

    @property
    def ignored(self) -> int:
        return self._count(Verdict.IGNORED)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
