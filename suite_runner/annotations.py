"""Decorators marking the methods of a suite class with their roles.

Example::

    class CalculatorSuite:
        @before_class
        def start(self) -> None: ...

        @test(expected=ZeroDivisionError)
        def divide_by_zero(self) -> None:
            1 / 0

        @test(ignore="flaky on CI")
        def slow_path(self) -> None: ...
"""

import inspect
from collections.abc import Callable
from typing import overload

from suite_runner.catalog import ROLE_MARKS, MethodRole
from suite_runner.models.tags import ExpectedFailure, TestTag

type Function = Callable[..., object]


def _mark[F: Function](function: F, role: MethodRole, tag: TestTag | None = None) -> F:
    if not inspect.isfunction(function):
        raise TypeError(
            f"@{role.value} can only decorate plain functions, got {function!r}"
        )

    marks = dict(getattr(function, ROLE_MARKS, {}))
    marks[role] = tag
    setattr(function, ROLE_MARKS, marks)
    return function


def before_class[F: Function](function: F) -> F:
    """Run once on the suite instance before any test."""
    return _mark(function, MethodRole.SUITE_SETUP)


def after_class[F: Function](function: F) -> F:
    """Run once on the suite instance after all tests."""
    return _mark(function, MethodRole.SUITE_TEARDOWN)


def before[F: Function](function: F) -> F:
    """Run before every test that is not ignored."""
    return _mark(function, MethodRole.TEST_SETUP)


def after[F: Function](function: F) -> F:
    """Run after every test that is not ignored, even when it failed."""
    return _mark(function, MethodRole.TEST_TEARDOWN)


@overload
def test[F: Function](function: F, /) -> F: ...


@overload
def test[F: Function](
    *,
    expected: type[Exception] | ExpectedFailure | None = None,
    ignore: str = "",
) -> Callable[[F], F]: ...


def test(
    function: Function | None = None,
    /,
    *,
    expected: type[Exception] | ExpectedFailure | None = None,
    ignore: str = "",
) -> Function | Callable[[Function], Function]:
    """Mark a test body.

    Args:
        function: The body, when used as a bare ``@test``.
        expected: Exception type (or predicate) the body must raise.
        ignore: Non-empty reason to skip the test.

    Raises:
        pydantic.ValidationError: If the options are invalid.

    """
    tag = TestTag(expected=expected, ignore=ignore)

    def decorate(body: Function) -> Function:
        return _mark(body, MethodRole.TEST_BODY, tag)

    if function is None:
        return decorate
    return decorate(function)


test.__test__ = False  # type: ignore[attr-defined]
