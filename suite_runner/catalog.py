"""Classification of a target class's methods by role."""

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from functools import partial
from typing import Any, Self

from pydantic import ValidationError

from suite_runner.errors import CatalogError, HandleInvocationError
from suite_runner.models.tags import ExpectedFailure, TestTag

log = logging.getLogger(__name__)

# Attribute holding the role marks the decorators put on a function.
ROLE_MARKS = "__suite_roles__"

_PROBE = object()


class MethodRole(StrEnum):
    """Role a method plays in a suite run."""

    SUITE_SETUP = "suite_setup"
    SUITE_TEARDOWN = "suite_teardown"
    TEST_SETUP = "test_setup"
    TEST_TEARDOWN = "test_teardown"
    TEST_BODY = "test_body"


@dataclass(frozen=True, kw_only=True)
class HookDescriptor[T]:
    """A named handle called with the suite instance."""

    name: str
    handle: Callable[[T], object]

    def bind(self, instance: T) -> Callable[[], object]:
        """Bind the handle to the instance without calling it.

        Raises:
            HandleInvocationError: If the handle cannot be called with the
                instance.

        """
        try:
            bound = inspect.signature(self.handle).bind(instance)
        except (TypeError, ValueError) as exc:
            raise HandleInvocationError(
                f"Cannot invoke {self.name!r} on {type(instance).__name__}: {exc}"
            ) from exc
        return partial(self.handle, *bound.args, **bound.kwargs)

    def invoke(self, instance: T) -> object:
        """Call the handle on the instance; its own exceptions propagate."""
        return self.bind(instance)()


@dataclass(frozen=True, kw_only=True)
class TestDescriptor[T](HookDescriptor[T]):
    """A test body together with its declared options."""

    __test__ = False

    ignore_reason: str | None = None
    expected_failure: ExpectedFailure | None = None

    @property
    def ignored(self) -> bool:
        return bool(self.ignore_reason)


@dataclass(frozen=True, kw_only=True)
class MethodCatalog[T]:
    """Handles of a target grouped by role, each group in declaration order."""

    suite_setup: Sequence[HookDescriptor[T]] = ()
    suite_teardown: Sequence[HookDescriptor[T]] = ()
    test_setup: Sequence[HookDescriptor[T]] = ()
    test_teardown: Sequence[HookDescriptor[T]] = ()
    tests: Sequence[TestDescriptor[T]] = ()

    def hooks(self, role: MethodRole) -> Sequence[HookDescriptor[T]]:
        """Return the handles registered for a role."""
        if role is MethodRole.TEST_BODY:
            return self.tests
        return getattr(self, role.value)

    @classmethod
    def scan(cls, target: type[T]) -> "MethodCatalog[T]":
        """Build a catalog from the role marks on a class and its bases.

        Members are visited in declaration order starting from the most basic
        class. A member overridden in a subclass keeps its original position
        but only the overriding function's marks count.

        Raises:
            CatalogError: If role marks cannot be read or are malformed, or
                sit on a staticmethod or classmethod.

        """
        if not isinstance(target, type):
            raise CatalogError(f"Expected a class, got {target!r}")

        members: dict[str, Any] = {}
        for klass in reversed(target.__mro__):
            members.update(vars(klass))

        builder: CatalogBuilder[T] = CatalogBuilder()
        for name, value in members.items():
            if isinstance(value, (staticmethod, classmethod)):
                if hasattr(value.__func__, ROLE_MARKS):
                    raise CatalogError(
                        f"Marked member {target.__qualname__}.{name} must be a "
                        f"plain method, not a {type(value).__name__}"
                    )
                continue
            if not inspect.isfunction(value):
                continue
            for role, tag in _read_marks(target, name, value).items():
                builder.add(role, value, name=name, tag=tag)

        catalog = builder.build()
        log.debug(
            "Cataloged %s: %d test(s), %d suite hook(s), %d test hook(s)",
            target.__qualname__,
            len(catalog.tests),
            len(catalog.suite_setup) + len(catalog.suite_teardown),
            len(catalog.test_setup) + len(catalog.test_teardown),
        )
        return catalog


def _read_marks(
    target: type, name: str, function: Callable[..., object]
) -> Mapping[MethodRole, TestTag | None]:
    where = f"{target.__qualname__}.{name}"
    try:
        marks = getattr(function, ROLE_MARKS, None)
    except Exception as exc:
        raise CatalogError(f"Cannot read role marks of {where}") from exc

    if marks is None:
        return {}
    if not isinstance(marks, Mapping):
        raise CatalogError(f"Malformed role marks on {where}: {marks!r}")

    for role, tag in marks.items():
        if not isinstance(role, MethodRole):
            raise CatalogError(f"Unknown role {role!r} on {where}")
        if role is MethodRole.TEST_BODY and not isinstance(tag, TestTag):
            raise CatalogError(f"Test {where} has no valid test tag: {tag!r}")
    return marks


class CatalogBuilder[T]:
    """Explicit registry of handles, appended in registration order.

    Handles take the suite instance as their only argument, so both plain
    functions defined in a class body and free functions work.
    """

    def __init__(self) -> None:
        self._hooks: dict[MethodRole, list[HookDescriptor[T]]] = {
            role: [] for role in MethodRole if role is not MethodRole.TEST_BODY
        }
        self._tests: list[TestDescriptor[T]] = []

    def add(
        self,
        role: MethodRole,
        handle: Callable[[T], object],
        *,
        name: str | None = None,
        tag: TestTag | None = None,
    ) -> Self:
        """Register a handle under a role.

        Raises:
            CatalogError: If the handle cannot be called with an instance, or
                a test name is registered twice.

        """
        name = name or getattr(handle, "__name__", None) or repr(handle)
        _check_handle(handle, name)

        if role is not MethodRole.TEST_BODY:
            self._hooks[role].append(HookDescriptor(name=name, handle=handle))
            return self

        if any(test.name == name for test in self._tests):
            raise CatalogError(f"Duplicate test name {name!r}")

        tag = tag or TestTag()
        self._tests.append(
            TestDescriptor(
                name=name,
                handle=handle,
                ignore_reason=tag.ignore_reason,
                expected_failure=tag.expected_failure,
            )
        )
        return self

    def suite_setup(
        self, handle: Callable[[T], object], *, name: str | None = None
    ) -> Self:
        return self.add(MethodRole.SUITE_SETUP, handle, name=name)

    def suite_teardown(
        self, handle: Callable[[T], object], *, name: str | None = None
    ) -> Self:
        return self.add(MethodRole.SUITE_TEARDOWN, handle, name=name)

    def test_setup(
        self, handle: Callable[[T], object], *, name: str | None = None
    ) -> Self:
        return self.add(MethodRole.TEST_SETUP, handle, name=name)

    def test_teardown(
        self, handle: Callable[[T], object], *, name: str | None = None
    ) -> Self:
        return self.add(MethodRole.TEST_TEARDOWN, handle, name=name)

    def test(
        self,
        handle: Callable[[T], object],
        *,
        name: str | None = None,
        expected: type[Exception] | ExpectedFailure | None = None,
        ignore: str = "",
    ) -> Self:
        """Register a test body with its options."""
        try:
            tag = TestTag(expected=expected, ignore=ignore)
        except ValidationError as exc:
            raise CatalogError(f"Invalid options for test {name or handle!r}") from exc
        return self.add(MethodRole.TEST_BODY, handle, name=name, tag=tag)

    def build(self) -> MethodCatalog[T]:
        return MethodCatalog(
            suite_setup=tuple(self._hooks[MethodRole.SUITE_SETUP]),
            suite_teardown=tuple(self._hooks[MethodRole.SUITE_TEARDOWN]),
            test_setup=tuple(self._hooks[MethodRole.TEST_SETUP]),
            test_teardown=tuple(self._hooks[MethodRole.TEST_TEARDOWN]),
            tests=tuple(self._tests),
        )


def _check_handle(handle: object, name: str) -> None:
    if not callable(handle):
        raise CatalogError(f"Handle for {name!r} is not callable: {handle!r}")
    try:
        inspect.signature(handle).bind(_PROBE)
    except (TypeError, ValueError) as exc:
        raise CatalogError(
            f"Handle for {name!r} must accept the suite instance as its only argument"
        ) from exc
