"""Tests for method cataloging and explicit registration."""

import pytest

from suite_runner.annotations import after, after_class, before, before_class, test
from suite_runner.catalog import (
    ROLE_MARKS,
    CatalogBuilder,
    MethodCatalog,
    MethodRole,
)
from suite_runner.errors import CatalogError
from suite_runner.models.tags import TestTag


class BaseSuite:
    @before_class
    def open_connection(self) -> None: ...

    @test
    def inherited(self) -> None: ...

    @test
    def overridden(self) -> None: ...


class SampleSuite(BaseSuite):
    @test
    def first(self) -> None: ...

    @before
    def reset(self) -> None: ...

    @test(expected=ZeroDivisionError)
    def divides(self) -> None: ...

    @after
    def check(self) -> None: ...

    @test(ignore="skip")
    def skipped(self) -> None: ...

    @after_class
    def close_connection(self) -> None: ...

    def overridden(self) -> None: ...

    def helper(self) -> None: ...


def names(descriptors) -> list[str]:
    return [d.name for d in descriptors]


def test_scan_groups_methods_by_role() -> None:
    """Puts each marked method under its role."""
    catalog = MethodCatalog.scan(SampleSuite)

    assert names(catalog.suite_setup) == ["open_connection"]
    assert names(catalog.suite_teardown) == ["close_connection"]
    assert names(catalog.test_setup) == ["reset"]
    assert names(catalog.test_teardown) == ["check"]


def test_scan_keeps_declaration_order_with_bases_first() -> None:
    """Orders tests by declaration, base class members first."""
    catalog = MethodCatalog.scan(SampleSuite)

    assert names(catalog.tests) == ["inherited", "first", "divides", "skipped"]


def test_unmarked_override_drops_the_test() -> None:
    """Ignores a base test overridden by an unmarked method."""
    catalog = MethodCatalog.scan(SampleSuite)

    assert "overridden" not in names(catalog.tests)
    assert "overridden" in names(MethodCatalog.scan(BaseSuite).tests)


def test_scan_carries_test_options() -> None:
    """Copies ignore reason and expected failure into the descriptors."""
    tests = {t.name: t for t in MethodCatalog.scan(SampleSuite).tests}

    assert tests["skipped"].ignore_reason == "skip"
    assert tests["skipped"].ignored
    assert tests["first"].ignore_reason is None
    assert tests["first"].expected_failure is None
    assert tests["divides"].expected_failure is not None
    assert tests["divides"].expected_failure.matches(ZeroDivisionError())
    assert not tests["divides"].expected_failure.matches(ValueError())


def test_hooks_by_role() -> None:
    """Looks up handles by role."""
    catalog = MethodCatalog.scan(SampleSuite)

    assert catalog.hooks(MethodRole.TEST_BODY) is catalog.tests
    assert names(catalog.hooks(MethodRole.TEST_SETUP)) == ["reset"]


def test_scan_of_unmarked_class_is_empty() -> None:
    """Returns an empty catalog when nothing is marked."""
    catalog = MethodCatalog.scan(dict)

    assert catalog == MethodCatalog()


def test_scan_rejects_non_class() -> None:
    """Raises CatalogError for anything but a class."""
    with pytest.raises(CatalogError):
        MethodCatalog.scan("not a class")  # type: ignore[arg-type]


def test_scan_rejects_malformed_marks() -> None:
    """Raises CatalogError when role marks are not a mapping."""

    class Broken:
        def method(self) -> None: ...

        setattr(method, ROLE_MARKS, "test")

    with pytest.raises(CatalogError) as exc_info:
        MethodCatalog.scan(Broken)

    assert "Broken.method" in str(exc_info.value)


def test_scan_rejects_test_without_tag() -> None:
    """Raises CatalogError when a test body carries no TestTag."""

    class Broken:
        def method(self) -> None: ...

        setattr(method, ROLE_MARKS, {MethodRole.TEST_BODY: None})

    with pytest.raises(CatalogError):
        MethodCatalog.scan(Broken)


def test_scan_rejects_methods_with_extra_parameters() -> None:
    """Raises CatalogError when a marked method needs more than self."""

    class Broken:
        @test
        def needs_argument(self, value: int) -> None: ...

    with pytest.raises(CatalogError) as exc_info:
        MethodCatalog.scan(Broken)

    assert "needs_argument" in str(exc_info.value)


def test_builder_registers_in_call_order() -> None:
    """Builds a catalog from explicitly registered handles."""
    catalog = (
        CatalogBuilder[list[str]]()
        .suite_setup(lambda s: s.append("suite"), name="start")
        .test(lambda s: None, name="b")
        .test(lambda s: None, name="a", ignore="later")
        .test_setup(lambda s: None, name="reset")
        .test_teardown(lambda s: None, name="check")
        .suite_teardown(lambda s: None, name="stop")
        .build()
    )

    assert names(catalog.tests) == ["b", "a"]
    assert catalog.tests[1].ignore_reason == "later"
    assert names(catalog.suite_setup) == ["start"]
    assert names(catalog.suite_teardown) == ["stop"]
    assert names(catalog.test_setup) == ["reset"]
    assert names(catalog.test_teardown) == ["check"]


def test_builder_uses_function_name_by_default() -> None:
    """Names descriptors after the registered function."""

    def smoke(instance: object) -> None: ...

    catalog = CatalogBuilder[object]().test(smoke).build()

    assert names(catalog.tests) == ["smoke"]


def test_builder_rejects_duplicate_test_names() -> None:
    """Raises CatalogError when a test name repeats."""
    builder = CatalogBuilder[object]().test(lambda s: None, name="same")

    with pytest.raises(CatalogError):
        builder.test(lambda s: None, name="same")


def test_builder_rejects_non_callable() -> None:
    """Raises CatalogError for handles that cannot be called."""
    with pytest.raises(CatalogError):
        CatalogBuilder[object]().add(
            MethodRole.TEST_SETUP,
            42,  # type: ignore[arg-type]
            name="bad",
        )


def test_builder_rejects_handle_without_instance_parameter() -> None:
    """Raises CatalogError for handles that do not take the instance."""
    with pytest.raises(CatalogError):
        CatalogBuilder[object]().test_setup(
            lambda: None,  # type: ignore[arg-type]
            name="bad",
        )


def test_builder_rejects_invalid_test_options() -> None:
    """Wraps option validation errors in CatalogError."""
    with pytest.raises(CatalogError):
        CatalogBuilder[object]().test(
            lambda s: None,
            expected=int,  # type: ignore[arg-type]
        )


def test_builder_accepts_explicit_tag() -> None:
    """Takes test options from a prebuilt tag."""
    catalog = (
        CatalogBuilder[object]()
        .add(MethodRole.TEST_BODY, lambda s: None, name="t", tag=TestTag(ignore="x"))
        .build()
    )

    assert catalog.tests[0].ignore_reason == "x"


@pytest.mark.parametrize("wrapper", [staticmethod, classmethod])
def test_scan_rejects_marked_static_and_class_methods(wrapper: type) -> None:
    """Raises CatalogError instead of silently skipping a wrapped marked method."""

    def method(self) -> None: ...

    Broken = type("Broken", (), {"method": wrapper(test(method))})

    with pytest.raises(CatalogError) as exc_info:
        MethodCatalog.scan(Broken)

    assert "Broken.method" in str(exc_info.value)
    assert wrapper.__name__ in str(exc_info.value)


def test_scan_skips_unmarked_static_methods() -> None:
    """Leaves unmarked static and class methods out of the catalog."""

    class Helpers:
        @staticmethod
        def build() -> None: ...

        @classmethod
        def create(cls) -> None: ...

        @test
        def runs(self) -> None: ...

    assert names(MethodCatalog.scan(Helpers).tests) == ["runs"]
