"""Loading of suite classes from import paths or entry points."""

from importlib import import_module
from importlib.metadata import entry_points

ENTRY_POINT_GROUP = "suite_runner.suites"


class SuiteNotFoundError(Exception):
    """Raised when a suite class cannot be resolved."""


def load_suite(target: str) -> type:
    """Resolve a suite class.

    Args:
        target: Either an import path ``"package.module:ClassName"`` or a key
                registered in the ``suite_runner.suites`` entry point group
                (e.g., "mapping-contract")

    Returns:
        The suite class

    Raises:
        SuiteNotFoundError: If the target does not resolve to a class

    """
    suite = _import_path(target) if ":" in target else _entry_point(target)

    if not isinstance(suite, type):
        raise SuiteNotFoundError(f"Suite '{target}' is not a class: {suite!r}")
    return suite


def _import_path(target: str) -> object:
    module_name, _, attribute = target.partition(":")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise SuiteNotFoundError(f"Cannot import module '{module_name}'") from exc

    obj: object = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise SuiteNotFoundError(
                f"Module '{module_name}' has no attribute '{attribute}'"
            ) from exc
    return obj


def _entry_point(key: str) -> object:
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            return entry.load()

    available = [e.name for e in entries]
    raise SuiteNotFoundError(f"Suite '{key}' not found. Available suites: {available}")
