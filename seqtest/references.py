"""Resolution of test references from import paths and entry points."""

import importlib
import operator
from importlib.metadata import entry_points
from typing import Any

ENTRY_POINT_GROUP = "seqtest.suites"


class ReferenceNotFoundError(Exception):
    """Raised when a test reference cannot be resolved."""


def resolve_reference(target: str) -> Any:
    """Load the test function or test tree a reference points to.

    Args:
        target: Either an import path ("package.module:attribute") or the
            name of an entry point registered in the "seqtest.suites" group

    Returns:
        The referenced object

    Raises:
        ReferenceNotFoundError: If the module, attribute or entry point
            does not exist

    """
    if ":" in target:
        return load_attribute(target)

    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == target:
            return entry.load()

    available = [e.name for e in entries]
    raise ReferenceNotFoundError(
        f"Test reference '{target}' not found. Available suites: {available}"
    )


def load_attribute(target: str) -> Any:
    """Import "package.module:attribute" and return the attribute."""
    module_name, _, attribute = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise ReferenceNotFoundError(
            f"Cannot import module '{module_name}': {error}"
        ) from error

    if not attribute:
        raise ReferenceNotFoundError(f"Missing attribute in reference '{target}'")

    try:
        return operator.attrgetter(attribute)(module)
    except AttributeError as error:
        raise ReferenceNotFoundError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from error
