"""Helpers shared by the partial-update request bodies."""

from typing import TypeVar

T = TypeVar("T")


def reject_null(value: T | None) -> T:
    """Field validator body for patch fields that may be omitted but not nulled."""
    if value is None:
        raise ValueError("Field may be omitted but cannot be null")
    return value
