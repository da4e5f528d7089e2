"""Small value helpers and standard file permissions."""

from __future__ import annotations

from typing import Optional, TypeVar

T = TypeVar("T")

PERMISSION_DIRECTORY = 0o755
PERMISSION_EXECUTABLE_FILE = 0o755
PERMISSION_FILE = 0o644

PERMISSION_DIRECTORY_OWNER_ONLY = 0o700
PERMISSION_FILE_OWNER_ONLY = 0o600

PERMISSION_MASK_DIRECTORY_EXECUTE = 0o100


def is_string_none_or_empty(value: Optional[str]) -> bool:
    """True when ``value`` is None or only whitespace."""
    return value is None or value.strip() == ""


def value_equals(actual: Optional[T], expected: T) -> bool:
    """True when ``actual`` is set and equal to ``expected``."""
    return actual is not None and actual == expected


def to_value_with_default(value: Optional[T], default: T) -> T:
    """Return ``value``, or ``default`` when it is None or an empty string."""
    if value is None:
        return default
    if isinstance(value, str) and value == "":
        return default
    return value