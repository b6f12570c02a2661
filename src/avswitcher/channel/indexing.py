"""Port index translation and flag parsing.

The service speaks 0-based port indices to its callers while the
switcher numbers its ports from 1. Translation happens exactly once at
each boundary. Every helper here fails closed: anything that does not
parse as a plain base-10 integer raises InvalidArgumentError.
"""

from __future__ import annotations

import re

from avswitcher.errors import InvalidArgumentError

_INT_RE = re.compile(r"^[+-]?\d+$")

# Boolean spellings accepted in URL path segments.
_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_index(value: str | int) -> int:
    """Parse an index given as text or int."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{value!r} is not a valid index")
    if isinstance(value, int):
        return value
    text = str(value)
    if not _INT_RE.match(text):
        raise InvalidArgumentError(f"{text!r} is not a valid index")
    return int(text)


def is_negative(value: str | int) -> bool:
    """Return whether the index is below zero; unparseable input raises."""
    return parse_index(value) < 0


def to_device_index(value: str | int) -> int:
    """Convert an external (0-based) index to the device's 1-based index."""
    n = parse_index(value)
    if n < 0:
        raise InvalidArgumentError(f"Index {value} must be zero or greater")
    return n + 1


def to_external_index(value: str | int) -> int:
    """Convert a device (1-based) index back to the external 0-based index."""
    n = parse_index(value)
    if n < 1:
        raise InvalidArgumentError(f"Device index {value} must be one or greater")
    return n - 1


def parse_bool(value: str, name: str = "value") -> bool:
    """Parse a true/false path flag, naming the parameter on failure."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidArgumentError(f"Error! {name} must be a true/false value")
