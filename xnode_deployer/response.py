"""Typed extraction from untyped JSON responses.

The strict helpers raise the error class handed to them so every provider
keeps its own diagnosable variants. The lenient helpers return None on any
mismatch and are used where a missing value is an expected state.
"""

from __future__ import annotations

import ipaddress
from typing import Any, Callable, Optional

_U64_MAX = 2**64 - 1


def expect_object(value: Any, error: Callable[[Any], Exception]) -> dict:
    if not isinstance(value, dict):
        raise error(value)
    return value


def require(obj: dict, key: str, error: Callable[[dict], Exception]) -> Any:
    """Return ``obj[key]``; raise ``error(obj)`` with the whole object if absent."""
    if key not in obj:
        raise error(obj)
    return obj[key]


def expect_uint(value: Any, error: Callable[[Any], Exception]) -> int:
    """Accept a JSON number holding an unsigned 64-bit integer."""
    # bool is an int subclass; JSON true/false is not an identifier.
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(value)
    if not 0 <= value <= _U64_MAX:
        raise error(value)
    return value


def expect_array(value: Any, error: Callable[[Any], Exception]) -> list:
    if not isinstance(value, list):
        raise error(value)
    return value


def first(array: list, error: Callable[[], Exception]) -> Any:
    if not array:
        raise error()
    return array[0]


def dig(value: Any, *path: str) -> Any:
    """Follow ``path`` through nested objects, returning None on any mismatch."""
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def parse_ipv4(value: Any) -> Optional[ipaddress.IPv4Address]:
    """Parse a strict dotted-quad string; anything else yields None."""
    if not isinstance(value, str):
        return None
    try:
        return ipaddress.IPv4Address(value)
    except ValueError:
        return None
