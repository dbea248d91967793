"""Argument extraction helpers for request builders.

Call-sites receive loosely typed arguments (CLI options, tool invocations)
and need a handful of required strings plus optional scalars before they can
build a path and query.
"""

from __future__ import annotations

from collections.abc import Mapping

from ..exceptions import MissingParameterError

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


def require_string(args: Mapping[str, object], key: str) -> str:
    """Return a required non-empty string argument.

    Raises:
        MissingParameterError: If the key is absent, empty or not a string.
    """
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MissingParameterError(key)
    return value


def string_value(args: Mapping[str, object], key: str) -> str | None:
    value = args.get(key)
    return value if isinstance(value, str) else None


def int_value(args: Mapping[str, object], key: str) -> int | None:
    """Return an integer argument, accepting numeric strings."""
    value = args.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def bool_value(args: Mapping[str, object], key: str) -> bool | None:
    """Return a boolean argument, accepting the usual string spellings."""
    value = args.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    return None
