"""Typed extraction helpers for loosely-typed JSON parameter objects.

Every helper reads one member of a ``params`` mapping, checks its JSON type
and raises :class:`~fetchtime.tools.errors.InvalidParamsError` on a mismatch,
so tools never surface a raw ``TypeError`` or ``KeyError`` to the caller.

Usage::

    tz = get_str(params, "timezone", default="UTC")
    lat = get_float(params, "latitude", required=True)
    zones = get_str_list(params, "to_timezones")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fetchtime.tools.errors import InvalidParamsError

_MISSING = object()


def _lookup(params: Mapping[str, Any] | None, key: str, required: bool) -> Any:
    value = _MISSING if params is None else params.get(key, _MISSING)
    if value is None:
        value = _MISSING
    if value is _MISSING and required:
        raise InvalidParamsError(f"Missing required parameter: {key}")
    return value


def get_str(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    default: str | None = None,
    required: bool = False,
) -> str | None:
    value = _lookup(params, key, required)
    if value is _MISSING:
        return default
    if not isinstance(value, str):
        raise InvalidParamsError(f"Parameter '{key}' must be a string")
    return value


def get_bool(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    default: bool = False,
) -> bool:
    value = _lookup(params, key, False)
    if value is _MISSING:
        return default
    if not isinstance(value, bool):
        raise InvalidParamsError(f"Parameter '{key}' must be a boolean")
    return value


def get_int(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    default: int | None = None,
    required: bool = False,
) -> int | None:
    value = _lookup(params, key, required)
    if value is _MISSING:
        return default
    # bool is an int subclass in Python but not a JSON integer
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise InvalidParamsError(f"Parameter '{key}' must be an integer")
    return value


def get_float(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    default: float | None = None,
    required: bool = False,
) -> float | None:
    """Read a number; numeric strings such as ``"35.68"`` are accepted."""
    value = _lookup(params, key, required)
    if value is _MISSING:
        return default
    if isinstance(value, bool):
        raise InvalidParamsError(f"Parameter '{key}' must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise InvalidParamsError(f"Parameter '{key}' must be a number")


def get_str_list(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    required: bool = False,
) -> list[str]:
    value = _lookup(params, key, required)
    if value is _MISSING:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidParamsError(f"Parameter '{key}' must be an array of strings")
    return list(value)


def get_object(
    params: Mapping[str, Any] | None,
    key: str,
    *,
    required: bool = False,
) -> dict[str, Any] | None:
    value = _lookup(params, key, required)
    if value is _MISSING:
        return None
    if not isinstance(value, dict):
        raise InvalidParamsError(f"Parameter '{key}' must be an object")
    return value
