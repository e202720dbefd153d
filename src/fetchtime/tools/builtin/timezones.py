"""Timezone lookup, formatting and DST helpers shared by the time tools."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from fetchtime.tools.errors import ToolExecutionError

ABBREVIATIONS = {
    "JST": "Asia/Tokyo",
    "EST": "America/New_York",
    "PST": "America/Los_Angeles",
    "GMT": "Europe/London",
    "CET": "Europe/Paris",
    "CST": "America/Chicago",
    "MST": "America/Denver",
    "AEST": "Australia/Sydney",
    "IST": "Asia/Kolkata",
}

OUTPUT_FORMATS = ("ISO8601", "RFC3339", "UNIX", "HUMAN", "CUSTOM")

MAX_SUGGESTIONS = 5

# Transitions are searched this far ahead of the reference instant
_TRANSITION_HORIZON = timedelta(days=400)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@lru_cache(maxsize=1)
def _zone_names() -> tuple[str, ...]:
    return tuple(sorted(available_timezones()))


def suggest_zones(text: str) -> list[str]:
    """Return up to five IANA names containing *text*, case-insensitively."""
    needle = text.lower()
    if not needle:
        return []
    return [name for name in _zone_names() if needle in name.lower()][:MAX_SUGGESTIONS]


def resolve_zone(name: str, *, expand_abbreviations: bool = True) -> ZoneInfo:
    """Look up an IANA zone, optionally accepting common abbreviations.

    Raises:
        ToolExecutionError: TIMEZONE_ERROR with close matches as suggestions.
    """
    key = ABBREVIATIONS.get(name.upper(), name) if expand_abbreviations else name
    # tzdata region directories such as "Asia" raise IsADirectoryError
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ToolExecutionError.invalid_timezone(name, suggest_zones(name)) from exc


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_offset(offset: timedelta | None) -> str:
    """Render a UTC offset as ``+09:00``; zero is ``Z``."""
    seconds = int(offset.total_seconds()) if offset is not None else 0
    if seconds == 0:
        return "Z"
    sign = "-" if seconds < 0 else "+"
    hours, rem = divmod(abs(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}"
    return f"{text}:{secs:02d}" if secs else text


def format_offset_difference(seconds: int) -> str:
    """Render an offset difference as ``+9h`` or ``-3h30m``."""
    sign = "-" if seconds < 0 else "+"
    hours, rem = divmod(abs(seconds), 3600)
    minutes = rem // 60
    return f"{sign}{hours}h{minutes:02d}m" if minutes else f"{sign}{hours}h"


def format_timestamp(moment: datetime, fmt: str, custom_format: str | None = None) -> str:
    """Format *moment* in one of :data:`OUTPUT_FORMATS`.

    Raises:
        ToolExecutionError: INVALID_PARAMS for an unknown format or a missing
            ``custom_format``.
    """
    kind = fmt.upper()
    if kind == "ISO8601":
        return moment.isoformat()
    if kind == "RFC3339":
        return moment.isoformat(timespec="seconds")
    if kind == "UNIX":
        return str(int(moment.timestamp()))
    if kind == "HUMAN":
        return moment.strftime("%Y-%m-%d %H:%M:%S %Z")
    if kind == "CUSTOM":
        if not custom_format or not custom_format.strip():
            raise ToolExecutionError.invalid_parameter(
                "custom_format", "required when format=CUSTOM"
            )
        return moment.strftime(custom_format)
    raise ToolExecutionError.invalid_parameter("format", f"unsupported format: {fmt}")


# ---------------------------------------------------------------------------
# DST and zone details
# ---------------------------------------------------------------------------


def next_transition(zone: ZoneInfo, after: datetime) -> datetime | None:
    """Find the next instant after *after* where *zone*'s UTC offset changes.

    Scans day by day, then bisects to the second. Returns ``None`` when the
    offset stays fixed over the search horizon.
    """
    start = after.astimezone(timezone.utc)
    base = start.astimezone(zone).utcoffset()

    low = start
    step = timedelta(days=1)
    while low - start < _TRANSITION_HORIZON:
        high = low + step
        if high.astimezone(zone).utcoffset() != base:
            break
        low = high
    else:
        return None

    while high - low > timedelta(seconds=1):
        mid = low + (high - low) / 2
        if mid.astimezone(zone).utcoffset() == base:
            low = mid
        else:
            high = mid
    return high.replace(microsecond=0)


def dst_info(moment: datetime, zone: ZoneInfo) -> dict[str, Any]:
    local = moment.astimezone(zone)
    dst = local.dst() or timedelta(0)
    info: dict[str, Any] = {
        "is_dst": dst != timedelta(0),
        "dst_offset_seconds": int(dst.total_seconds()),
        "dst_offset": format_offset(dst),
    }
    transition = next_transition(zone, moment)
    if transition is not None:
        before = transition - timedelta(seconds=1)
        spring_forward = transition.astimezone(zone).utcoffset() > before.astimezone(zone).utcoffset()
        info["next_transition"] = transition.isoformat().replace("+00:00", "Z")
        info["next_transition_type"] = "SPRING_FORWARD" if spring_forward else "FALL_BACK"
    return info


def zone_info(moment: datetime, zone: ZoneInfo) -> dict[str, Any]:
    local = moment.astimezone(zone)
    offset = local.utcoffset() or timedelta(0)
    dst = local.dst() or timedelta(0)
    return {
        "zone_id": zone.key,
        "abbreviation": local.tzname(),
        "standard_offset": format_offset(offset - dst),
        "has_fixed_offset": next_transition(zone, moment) is None,
    }


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_COMMON_PATTERNS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)

_UNIX_SECONDS = re.compile(r"^-?\d{10}$")
_UNIX_MILLIS = re.compile(r"^-?\d{13}$")


def parse_datetime(text: str, zone: ZoneInfo) -> datetime:
    """Parse *text* into an aware datetime.

    Accepts ISO 8601 with or without an offset (naive values are placed in
    *zone*), a handful of common day-first and month-first patterns, and
    10-digit (seconds) or 13-digit (milliseconds) unix timestamps.

    Raises:
        ToolExecutionError: INVALID_PARAMS when no pattern matches.
    """
    value = text.strip()

    if _UNIX_SECONDS.match(value):
        return datetime.fromtimestamp(int(value), tz=zone)
    if _UNIX_MILLIS.match(value):
        return datetime.fromtimestamp(int(value) / 1000, tz=zone)

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=zone)

    for pattern in _COMMON_PATTERNS:
        try:
            return datetime.strptime(value, pattern).replace(tzinfo=zone)
        except ValueError:
            continue

    raise ToolExecutionError.invalid_parameter("datetime", f"unable to parse: {text}")
