"""``convert_timezone``: one instant expressed in one or many timezones."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from dateutil.relativedelta import relativedelta

from fetchtime.protocol.models import JsonRpcError
from fetchtime.protocol.params import get_bool, get_int, get_object, get_str, get_str_list
from fetchtime.tools.base import BaseTool, ToolResponse
from fetchtime.tools.builtin.timezones import (
    dst_info,
    format_offset,
    format_offset_difference,
    parse_datetime,
    resolve_zone,
    utc_now,
)
from fetchtime.tools.errors import ToolExecutionError

if TYPE_CHECKING:
    from collections.abc import Callable
    from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

RELATIVE_UNITS = ("MINUTES", "HOURS", "DAYS", "WEEKS", "MONTHS")


def _offset_seconds(moment: datetime) -> int:
    return int((moment.utcoffset() or timedelta(0)).total_seconds())


def format_datetime(moment: datetime, fmt: str) -> str:
    """``ISO8601``, ``UNIX`` or a strftime pattern."""
    if fmt.upper() == "ISO8601":
        return moment.isoformat()
    if fmt.upper() == "UNIX":
        return str(int(moment.timestamp()))
    return moment.strftime(fmt)


class ConvertTimezoneTool(BaseTool):
    """Converts a datetime (or now, or now plus an offset) between timezones."""

    name = "convert_timezone"
    description = "Convert datetime between different timezones with DST support"
    cacheable = True
    cache_ttl = 300

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def parameter_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "datetime": {
                    "type": "string",
                    "description": "DateTime to convert (ISO format, common formats or unix timestamp)",
                },
                "from_timezone": {
                    "type": "string",
                    "description": "Source timezone (IANA format)",
                    "default": "UTC",
                },
                "to_timezone": {
                    "type": "string",
                    "description": "Target timezone (IANA format)",
                },
                "to_timezones": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Multiple target timezones for batch conversion",
                },
                "format": {
                    "type": "string",
                    "description": "ISO8601, UNIX or a strftime pattern",
                    "default": "ISO8601",
                },
                "include_dst_info": {
                    "type": "boolean",
                    "description": "Include DST information",
                    "default": False,
                },
                "include_time_difference": {
                    "type": "boolean",
                    "description": "Include time difference calculation",
                    "default": True,
                },
                "relative_time": {
                    "type": "object",
                    "description": "Convert a time relative to now (e.g. 3 hours from now)",
                    "properties": {
                        "amount": {"type": "integer"},
                        "unit": {"type": "string", "enum": list(RELATIVE_UNITS)},
                    },
                },
            },
            "required": [],
        }

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        error = super().validate_parameters(params)
        if error is not None:
            return error
        assert params is not None

        for key in ("datetime", "from_timezone", "to_timezone", "format"):
            value = params.get(key)
            if value is not None and not isinstance(value, str):
                return JsonRpcError.invalid_params(f"{key} must be a string")

        targets = params.get("to_timezones")
        if targets is not None and (
            not isinstance(targets, list) or not all(isinstance(t, str) for t in targets)
        ):
            return JsonRpcError.invalid_params("to_timezones must be an array of strings")

        if not params.get("to_timezone") and not targets:
            return JsonRpcError.invalid_params("No target timezone specified")

        relative = params.get("relative_time")
        if relative is not None:
            if not isinstance(relative, dict):
                return JsonRpcError.invalid_params("relative_time must be an object")
            unit = relative.get("unit")
            if unit is not None and (not isinstance(unit, str) or unit.upper() not in RELATIVE_UNITS):
                return JsonRpcError.invalid_params(f"Invalid relative_time unit: {unit}")
        return None

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        from_zone = resolve_zone(get_str(params, "from_timezone", default="UTC"))
        fmt = get_str(params, "format", default="ISO8601")
        include_dst = get_bool(params, "include_dst_info")
        include_diff = get_bool(params, "include_time_difference", default=True)

        source = self._source_datetime(params, from_zone)
        targets = self._target_zones(params)
        if not targets:
            raise ToolExecutionError.invalid_parameter("to_timezone", "No target timezone specified")

        data: dict[str, Any] = {
            "source": {
                "datetime": format_datetime(source, fmt),
                "timezone": from_zone.key,
                "unix_timestamp": int(source.timestamp()),
                "offset": format_offset(source.utcoffset()),
            }
        }

        if len(targets) == 1:
            data["target"] = self._convert(source, resolve_zone(targets[0]), fmt, include_dst, include_diff)
        else:
            zones = {name: resolve_zone(name) for name in targets}
            data["targets"] = [
                self._convert(source, zone, fmt, include_dst, include_diff)
                for zone in zones.values()
            ]
            if include_diff:
                data["time_matrix"] = self._time_matrix(source, zones)

        return ToolResponse.of(data, {"conversion_count": len(targets)})

    # ------------------------------------------------------------------

    def _source_datetime(self, params: dict[str, Any], zone: ZoneInfo) -> datetime:
        relative = get_object(params, "relative_time")
        if relative:
            now = self._clock().astimezone(zone)
            amount = get_int(relative, "amount")
            unit = get_str(relative, "unit")
            if amount is None or unit is None:
                return now
            return self._shift(now, amount, unit.upper())

        text = get_str(params, "datetime")
        if text is None or not text.strip():
            return self._clock().astimezone(zone)
        return parse_datetime(text, zone).astimezone(zone)

    @staticmethod
    def _shift(moment: datetime, amount: int, unit: str) -> datetime:
        if unit == "MINUTES":
            return moment + timedelta(minutes=amount)
        if unit == "HOURS":
            return moment + timedelta(hours=amount)
        if unit == "DAYS":
            return moment + timedelta(days=amount)
        if unit == "WEEKS":
            return moment + timedelta(weeks=amount)
        return moment + relativedelta(months=amount)

    @staticmethod
    def _target_zones(params: dict[str, Any]) -> list[str]:
        zones: list[str] = []
        single = get_str(params, "to_timezone")
        if single and single.strip():
            zones.append(single)
        zones.extend(get_str_list(params, "to_timezones"))
        return list(dict.fromkeys(zones))

    @staticmethod
    def _convert(
        source: datetime,
        zone: ZoneInfo,
        fmt: str,
        include_dst: bool,
        include_diff: bool,
    ) -> dict[str, Any]:
        target = source.astimezone(zone)
        result: dict[str, Any] = {
            "datetime": format_datetime(target, fmt),
            "timezone": zone.key,
            "unix_timestamp": int(target.timestamp()),
            "offset": format_offset(target.utcoffset()),
        }
        if include_diff:
            diff = _offset_seconds(target) - _offset_seconds(source)
            result["time_difference"] = {
                "offset_difference_seconds": diff,
                "offset_difference_hours": diff / 3600,
                "offset_difference": format_offset_difference(diff),
                "same_instant": True,
            }
        if include_dst:
            result["dst_info"] = dst_info(target, zone)
        result["components"] = {
            "date": target.date().isoformat(),
            "time": target.time().isoformat(),
            "day_of_week": target.strftime("%A").upper(),
        }
        return result

    @staticmethod
    def _time_matrix(source: datetime, zones: dict[str, ZoneInfo]) -> dict[str, dict[str, str]]:
        offsets = {name: _offset_seconds(source.astimezone(zone)) for name, zone in zones.items()}
        return {
            row: {
                col: "0h" if row == col else format_offset_difference(offsets[col] - offsets[row])
                for col in offsets
            }
            for row in offsets
        }
