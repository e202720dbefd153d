"""``get_current_time``: the current instant in any timezone."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from fetchtime.protocol.models import JsonRpcError
from fetchtime.protocol.params import get_bool, get_str
from fetchtime.tools.base import BaseTool, ToolResponse
from fetchtime.tools.builtin.timezones import (
    OUTPUT_FORMATS,
    dst_info,
    format_offset,
    format_timestamp,
    resolve_zone,
    utc_now,
    zone_info,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class GetCurrentTimeTool(BaseTool):
    """Reports the current time, offset, DST state and calendar components."""

    name = "get_current_time"
    description = "Get current time in specified timezone with various format options"

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def parameter_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "timezone": {
                    "type": "string",
                    "description": "IANA timezone name (e.g., Asia/Tokyo, America/New_York)",
                    "default": "UTC",
                },
                "format": {
                    "type": "string",
                    "enum": list(OUTPUT_FORMATS),
                    "description": "Output format for the timestamp",
                    "default": "ISO8601",
                },
                "custom_format": {
                    "type": "string",
                    "description": "strftime pattern (when format=CUSTOM)",
                },
                "include_dst": {
                    "type": "boolean",
                    "description": "Include DST information",
                    "default": False,
                },
                "include_offset": {
                    "type": "boolean",
                    "description": "Include UTC offset information",
                    "default": True,
                },
                "include_zone_info": {
                    "type": "boolean",
                    "description": "Include detailed timezone information",
                    "default": False,
                },
            },
            "required": [],
        }

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        error = super().validate_parameters(params)
        if error is not None:
            return error
        assert params is not None

        tz = params.get("timezone")
        if tz is not None and not isinstance(tz, str):
            return JsonRpcError.invalid_params("timezone must be a string")

        fmt = params.get("format")
        if fmt is not None:
            if not isinstance(fmt, str):
                return JsonRpcError.invalid_params("format must be a string")
            if fmt.upper() not in OUTPUT_FORMATS:
                return JsonRpcError.invalid_params(f"Invalid format: {fmt}")
        return None

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        tz_name = get_str(params, "timezone", default="UTC")
        fmt = get_str(params, "format", default="ISO8601")
        custom_format = get_str(params, "custom_format")
        include_dst = get_bool(params, "include_dst")
        include_offset = get_bool(params, "include_offset", default=True)
        include_zone_info = get_bool(params, "include_zone_info")

        zone = resolve_zone(tz_name)
        now = self._clock().astimezone(zone)

        data: dict[str, Any] = {
            "timestamp": format_timestamp(now, fmt, custom_format),
            "timezone": zone.key,
            "unix_timestamp": int(now.timestamp()),
            "unix_timestamp_millis": int(now.timestamp() * 1000),
        }
        if include_offset:
            offset = now.utcoffset() or timedelta(0)
            data["utc_offset"] = format_offset(offset)
            data["utc_offset_seconds"] = int(offset.total_seconds())
        if include_dst:
            data["dst_info"] = dst_info(now, zone)
        if include_zone_info:
            data["zone_info"] = zone_info(now, zone)

        data["date_components"] = {
            "year": now.year,
            "month": now.month,
            "day": now.day,
            "hour": now.hour,
            "minute": now.minute,
            "second": now.second,
            "microsecond": now.microsecond,
            "day_of_week": now.strftime("%A").upper(),
            "day_of_year": now.timetuple().tm_yday,
        }

        logger.debug("Current time in %s: %s", zone.key, data["timestamp"])
        return ToolResponse.of(data, {"timezone_valid": True})
