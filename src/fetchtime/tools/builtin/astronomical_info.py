"""``get_astronomical_info``: sun and moon data for a place and date."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fetchtime.protocol.models import JsonRpcError
from fetchtime.protocol.params import get_bool, get_float, get_str
from fetchtime.services.astronomy import AstronomyService
from fetchtime.tools.base import BaseTool, ToolResponse
from fetchtime.tools.builtin.timezones import resolve_zone
from fetchtime.tools.errors import ToolExecutionError

logger = logging.getLogger(__name__)


def _coordinate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


class GetAstronomicalInfoTool(BaseTool):
    name = "get_astronomical_info"
    description = "Get astronomical information for a specific location and date"
    cacheable = True
    cache_ttl = 3600

    def __init__(self, service: AstronomyService | None = None) -> None:
        self._service = service or AstronomyService()

    def parameter_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "latitude": {
                    "type": "number",
                    "description": "Latitude of the location (-90 to 90)",
                    "minimum": -90,
                    "maximum": 90,
                    "example": 35.6762,
                },
                "longitude": {
                    "type": "number",
                    "description": "Longitude of the location (-180 to 180)",
                    "minimum": -180,
                    "maximum": 180,
                    "example": 139.6503,
                },
                "date": {
                    "type": "string",
                    "description": "Date in ISO 8601 format (YYYY-MM-DD)",
                    "example": "2024-01-15",
                },
                "timezone": {
                    "type": "string",
                    "description": "IANA zone for reported times (default: mean solar offset of the longitude)",
                },
                "include_moon_phase": {
                    "type": "boolean",
                    "description": "Include moon phase information",
                    "default": True,
                },
                "include_twilight": {
                    "type": "boolean",
                    "description": "Include twilight times (civil, nautical, astronomical)",
                    "default": False,
                },
            },
            "required": ["latitude", "longitude", "date"],
        }

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        error = super().validate_parameters(params)
        if error is not None:
            return error
        assert params is not None

        for key, limit in (("latitude", 90.0), ("longitude", 180.0)):
            if params.get(key) is None:
                return JsonRpcError.invalid_params(f"Missing required parameter: {key}")
            value = _coordinate(params[key])
            if value is None:
                return JsonRpcError.invalid_params(f"{key} must be a number")
            if not -limit <= value <= limit:
                return JsonRpcError.invalid_params(
                    f"{key} must be between {-limit:g} and {limit:g}"
                )

        if not isinstance(params.get("date"), str) or not params["date"]:
            return JsonRpcError.invalid_params("Missing required parameter: date")
        return None

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        latitude = get_float(params, "latitude", required=True)
        longitude = get_float(params, "longitude", required=True)
        date_text = get_str(params, "date", required=True)
        tz_name = get_str(params, "timezone")
        include_moon = get_bool(params, "include_moon_phase", default=True)
        include_twilight = get_bool(params, "include_twilight")

        if not -90 <= latitude <= 90:
            raise ToolExecutionError.invalid_parameter("latitude", "must be between -90 and 90")
        if not -180 <= longitude <= 180:
            raise ToolExecutionError.invalid_parameter("longitude", "must be between -180 and 180")

        try:
            day = date.fromisoformat(date_text)
        except ValueError as exc:
            raise ToolExecutionError.invalid_parameter("date", f"Invalid format: {date_text}") from exc

        zone = resolve_zone(tz_name) if tz_name else None
        info = self._service.calculate(
            latitude, longitude, day, tz=zone, include_twilight=include_twilight
        )

        sun = info.sun.model_dump(exclude={"twilight"})
        if include_twilight:
            sun["twilight"] = info.sun.twilight

        data: dict[str, Any] = {
            "location": {"latitude": latitude, "longitude": longitude},
            "date": date_text,
            "sun": sun,
        }
        if include_moon:
            data["moon"] = info.moon.model_dump(mode="json")
        data["solar_position"] = info.solar_position.model_dump()

        logger.info("Retrieved astronomical info for %s,%s on %s", latitude, longitude, date_text)
        return ToolResponse.of(data)
