"""``get_religious_calendar``: a Gregorian date in a religious calendar."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fetchtime.protocol.models import JsonRpcError
from fetchtime.protocol.params import get_bool, get_str
from fetchtime.services.calendar import CalendarConversionError, CalendarService, CalendarType
from fetchtime.tools.base import BaseTool, ToolResponse
from fetchtime.tools.errors import ToolExecutionError

logger = logging.getLogger(__name__)

CALENDAR_TYPES = [t.value for t in CalendarType]


class GetReligiousCalendarTool(BaseTool):
    name = "get_religious_calendar"
    description = "Convert Gregorian date to various religious calendars"
    cacheable = True
    cache_ttl = 86400

    def __init__(self, service: CalendarService | None = None) -> None:
        self._service = service or CalendarService()

    def parameter_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "date": {
                    "type": "string",
                    "description": "Date in ISO 8601 format (YYYY-MM-DD)",
                    "example": "2024-01-15",
                },
                "calendar_type": {
                    "type": "string",
                    "description": "Type of religious calendar",
                    "enum": CALENDAR_TYPES,
                    "example": "islamic",
                },
                "include_holidays": {
                    "type": "boolean",
                    "description": "Include religious holidays and observances",
                    "default": True,
                },
            },
            "required": ["date", "calendar_type"],
        }

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        error = super().validate_parameters(params)
        if error is not None:
            return error
        assert params is not None

        for key in ("date", "calendar_type"):
            value = params.get(key)
            if not value:
                return JsonRpcError.invalid_params(f"Missing required parameter: {key}")
            if not isinstance(value, str):
                return JsonRpcError.invalid_params(f"{key} must be a string")

        if params["calendar_type"].lower() not in CALENDAR_TYPES:
            return JsonRpcError.invalid_params(
                f"Invalid calendar_type: {params['calendar_type']}"
            )
        return None

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        date_text = get_str(params, "date", required=True)
        type_text = get_str(params, "calendar_type", required=True)
        include_holidays = get_bool(params, "include_holidays", default=True)

        try:
            day = date.fromisoformat(date_text)
        except ValueError as exc:
            raise ToolExecutionError.invalid_parameter("date", f"Invalid format: {date_text}") from exc

        try:
            calendar_type = CalendarType(type_text.lower())
        except ValueError as exc:
            raise ToolExecutionError.invalid_parameter(
                "calendar_type", f"Invalid type: {type_text}"
            ) from exc

        try:
            info = self._service.convert(day, calendar_type)
        except CalendarConversionError as exc:
            raise ToolExecutionError.calendar_failure(str(exc)) from exc

        data: dict[str, Any] = {
            "gregorian_date": date_text,
            "calendar_type": calendar_type.value,
            "converted_date": info.to_converted_date(),
        }
        if include_holidays:
            data["holidays"] = info.holidays
            data["observances"] = info.observances
        data["metadata"] = {
            "calendar_name": info.calendar_name,
            "era": info.era,
            "week_day": info.week_day,
            "is_leap_year": info.is_leap_year,
        }

        logger.info("Converted %s to %s calendar", date_text, calendar_type.value)
        return ToolResponse.of(data)
