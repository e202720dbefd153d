"""Tests for the get_current_time tool."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fetchtime.protocol.models import INVALID_PARAMS, TIMEZONE_ERROR
from fetchtime.tools.builtin import GetCurrentTimeTool
from fetchtime.tools.errors import ToolExecutionError

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
SUMMER = datetime(2024, 7, 1, 16, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tool() -> GetCurrentTimeTool:
    return GetCurrentTimeTool(clock=lambda: NOW)


class TestValidation:
    def test_accepts_empty(self, tool: GetCurrentTimeTool) -> None:
        assert tool.validate_parameters({}) is None

    def test_rejects_non_string_timezone(self, tool: GetCurrentTimeTool) -> None:
        error = tool.validate_parameters({"timezone": 9})
        assert error is not None
        assert error.code == INVALID_PARAMS

    def test_rejects_unknown_format(self, tool: GetCurrentTimeTool) -> None:
        error = tool.validate_parameters({"format": "EPOCH"})
        assert error is not None
        assert error.data == "Invalid format: EPOCH"

    def test_format_is_case_insensitive(self, tool: GetCurrentTimeTool) -> None:
        assert tool.validate_parameters({"format": "human"}) is None


class TestExecute:
    def test_defaults_to_utc(self, tool: GetCurrentTimeTool) -> None:
        data = tool.execute({}).data
        assert data["timezone"] == "UTC"
        assert data["timestamp"] == "2024-01-15T12:00:00+00:00"
        assert data["utc_offset"] == "Z"
        assert data["utc_offset_seconds"] == 0

    def test_tokyo(self, tool: GetCurrentTimeTool) -> None:
        data = tool.execute({"timezone": "Asia/Tokyo"}).data
        assert data["timezone"] == "Asia/Tokyo"
        assert data["timestamp"] == "2024-01-15T21:00:00+09:00"
        assert data["unix_timestamp"] == 1705320000
        assert data["unix_timestamp_millis"] == 1705320000000
        assert data["utc_offset"] == "+09:00"
        assert data["utc_offset_seconds"] == 32400

    def test_date_components(self, tool: GetCurrentTimeTool) -> None:
        components = tool.execute({"timezone": "Asia/Tokyo"}).data["date_components"]
        assert components == {
            "year": 2024,
            "month": 1,
            "day": 15,
            "hour": 21,
            "minute": 0,
            "second": 0,
            "microsecond": 0,
            "day_of_week": "MONDAY",
            "day_of_year": 15,
        }

    def test_abbreviation_resolves_to_iana(self, tool: GetCurrentTimeTool) -> None:
        assert tool.execute({"timezone": "PST"}).data["timezone"] == "America/Los_Angeles"

    def test_formats(self, tool: GetCurrentTimeTool) -> None:
        assert tool.execute({"format": "UNIX"}).data["timestamp"] == "1705320000"
        human = tool.execute({"timezone": "Asia/Tokyo", "format": "HUMAN"}).data
        assert human["timestamp"] == "2024-01-15 21:00:00 JST"
        custom = tool.execute({"format": "CUSTOM", "custom_format": "%H:%M"}).data
        assert custom["timestamp"] == "12:00"

    def test_custom_without_pattern(self, tool: GetCurrentTimeTool) -> None:
        with pytest.raises(ToolExecutionError) as exc_info:
            tool.execute({"format": "CUSTOM"})
        assert exc_info.value.code == INVALID_PARAMS

    def test_optional_sections(self, tool: GetCurrentTimeTool) -> None:
        data = tool.execute({"include_offset": False}).data
        assert "utc_offset" not in data
        assert "dst_info" not in data
        assert "zone_info" not in data

    def test_dst_and_zone_info(self) -> None:
        tool = GetCurrentTimeTool(clock=lambda: SUMMER)
        data = tool.execute(
            {"timezone": "America/New_York", "include_dst": True, "include_zone_info": True}
        ).data
        assert data["utc_offset"] == "-04:00"
        assert data["dst_info"]["is_dst"] is True
        assert data["zone_info"]["abbreviation"] == "EDT"

    def test_invalid_timezone(self, tool: GetCurrentTimeTool) -> None:
        with pytest.raises(ToolExecutionError) as exc_info:
            tool.execute({"timezone": "Mars/Olympus"})
        assert exc_info.value.code == TIMEZONE_ERROR

    def test_metadata(self, tool: GetCurrentTimeTool) -> None:
        assert tool.execute({}).metadata == {"timezone_valid": True}
