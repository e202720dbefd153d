"""Tests for tool-layer error types."""

from __future__ import annotations

import pytest

from fetchtime.protocol.models import (
    API_ERROR,
    CALENDAR_ERROR,
    INVALID_PARAMS,
    RATE_LIMIT_ERROR,
    TIMEZONE_ERROR,
)
from fetchtime.tools.errors import (
    FetchTimeError,
    InvalidParamsError,
    ToolExecutionError,
    ToolRegistrationError,
)


class TestToolExecutionError:
    def test_invalid_timezone_with_suggestions(self) -> None:
        exc = ToolExecutionError.invalid_timezone("Tokyo", ["Asia/Tokyo"])
        assert exc.code == TIMEZONE_ERROR
        assert exc.error.message == "Invalid timezone: Tokyo"
        assert exc.error.data == {"suggestions": ["Asia/Tokyo"]}

    def test_invalid_timezone_without_suggestions_has_no_data(self) -> None:
        assert ToolExecutionError.invalid_timezone("Mars/Olympus").error.data is None

    def test_api_failure(self) -> None:
        exc = ToolExecutionError.api_failure("worldtime", "timeout")
        assert exc.code == API_ERROR
        assert str(exc) == "API call failed: worldtime: timeout"

    def test_invalid_parameter(self) -> None:
        exc = ToolExecutionError.invalid_parameter("date", "Invalid format: x")
        assert exc.code == INVALID_PARAMS
        assert exc.error.message == "Invalid parameter 'date': Invalid format: x"

    def test_rate_limit(self) -> None:
        assert ToolExecutionError.rate_limit_exceeded("worldtime").code == RATE_LIMIT_ERROR

    def test_calendar_failure(self) -> None:
        exc = ToolExecutionError.calendar_failure("out of range")
        assert exc.code == CALENDAR_ERROR
        assert exc.error.data == "out of range"

    def test_hierarchy(self) -> None:
        assert issubclass(ToolExecutionError, FetchTimeError)
        assert issubclass(InvalidParamsError, ToolExecutionError)


class TestToolRegistrationError:
    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Cannot register tool: Tool name cannot be empty"):
            raise ToolRegistrationError("Tool name cannot be empty")
