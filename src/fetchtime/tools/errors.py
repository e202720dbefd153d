"""Shared error types for the tool layer.

Tools signal domain failures by raising :class:`ToolExecutionError`; the
dispatcher turns the attached :class:`JsonRpcError` into the error member of
the response envelope.
"""

from __future__ import annotations

from typing import Any

from fetchtime.protocol.models import (
    API_ERROR,
    CALENDAR_ERROR,
    INVALID_PARAMS,
    TIMEZONE_ERROR,
    JsonRpcError,
)


class FetchTimeError(Exception):
    """Base error for all FetchTime failures."""


class ToolExecutionError(FetchTimeError):
    """A tool failed while executing; carries the wire-level error value."""

    def __init__(self, error: JsonRpcError) -> None:
        self.error = error
        msg = error.message
        if isinstance(error.data, str) and error.data:
            msg += f": {error.data}"
        super().__init__(msg)

    @property
    def code(self) -> int:
        return self.error.code

    @classmethod
    def from_code(cls, code: int, message: str, data: Any = None) -> ToolExecutionError:
        return cls(JsonRpcError(code=code, message=message, data=data))

    @classmethod
    def invalid_timezone(
        cls, timezone: str, suggestions: list[str] | None = None
    ) -> ToolExecutionError:
        data = {"suggestions": suggestions} if suggestions else None
        return cls.from_code(TIMEZONE_ERROR, f"Invalid timezone: {timezone}", data)

    @classmethod
    def api_failure(cls, api: str, reason: str) -> ToolExecutionError:
        return cls.from_code(API_ERROR, f"API call failed: {api}", reason)

    @classmethod
    def invalid_parameter(cls, parameter: str, reason: str) -> ToolExecutionError:
        return cls.from_code(INVALID_PARAMS, f"Invalid parameter '{parameter}': {reason}")

    @classmethod
    def rate_limit_exceeded(cls, api: str) -> ToolExecutionError:
        return cls(JsonRpcError.rate_limit_error(api))

    @classmethod
    def calendar_failure(cls, reason: str) -> ToolExecutionError:
        return cls.from_code(CALENDAR_ERROR, "Calendar conversion failed", reason)


class InvalidParamsError(ToolExecutionError):
    """A parameter was missing or had the wrong JSON type."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(JsonRpcError.invalid_params(detail))


class ToolRegistrationError(FetchTimeError, ValueError):
    """A tool could not be registered (absent tool or blank name)."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Cannot register tool: {detail}")
