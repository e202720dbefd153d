"""JSON-RPC 2.0 envelope: requests, responses and error objects.

The envelope is transport-agnostic: HTTP, WebSocket and stdio adapters all
decode wire messages into :class:`JsonRpcRequest` and encode
:class:`JsonRpcResponse` back with :meth:`JsonRpcResponse.to_wire`.
"""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

JSONRPC_VERSION = "2.0"
TOOL_METHOD_PREFIX = "tools/"

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(IntEnum):
    """Standard JSON-RPC codes plus the server's domain-specific range."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    TIMEZONE_ERROR = -32001
    API_ERROR = -32002
    CALENDAR_ERROR = -32003
    RATE_LIMIT_ERROR = -32004
    AUTHENTICATION_ERROR = -32005


PARSE_ERROR = ErrorCode.PARSE_ERROR
INVALID_REQUEST = ErrorCode.INVALID_REQUEST
METHOD_NOT_FOUND = ErrorCode.METHOD_NOT_FOUND
INVALID_PARAMS = ErrorCode.INVALID_PARAMS
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR
TIMEZONE_ERROR = ErrorCode.TIMEZONE_ERROR
API_ERROR = ErrorCode.API_ERROR
CALENDAR_ERROR = ErrorCode.CALENDAR_ERROR
RATE_LIMIT_ERROR = ErrorCode.RATE_LIMIT_ERROR
AUTHENTICATION_ERROR = ErrorCode.AUTHENTICATION_ERROR


# ---------------------------------------------------------------------------
# Error object
# ---------------------------------------------------------------------------


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object.

    Use the classmethod factories rather than building instances by hand so
    each kind of failure carries its canonical message; the caller-specific
    detail goes into ``data``.
    """

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: Any = None

    @classmethod
    def parse_error(cls, details: str | None = None) -> JsonRpcError:
        return cls(code=PARSE_ERROR, message="Parse error", data=details)

    @classmethod
    def invalid_request(cls, details: str | None = None) -> JsonRpcError:
        return cls(code=INVALID_REQUEST, message="Invalid request", data=details)

    @classmethod
    def method_not_found(cls, method: str) -> JsonRpcError:
        return cls(code=METHOD_NOT_FOUND, message=f"Method not found: {method}")

    @classmethod
    def invalid_params(cls, details: str | None = None) -> JsonRpcError:
        return cls(code=INVALID_PARAMS, message="Invalid parameters", data=details)

    @classmethod
    def internal_error(cls, details: str | None = None) -> JsonRpcError:
        return cls(code=INTERNAL_ERROR, message="Internal error", data=details)

    @classmethod
    def timezone_error(cls, details: Any = None) -> JsonRpcError:
        return cls(code=TIMEZONE_ERROR, message="Timezone error", data=details)

    @classmethod
    def api_error(cls, api: str, details: Any = None) -> JsonRpcError:
        return cls(code=API_ERROR, message=f"API error: {api}", data=details)

    @classmethod
    def calendar_error(cls, details: Any = None) -> JsonRpcError:
        return cls(code=CALENDAR_ERROR, message="Calendar error", data=details)

    @classmethod
    def rate_limit_error(cls, api: str) -> JsonRpcError:
        return cls(code=RATE_LIMIT_ERROR, message=f"Rate limit exceeded for API: {api}")

    @classmethod
    def authentication_error(cls, details: Any = None) -> JsonRpcError:
        return cls(code=AUTHENTICATION_ERROR, message="Authentication error", data=details)

    def to_wire(self) -> dict[str, Any]:
        """Encode as a plain dict, omitting ``data`` when absent."""
        wire: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            wire["data"] = self.data
        return wire


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    Construction never validates the envelope; call :meth:`is_valid` to check
    it. Numeric ids are accepted on the wire and normalised to strings.
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str | None = None
    id: str | None = None
    method: str | None = None
    params: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def create(
        cls,
        id: str | None,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> JsonRpcRequest:
        """Build a request with the protocol version fixed to ``"2.0"``."""
        return cls(jsonrpc=JSONRPC_VERSION, id=id, method=method, params=params)

    def is_valid(self) -> bool:
        return self.jsonrpc == JSONRPC_VERSION and bool(self.id) and bool(self.method)

    def is_tool_execution(self) -> bool:
        return self.method is not None and self.method.startswith(TOOL_METHOD_PREFIX)

    def tool_name(self) -> str | None:
        """The tool addressed by a ``tools/<name>`` method, else ``None``."""
        if not self.is_tool_execution():
            return None
        assert self.method is not None
        return self.method[len(TOOL_METHOD_PREFIX) :]


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    Build through :meth:`success` or :meth:`failure` so that exactly one of
    ``result`` / ``error`` is populated.
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    id: str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def success(cls, id: str | None, result: Any) -> JsonRpcResponse:
        return cls(id=id, result=result)

    @classmethod
    def failure(
        cls,
        id: str | None,
        error: JsonRpcError | int,
        message: str = "",
    ) -> JsonRpcResponse:
        """Build an error response from an error object or a bare code + message."""
        if not isinstance(error, JsonRpcError):
            error = JsonRpcError(code=error, message=message)
        return cls(id=id, error=error)

    def is_success(self) -> bool:
        return self.error is None and self.result is not None

    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> dict[str, Any]:
        """Encode as a plain dict; absent members are omitted."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            wire["id"] = self.id
        if self.result is not None:
            wire["result"] = self.result
        if self.error is not None:
            wire["error"] = self.error.to_wire()
        return wire

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), default=str)

    @classmethod
    def from_wire(cls, raw: dict[str, Any]) -> JsonRpcResponse:
        return cls.model_validate(raw)
