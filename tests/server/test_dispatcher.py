"""Tests for RequestDispatcher routing and failure mapping."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from unittest.mock import MagicMock

import pytest

from fetchtime.protocol.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    TIMEZONE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)
from fetchtime.server.config import ServerConfig
from fetchtime.server.dispatcher import RequestDispatcher
from fetchtime.tools.base import BaseTool, ToolResponse
from fetchtime.tools.errors import ToolExecutionError
from fetchtime.tools.registry import ToolRegistry


def _request(raw: str) -> JsonRpcRequest:
    return JsonRpcRequest.model_validate(json.loads(raw))


class RecordingTool(BaseTool):
    name = "recorder"
    description = "Records calls"

    def __init__(self, *, reject: bool = False, raises: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self._reject = reject
        self._raises = raises

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        if self._reject:
            return JsonRpcError.invalid_params("rejected")
        return super().validate_parameters(params)

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        self.calls.append(params)
        if self._raises is not None:
            raise self._raises
        return ToolResponse.of({"echo": params}, {"cache_hit": True, "api_ms": 12})


def _dispatcher_with(tool: BaseTool) -> RequestDispatcher:
    registry = ToolRegistry()
    registry.register(tool)
    return RequestDispatcher(registry)


class TestScenarios:
    def test_ping(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(_request('{"jsonrpc":"2.0","id":"1","method":"ping"}'))
        assert resp.to_wire() == {
            "jsonrpc": "2.0",
            "id": "1",
            "result": {"pong": True, "timestamp": 1705320000000},
        }

    def test_current_time_in_tokyo(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(
            _request(
                '{"jsonrpc":"2.0","id":"2","method":"tools/get_current_time",'
                '"params":{"timezone":"Asia/Tokyo"}}'
            )
        )
        assert resp.is_success()
        assert resp.result["timezone"] == "Asia/Tokyo"

    def test_unknown_timezone(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(
            JsonRpcRequest.create("x", "tools/get_current_time", {"timezone": "Mars/Olympus"})
        )
        assert resp.error is not None
        assert resp.error.code == TIMEZONE_ERROR
        assert resp.id == "x"

    def test_region_directory_timezone(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(
            JsonRpcRequest.create("x", "tools/get_current_time", {"timezone": "Asia"})
        )
        assert resp.error is not None
        assert resp.error.code == TIMEZONE_ERROR
        assert "Errno" not in resp.to_json()

    def test_wrong_version(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(_request('{"jsonrpc":"1.0","id":"3","method":"ping"}'))
        assert resp.error is not None
        assert resp.error.code == INVALID_REQUEST
        assert resp.id == "3"

    def test_unknown_tool(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(_request('{"jsonrpc":"2.0","id":"4","method":"tools/nonexistent"}'))
        assert resp.error is not None
        assert resp.error.code == METHOD_NOT_FOUND
        assert "nonexistent" in resp.error.message

    def test_tools_list_matches_registry(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(JsonRpcRequest.create("5", "tools/list"))
        assert resp.is_success()
        tools = resp.result["tools"]
        assert len(tools) == dispatcher.registry.size() == 4
        assert {t["name"] for t in tools} == {
            "get_current_time",
            "convert_timezone",
            "get_religious_calendar",
            "get_astronomical_info",
        }


class TestEnvelopeValidation:
    @pytest.mark.parametrize(
        "request_",
        [
            JsonRpcRequest(),
            JsonRpcRequest(jsonrpc="2.0", method="ping"),
            JsonRpcRequest(jsonrpc="2.0", id="1"),
            JsonRpcRequest(jsonrpc="2.0", id="", method="ping"),
            JsonRpcRequest(jsonrpc="2.1", id="1", method="tools/recorder"),
        ],
    )
    def test_invalid_requests_never_reach_tools(self, request_: JsonRpcRequest) -> None:
        tool = RecordingTool()
        resp = _dispatcher_with(tool).process(request_)
        assert resp.error is not None
        assert resp.error.code == INVALID_REQUEST
        assert resp.error.data == "Invalid request format"
        assert tool.calls == []

    def test_unknown_builtin(self, dispatcher: RequestDispatcher) -> None:
        resp = dispatcher.process(JsonRpcRequest.create("1", "resources/list"))
        assert resp.error is not None
        assert resp.error.code == METHOD_NOT_FOUND
        assert resp.error.message == "Method not found: resources/list"


class TestToolExecution:
    def test_validation_failure_skips_execute(self) -> None:
        tool = RecordingTool(reject=True)
        resp = _dispatcher_with(tool).process(JsonRpcRequest.create("1", "tools/recorder", {}))
        assert resp.error is not None
        assert resp.error.code == INVALID_PARAMS
        assert tool.calls == []

    def test_validate_called_before_execute(self) -> None:
        tool = MagicMock()
        tool.name = "mocked"
        tool.description = "A mock"
        tool.is_cacheable.return_value = False
        tool.cache_ttl_seconds.return_value = 0
        tool.validate_parameters.return_value = JsonRpcError.invalid_params("nope")
        registry = ToolRegistry()
        registry.register(tool)

        RequestDispatcher(registry).process(JsonRpcRequest.create("1", "tools/mocked", {"a": 1}))

        tool.validate_parameters.assert_called_once_with({"a": 1})
        tool.execute.assert_not_called()

    def test_null_params_rejected_by_default(self) -> None:
        tool = RecordingTool()
        resp = _dispatcher_with(tool).process(JsonRpcRequest.create("1", "tools/recorder"))
        assert resp.error is not None
        assert resp.error.code == INVALID_PARAMS
        assert tool.calls == []

    def test_metadata_not_surfaced(self) -> None:
        resp = _dispatcher_with(RecordingTool()).process(
            JsonRpcRequest.create("1", "tools/recorder", {"x": 1})
        )
        assert resp.result == {"echo": {"x": 1}}
        assert "cache_hit" not in json.dumps(resp.to_wire())

    def test_tool_execution_error_keeps_code_and_data(self) -> None:
        failure = ToolExecutionError.invalid_timezone("Tokyo", ["Asia/Tokyo"])
        resp = _dispatcher_with(RecordingTool(raises=failure)).process(
            JsonRpcRequest.create("1", "tools/recorder", {})
        )
        assert resp.error == failure.error

    def test_unexpected_error_becomes_internal(self) -> None:
        resp = _dispatcher_with(RecordingTool(raises=ZeroDivisionError("division by zero"))).process(
            JsonRpcRequest.create("1", "tools/recorder", {})
        )
        assert resp.error is not None
        assert resp.error.code == INTERNAL_ERROR
        assert resp.error.data == "division by zero"
        assert "Traceback" not in resp.to_json()

    def test_failing_validator_becomes_internal(self) -> None:
        tool = RecordingTool()
        tool.validate_parameters = MagicMock(side_effect=RuntimeError("validator broke"))  # type: ignore[method-assign]
        resp = _dispatcher_with(tool).process(JsonRpcRequest.create("1", "tools/recorder", {}))
        assert resp.error is not None
        assert resp.error.code == INTERNAL_ERROR


class TestBuiltins:
    def test_server_info_reflects_config(self, registry: ToolRegistry) -> None:
        config = ServerConfig(enable_websocket=False, enable_caching=True)
        resp = RequestDispatcher(registry, config=config).process(
            JsonRpcRequest.create("1", "server/info")
        )
        assert resp.result == {
            "name": "FetchTimeMCP",
            "version": "1.0.0",
            "protocol": "MCP/2.0",
            "capabilities": {"tools": True, "websocket": False, "caching": True},
        }

    def test_builtin_methods(self, dispatcher: RequestDispatcher) -> None:
        assert dispatcher.builtin_methods() == ["tools/list", "ping", "server/info"]

    def test_list_reflects_later_registration(self) -> None:
        registry = ToolRegistry()
        dispatcher = RequestDispatcher(registry)
        for n in range(3):
            tool = RecordingTool()
            tool.name = f"tool_{n}"
            registry.register(tool)
        resp = dispatcher.process(JsonRpcRequest.create("1", "tools/list"))
        assert len(resp.result["tools"]) == registry.size() == 3


class TestConcurrency:
    def test_concurrent_requests_keep_their_ids(self, dispatcher: RequestDispatcher) -> None:
        requests = [
            JsonRpcRequest.create(str(n), "tools/get_current_time", {"timezone": "Asia/Tokyo"})
            for n in range(40)
        ]
        with ThreadPoolExecutor(max_workers=8) as pool:
            responses: list[JsonRpcResponse] = list(pool.map(dispatcher.process, requests))
        assert [r.id for r in responses] == [str(n) for n in range(40)]
        assert all(r.is_success() for r in responses)
