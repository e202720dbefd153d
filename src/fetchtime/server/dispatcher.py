"""RequestDispatcher: turns one request envelope into one response envelope.

Every transport adapter funnels decoded requests through
:meth:`RequestDispatcher.process`. Processing runs in a fixed order:

1. **Envelope validation**: anything failing
   :meth:`JsonRpcRequest.is_valid` is answered with INVALID_REQUEST.
2. **Classification**: ``tools/<name>`` goes to tool execution; the
   built-in methods ``tools/list``, ``ping`` and ``server/info`` are answered
   directly; anything else is METHOD_NOT_FOUND.
3. **Tool execution**: lookup, ``validate_parameters``, ``execute``, then
   the tool's ``data`` becomes the ``result``.

``process`` never raises: every failure becomes an error response.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from fetchtime import SERVER_NAME, SERVER_PROTOCOL, SERVER_VERSION
from fetchtime.protocol.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from fetchtime.tools.errors import ToolExecutionError
from fetchtime.utils.telemetry import (
    ATTR_ERROR_CODE,
    ATTR_METHOD,
    ATTR_REQUEST_ID,
    ATTR_TOOL_NAME,
    SPAN_DISPATCH,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from fetchtime.server.config import ServerConfig
    from fetchtime.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class RequestDispatcher:
    """Routes requests to built-in handlers or registered tools.

    The dispatcher keeps no per-request state, so one instance serves all
    concurrent workers. The only shared state is the injected registry.

    Usage::

        dispatcher = RequestDispatcher(registry, config=ServerConfig())
        response = dispatcher.process(request)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        config: ServerConfig | None = None,
        clock: Callable[[], int] = _now_millis,
    ) -> None:
        self._registry = registry
        self._websocket = config.enable_websocket if config is not None else True
        self._caching = config.enable_caching if config is not None else True
        self._clock = clock
        self._builtins: dict[str, Callable[[JsonRpcRequest], JsonRpcResponse]] = {
            "tools/list": self._handle_list_tools,
            "ping": self._handle_ping,
            "server/info": self._handle_server_info,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def builtin_methods(self) -> list[str]:
        return list(self._builtins)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def process(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Answer *request*; never raises."""
        logger.debug("Processing request id=%s method=%s", request.id, request.method)
        with _tracer.start_as_current_span(SPAN_DISPATCH) as span:
            span.set_attribute(ATTR_METHOD, request.method or "")
            if request.id is not None:
                span.set_attribute(ATTR_REQUEST_ID, request.id)

            response = self._process(request, span)

            if response.error is not None:
                span.set_attribute(ATTR_ERROR_CODE, int(response.error.code))
            return response

    def _process(self, request: JsonRpcRequest, span: Any) -> JsonRpcResponse:
        if not request.is_valid():
            return JsonRpcResponse.failure(
                request.id, JsonRpcError.invalid_request("Invalid request format")
            )

        try:
            if request.is_tool_execution():
                # "tools/list" shares the prefix but is a built-in
                if request.method in self._builtins:
                    return self._builtins[request.method](request)
                tool_name = request.tool_name() or ""
                span.set_attribute(ATTR_TOOL_NAME, tool_name)
                return self._execute_tool(request, tool_name)

            handler = self._builtins.get(request.method or "")
            if handler is None:
                return JsonRpcResponse.failure(
                    request.id, JsonRpcError.method_not_found(request.method or "")
                )
            return handler(request)
        except Exception as exc:
            logger.exception("Error processing request %s", request.id)
            return JsonRpcResponse.failure(request.id, JsonRpcError.internal_error(str(exc)))

    # ------------------------------------------------------------------
    # Tool execution
    # ------------------------------------------------------------------

    def _execute_tool(self, request: JsonRpcRequest, tool_name: str) -> JsonRpcResponse:
        tool = self._registry.get(tool_name)
        if tool is None:
            return JsonRpcResponse.failure(
                request.id, JsonRpcError.method_not_found(f"Tool not found: {tool_name}")
            )

        validation_error = tool.validate_parameters(request.params)
        if validation_error is not None:
            logger.debug("Parameters rejected for %s: %s", tool_name, validation_error.message)
            return JsonRpcResponse.failure(request.id, validation_error)

        try:
            # validate_parameters rejects None by default; an override that
            # accepts it still gets a mapping
            result = tool.execute(request.params or {})
        except ToolExecutionError as exc:
            logger.error("Tool execution failed: %s: %s", tool_name, exc)
            return JsonRpcResponse.failure(request.id, exc.error)
        except Exception as exc:
            logger.exception("Unexpected error executing tool: %s", tool_name)
            return JsonRpcResponse.failure(request.id, JsonRpcError.internal_error(str(exc)))

        return JsonRpcResponse.success(request.id, result.data)

    # ------------------------------------------------------------------
    # Built-in methods
    # ------------------------------------------------------------------

    def _handle_list_tools(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, {"tools": self._registry.list_descriptors()})

    def _handle_ping(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, {"pong": True, "timestamp": self._clock()})

    def _handle_server_info(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(
            request.id,
            {
                "name": SERVER_NAME,
                "version": SERVER_VERSION,
                "protocol": SERVER_PROTOCOL,
                "capabilities": {
                    "tools": True,
                    "websocket": self._websocket,
                    "caching": self._caching,
                },
            },
        )
