"""Line-oriented stdio transport.

Speaks newline-delimited JSON-RPC in the MCP stdio framing: tools are called
through ``tools/call`` with ``{"name": ..., "arguments": {...}}`` and results
come back wrapped as text content. Nothing but protocol messages may be
written to the output stream; logs go to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, TYPE_CHECKING, Any, TextIO

from fetchtime import SERVER_NAME, SERVER_VERSION
from fetchtime.protocol.codec import decode_request
from fetchtime.protocol.errors import EnvelopeDecodeError
from fetchtime.protocol.models import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)
from fetchtime.tools.errors import ToolExecutionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from fetchtime.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MCP_PROTOCOL_VERSION = "2024-11-05"


def server_info() -> dict[str, Any]:
    return {
        "protocolVersion": MCP_PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
    }


class StdioServer:
    """Reads one request per line from *input* and writes one reply per line.

    Usage::

        server = StdioServer(build_registry())
        server.serve()          # blocks until stdin reaches EOF

    *input* defaults to the raw bytes of stdin so that each line is decoded
    on its own; a line of invalid UTF-8 gets a PARSE_ERROR reply instead of
    ending the loop. Tests pass ``io.StringIO`` or ``io.BytesIO`` for *input*.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        input: IO[str] | IO[bytes] | None = None,
        output: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._input: IO[Any] = input if input is not None else sys.stdin.buffer
        self._output = output if output is not None else sys.stdout
        self._methods: dict[str, Callable[[JsonRpcRequest], JsonRpcResponse]] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_list_tools,
            "tools/call": self._handle_tool_call,
            "ping": self._handle_ping,
        }

    def serve(self) -> None:
        """Announce the server, then answer lines until EOF."""
        logger.info("Starting stdio server")
        self._send({"jsonrpc": JSONRPC_VERSION, "method": "initialized", "params": server_info()})

        for line in self._input:
            if not line.strip():
                continue
            reply = self.handle_line(line)
            if reply is not None:
                self._send(reply.to_wire())

        logger.info("Stdio server stopped")

    def handle_line(self, line: str | bytes) -> JsonRpcResponse | None:
        """Answer one wire line; ``None`` for notifications."""
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning("Undecodable line: %s", exc)
                return JsonRpcResponse.failure(None, JsonRpcError.parse_error(str(exc)))

        try:
            data = json.loads(line)
        except ValueError as exc:
            logger.warning("Unparseable line: %s", exc)
            return JsonRpcResponse.failure(None, JsonRpcError.parse_error(str(exc)))

        if not isinstance(data, dict) or data.get("jsonrpc") != JSONRPC_VERSION:
            return JsonRpcResponse.failure(
                None, INVALID_REQUEST, "Invalid Request: jsonrpc must be 2.0"
            )

        try:
            request = decode_request(data)
        except EnvelopeDecodeError as exc:
            return JsonRpcResponse.failure(None, JsonRpcError.invalid_request(exc.detail))

        if request.id is None:
            logger.debug("Notification received: %s", request.method)
            return None

        logger.debug("Received request: method=%s, id=%s", request.method, request.id)
        handler = self._methods.get(request.method or "")
        if handler is None:
            return JsonRpcResponse.failure(
                request.id, JsonRpcError.method_not_found(request.method or "")
            )
        try:
            return handler(request)
        except Exception as exc:
            logger.exception("Error handling %s", request.method)
            return JsonRpcResponse.failure(request.id, JsonRpcError.internal_error(str(exc)))

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def _handle_initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, server_info())

    def _handle_list_tools(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, {"tools": self._registry.list_descriptors()})

    def _handle_ping(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, {})

    def _handle_tool_call(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = request.params or {}
        name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(name, str) or not isinstance(arguments, dict):
            return JsonRpcResponse.failure(
                request.id,
                JsonRpcError.invalid_params("tools/call needs a string 'name' and object 'arguments'"),
            )

        tool = self._registry.get(name)
        if tool is None:
            return JsonRpcResponse.failure(request.id, INVALID_PARAMS, f"Tool not found: {name}")

        validation_error = tool.validate_parameters(arguments)
        if validation_error is not None:
            return JsonRpcResponse.failure(request.id, validation_error)

        try:
            result = tool.execute(arguments)
        except ToolExecutionError as exc:
            logger.error("Tool execution failed: %s: %s", name, exc)
            return JsonRpcResponse.failure(request.id, exc.error)

        text = json.dumps(result.data, default=str, ensure_ascii=False)
        return JsonRpcResponse.success(request.id, {"content": [{"type": "text", "text": text}]})

    def _send(self, message: dict[str, Any]) -> None:
        self._output.write(json.dumps(message, default=str) + "\n")
        self._output.flush()
