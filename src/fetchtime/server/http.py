"""HTTP and WebSocket transports as a FastAPI application.

Routes:

* ``POST /mcp`` and ``POST /mcp/{path}``: one envelope in, one envelope out.
  JSON-RPC errors still return HTTP 200; only a wrong Content-Type (400) and
  an unexpected server fault (500) use HTTP status codes, with a bare
  ``{"error": ...}`` body.
* ``WS /mcp/ws``: mounted when ``enable_websocket`` is set. The server
  greets each connection, then answers every text or binary frame with one
  text frame.
* ``GET /health``: liveness and registered tool count.

The dispatcher is synchronous; it runs in Starlette's threadpool so a slow
tool never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from fetchtime import SERVER_NAME, SERVER_PROTOCOL, SERVER_VERSION
from fetchtime.protocol.codec import decode_request, encode_response
from fetchtime.protocol.errors import EnvelopeDecodeError
from fetchtime.protocol.models import JsonRpcError, JsonRpcResponse
from fetchtime.server.dispatcher import RequestDispatcher

if TYPE_CHECKING:
    from fetchtime.server.config import ServerConfig
    from fetchtime.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# RFC 6455 close codes
WS_CLOSE_GOING_AWAY = 1001
WS_CLOSE_TRY_AGAIN_LATER = 1013


def _is_json(content_type: str | None) -> bool:
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == JSON_MEDIA_TYPE


def _envelope(response: JsonRpcResponse) -> Response:
    return Response(content=encode_response(response), media_type=JSON_MEDIA_TYPE)


def connection_greeting() -> JsonRpcResponse:
    return JsonRpcResponse.success(
        "connection",
        {
            "status": "connected",
            "protocol": SERVER_PROTOCOL,
            "timestamp": int(time.time() * 1000),
        },
    )


def create_app(
    config: ServerConfig,
    registry: ToolRegistry,
    *,
    dispatcher: RequestDispatcher | None = None,
) -> FastAPI:
    """Build the FastAPI application around an explicitly constructed registry.

    Usage::

        app = create_app(load_config(), build_registry())
        uvicorn.run(app, host="localhost", port=3000)
    """
    dispatcher = dispatcher or RequestDispatcher(registry, config=config)

    app = FastAPI(title=SERVER_NAME, version=SERVER_VERSION)
    app.state.config = config
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.ws_connections = 0

    async def handle_post(request: Request) -> Response:
        if not _is_json(request.headers.get("content-type")):
            return JSONResponse(
                status_code=400, content={"error": "Content-Type must be application/json"}
            )

        try:
            body = await request.body()
            try:
                envelope = decode_request(body)
            except EnvelopeDecodeError as exc:
                logger.warning("Rejected HTTP envelope: %s", exc.detail)
                return _envelope(JsonRpcResponse.failure(None, JsonRpcError.parse_error(exc.detail)))

            response = await run_in_threadpool(dispatcher.process, envelope)
            return _envelope(response)
        except Exception:
            logger.exception("Error handling HTTP request")
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.add_api_route("/mcp", handle_post, methods=["POST"])
    app.add_api_route("/mcp/{path:path}", handle_post, methods=["POST"])

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "tools": registry.size()}

    if config.enable_websocket:
        app.add_api_websocket_route("/mcp/ws", _websocket_handler(app, dispatcher, config))

    logger.info(
        "%s configured on %s:%s (websocket=%s)",
        SERVER_NAME,
        config.host,
        config.port,
        config.enable_websocket,
    )
    return app


def _websocket_handler(app: FastAPI, dispatcher: RequestDispatcher, config: ServerConfig) -> Any:
    async def handle_websocket(websocket: WebSocket) -> None:
        if app.state.ws_connections >= config.max_connections:
            logger.warning("Refusing WebSocket: %d connections open", app.state.ws_connections)
            await websocket.close(code=WS_CLOSE_TRY_AGAIN_LATER)
            return

        await websocket.accept()
        app.state.ws_connections += 1
        logger.info("WebSocket connected from: %s", websocket.client)
        try:
            await websocket.send_text(encode_response(connection_greeting()))
            while True:
                try:
                    message = await asyncio.wait_for(
                        websocket.receive(), timeout=config.idle_timeout_seconds
                    )
                except asyncio.TimeoutError:
                    logger.info("Closing idle WebSocket: %s", websocket.client)
                    await websocket.close(code=WS_CLOSE_GOING_AWAY)
                    return
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                # binary frames carry the same JSON, UTF-8 encoded
                payload = message.get("text")
                if payload is None:
                    payload = message.get("bytes") or b""
                response = await _answer_frame(dispatcher, payload, config.max_message_size)
                await websocket.send_text(encode_response(response))
        except WebSocketDisconnect as exc:
            logger.info("WebSocket closed: %s", exc.code)
        finally:
            app.state.ws_connections -= 1

    return handle_websocket


async def _answer_frame(
    dispatcher: RequestDispatcher, message: str | bytes, max_size: int
) -> JsonRpcResponse:
    size = len(message) if isinstance(message, bytes) else len(message.encode("utf-8"))
    if size > max_size:
        return JsonRpcResponse.failure(
            None, JsonRpcError.parse_error(f"Message exceeds {max_size} bytes")
        )
    try:
        envelope = decode_request(message)
    except EnvelopeDecodeError as exc:
        logger.warning("Failed to parse WebSocket frame: %s", exc.detail)
        return JsonRpcResponse.failure(None, JsonRpcError.parse_error(exc.detail))
    return await run_in_threadpool(dispatcher.process, envelope)
