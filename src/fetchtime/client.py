"""FetchTimeClient: calls tools on a running FetchTime HTTP server."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import httpx

from fetchtime.protocol.errors import ConnectionError
from fetchtime.protocol.models import TOOL_METHOD_PREFIX, JsonRpcRequest, JsonRpcResponse

DEFAULT_URL = "http://localhost:3000"


class FetchTimeClient:
    """Posts request envelopes to ``/mcp`` and decodes the response envelope.

    JSON-RPC errors come back as an ordinary :class:`JsonRpcResponse` with
    ``error`` set; only transport failures raise.

    Usage::

        async with FetchTimeClient("http://localhost:3000") as client:
            tools = await client.list_tools()
            resp = await client.call_tool("get_current_time", {"timezone": "Asia/Tokyo"})
    """

    def __init__(self, base_url: str = DEFAULT_URL, *, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> FetchTimeClient:
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "FetchTimeClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def request(self, method: str, params: dict[str, Any] | None = None) -> JsonRpcResponse:
        """Send one envelope with a fresh id and return the decoded reply."""
        envelope = JsonRpcRequest.create(uuid4().hex[:12], method, params)
        try:
            response = await self._http().post(
                "/mcp", json=envelope.model_dump(exclude_none=True)
            )
            response.raise_for_status()
            return JsonRpcResponse.from_wire(response.json())
        except httpx.HTTPError as exc:
            raise ConnectionError(str(exc)) from exc
        except ValueError as exc:
            raise ConnectionError(f"Invalid response from {self._base_url}: {exc}") from exc

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> JsonRpcResponse:
        return await self.request(f"{TOOL_METHOD_PREFIX}{name}", arguments or {})

    async def list_tools(self) -> list[dict[str, Any]]:
        resp = await self.request("tools/list")
        if resp.error is not None:
            raise ConnectionError(resp.error.message)
        return list((resp.result or {}).get("tools", []))

    async def ping(self) -> JsonRpcResponse:
        return await self.request("ping")
