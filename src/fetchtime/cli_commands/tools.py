"""``fetchtime tools``: list and call tools locally or on a running server."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import click

from fetchtime.cli_commands._output import console, print_response, print_tools_table

if TYPE_CHECKING:
    from fetchtime.protocol.models import JsonRpcResponse


@click.group()
def tools() -> None:
    """List and call tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print descriptors as JSON.")
def list_tools(as_json: bool) -> None:
    """List the built-in tools."""
    from fetchtime.server.bootstrap import build_registry

    descriptors = build_registry().list_descriptors()
    if as_json:
        console.print_json(json.dumps(descriptors, default=str))
        return
    print_tools_table(descriptors)


@tools.command("call")
@click.argument("name")
@click.option("--params", "-p", "params_json", default="{}", help="Tool parameters as a JSON object.")
@click.option("--url", default=None, help="Call a running server instead of dispatching locally.")
def call(name: str, params_json: str, url: str | None) -> None:
    """Call tool NAME and print its result."""
    try:
        params = json.loads(params_json)
    except ValueError as exc:
        console.print(f"[red]Invalid --params JSON:[/red] {exc}")
        sys.exit(2)
    if not isinstance(params, dict):
        console.print("[red]--params must be a JSON object[/red]")
        sys.exit(2)

    if url:
        response = _call_remote(url, name, params)
    else:
        response = _call_local(name, params)

    print_response(response)
    if response.error is not None:
        sys.exit(1)


def _call_local(name: str, params: dict[str, Any]) -> JsonRpcResponse:
    from fetchtime.protocol.models import TOOL_METHOD_PREFIX, JsonRpcRequest
    from fetchtime.server.bootstrap import build_registry
    from fetchtime.server.dispatcher import RequestDispatcher

    request = JsonRpcRequest.create(uuid4().hex[:12], f"{TOOL_METHOD_PREFIX}{name}", params)
    return RequestDispatcher(build_registry()).process(request)


def _call_remote(url: str, name: str, params: dict[str, Any]) -> JsonRpcResponse:
    from fetchtime.client import FetchTimeClient
    from fetchtime.protocol.errors import ConnectionError

    async def _call() -> JsonRpcResponse:
        async with FetchTimeClient(url) as client:
            return await client.call_tool(name, params)

    try:
        return asyncio.run(_call())
    except ConnectionError as exc:
        console.print(f"[red]Connection error:[/red] {exc}")
        sys.exit(1)
