"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from fetchtime.protocol.models import JsonRpcResponse  # noqa: TC001

console = Console()


def print_tools_table(descriptors: list[dict[str, Any]]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Cache TTL", justify="right")
    table.add_column("Description")

    for tool in descriptors:
        ttl = f"{tool.get('cacheTTL', 0)}s" if tool.get("cacheable") else "-"
        table.add_row(
            tool.get("name", "?"),
            tool.get("category", ""),
            ttl,
            _truncate(tool.get("description", "")),
        )

    console.print(table)


def print_response(response: JsonRpcResponse) -> None:
    """Print a result as JSON, or the error in red."""
    if response.error is not None:
        console.print(f"[red]Error {response.error.code}:[/red] {response.error.message}")
        if response.error.data is not None:
            console.print_json(json.dumps(response.error.data, default=str))
        return
    console.print_json(json.dumps(response.result, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
