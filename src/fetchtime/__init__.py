"""FetchTime MCP: a JSON-RPC 2.0 tool server for time, calendar and astronomy queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "1.0.0"

SERVER_NAME = "FetchTimeMCP"
SERVER_VERSION = __version__
SERVER_PROTOCOL = "MCP/2.0"

if TYPE_CHECKING:
    from fetchtime.server.bootstrap import build_registry as build_registry
    from fetchtime.server.config import ServerConfig as ServerConfig
    from fetchtime.server.dispatcher import RequestDispatcher as RequestDispatcher
    from fetchtime.tools.registry import ToolRegistry as ToolRegistry

_LAZY_EXPORTS = {
    "RequestDispatcher": "fetchtime.server.dispatcher",
    "ServerConfig": "fetchtime.server.config",
    "ToolRegistry": "fetchtime.tools.registry",
    "build_registry": "fetchtime.server.bootstrap",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'fetchtime' has no attribute {name!r}")
