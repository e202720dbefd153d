"""ToolRegistry: the process-wide name-to-tool map.

The registry is constructed once at startup and passed explicitly to the
dispatcher and every transport adapter. Structural operations serialize on
an internal lock; readers get snapshot copies, so a ``tools/list`` running
alongside a registration never sees a half-written entry.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from fetchtime.tools.errors import ToolRegistrationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fetchtime.tools.base import Tool

logger = logging.getLogger(__name__)

TOOL_VERSION = "1.0.0"

# First match wins, checked in this order.
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("time", ("time", "timezone", "clock")),
    ("calendar", ("calendar", "date")),
    ("astronomy", ("astro", "sun", "moon")),
    ("holiday", ("holiday", "festival")),
)


def infer_category(name: str) -> str:
    """Derive a tool category from substrings of its name."""
    lowered = name.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "general"


class ToolMetadata(BaseModel):
    """Derived, registry-owned facts about a registered tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    category: str
    version: str = TOOL_VERSION
    cacheable: bool = False
    cache_ttl: int = 0


class ToolRegistry:
    """Thread-safe mapping from tool name to tool instance.

    Usage::

        registry = ToolRegistry()
        registry.register(GetCurrentTimeTool())

        tool = registry.get("get_current_time")
        descriptors = registry.list_descriptors()   # for tools/list
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tools: dict[str, Tool] = {}
        self._metadata: dict[str, ToolMetadata] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, tool: Tool | None) -> None:
        """Add *tool*, replacing any tool already registered under its name.

        Raises:
            ToolRegistrationError: If *tool* is ``None`` or its name is blank.
        """
        if tool is None:
            raise ToolRegistrationError("Tool cannot be None")
        name = tool.name
        if not name or not name.strip():
            raise ToolRegistrationError("Tool name cannot be empty")

        meta = ToolMetadata(
            name=name,
            description=tool.description,
            category=infer_category(name),
            cacheable=tool.is_cacheable(),
            cache_ttl=tool.cache_ttl_seconds(),
        )
        with self._lock:
            replaced = name in self._tools
            self._tools[name] = tool
            self._metadata[name] = meta

        if replaced:
            logger.info("Replaced tool: %s", name)
        logger.info("Registered tool: %s - %s", name, tool.description)

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def unregister(self, name: str) -> None:
        """Remove *name*; unknown names are ignored."""
        with self._lock:
            removed = self._tools.pop(name, None)
            self._metadata.pop(name, None)
        if removed is not None:
            logger.info("Unregistered tool: %s", name)

    def clear(self) -> None:
        with self._lock:
            self._tools.clear()
            self._metadata.clear()
        logger.info("Tool registry cleared")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> Tool | None:
        with self._lock:
            return self._tools.get(name)

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def metadata(self, name: str) -> ToolMetadata | None:
        with self._lock:
            return self._metadata.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._tools)

    def tools(self) -> list[Tool]:
        with self._lock:
            return list(self._tools.values())

    def list_descriptors(self) -> list[dict[str, Any]]:
        """Describe every registered tool for ``tools/list``."""
        with self._lock:
            entries = [(tool, self._metadata[name]) for name, tool in self._tools.items()]

        # parameter_schema() is tool code; call it outside the lock
        return [
            {
                "name": meta.name,
                "description": meta.description,
                "parameters": tool.parameter_schema(),
                "cacheable": meta.cacheable,
                "cacheTTL": meta.cache_ttl,
                "category": meta.category,
                "version": meta.version,
            }
            for tool, meta in entries
        ]

    def by_category(self) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        with self._lock:
            for name, meta in self._metadata.items():
                result.setdefault(meta.category, []).append(name)
        return result

    def cacheable_tools(self) -> list[str]:
        with self._lock:
            return [name for name, meta in self._metadata.items() if meta.cacheable]

    def size(self) -> int:
        with self._lock:
            return len(self._tools)

    def is_empty(self) -> bool:
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)
