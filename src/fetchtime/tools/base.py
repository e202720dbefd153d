"""Tool contract: the common interface every FetchTime tool satisfies.

The :class:`RequestDispatcher` routes ``tools/<name>`` requests through this
protocol without knowing which concrete tool it is talking to. Concrete tools
usually subclass :class:`BaseTool` to inherit the default validation and
cache hints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from fetchtime.protocol.models import JsonRpcError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolResponse(BaseModel):
    """Result of one tool execution.

    Only ``data`` reaches the wire; ``metadata`` is diagnostic (cache hits,
    upstream timings) and stays server-side.
    """

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def of(cls, data: dict[str, Any], metadata: dict[str, Any] | None = None) -> ToolResponse:
        return cls(data=data, metadata=metadata or {})

    @classmethod
    def single(cls, key: str, value: Any) -> ToolResponse:
        return cls(data={key: value})


@runtime_checkable
class Tool(Protocol):
    """A named, self-describing unit of computation."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    def parameter_schema(self) -> dict[str, Any]:
        """Return the JSON Schema describing the accepted ``params`` object."""
        ...

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        """Run the tool.

        Raises:
            ToolExecutionError: On any domain failure.
        """
        ...

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        """Return an error to reject *params*, or ``None`` to accept them."""
        ...

    def is_cacheable(self) -> bool: ...

    def cache_ttl_seconds(self) -> int: ...


class BaseTool:
    """Default implementations for the optional parts of :class:`Tool`.

    Subclasses set ``name`` and ``description`` as class attributes and
    implement :meth:`parameter_schema` and :meth:`execute`. Overrides of
    :meth:`validate_parameters` should call ``super()`` first.
    """

    name: str = ""
    description: str = ""
    cacheable: bool = False
    cache_ttl: int = 0

    def parameter_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    def execute(self, params: dict[str, Any]) -> ToolResponse:
        raise NotImplementedError

    def validate_parameters(self, params: dict[str, Any] | None) -> JsonRpcError | None:
        if params is None:
            return JsonRpcError.invalid_params("Parameters cannot be null")
        return None

    def is_cacheable(self) -> bool:
        return self.cacheable

    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
