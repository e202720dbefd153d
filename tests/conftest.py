"""Shared fixtures: a frozen clock and a registry built around it."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import pytest

from fetchtime.server.bootstrap import build_registry
from fetchtime.server.dispatcher import RequestDispatcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from fetchtime.tools.registry import ToolRegistry

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def registry(fixed_clock: Callable[[], datetime]) -> ToolRegistry:
    return build_registry(fixed_clock)


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> RequestDispatcher:
    return RequestDispatcher(registry, clock=lambda: 1705320000000)
