"""Explicit construction of the process-wide tool registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fetchtime.services.astronomy import AstronomyService
from fetchtime.services.calendar import CalendarService
from fetchtime.tools.builtin import (
    ConvertTimezoneTool,
    GetAstronomicalInfoTool,
    GetCurrentTimeTool,
    GetReligiousCalendarTool,
)
from fetchtime.tools.builtin.timezones import utc_now
from fetchtime.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from fetchtime.tools.base import Tool


def default_tools(clock: Callable[[], datetime] = utc_now) -> list[Tool]:
    """Instantiate the built-in tools around shared services and *clock*."""
    return [
        GetCurrentTimeTool(clock=clock),
        ConvertTimezoneTool(clock=clock),
        GetReligiousCalendarTool(CalendarService()),
        GetAstronomicalInfoTool(AstronomyService()),
    ]


def build_registry(clock: Callable[[], datetime] = utc_now) -> ToolRegistry:
    """Return a new registry holding the default tool set."""
    registry = ToolRegistry()
    registry.register_all(default_tools(clock))
    return registry
