"""Tests for default registry construction."""

from __future__ import annotations

from datetime import datetime, timezone

from fetchtime.server.bootstrap import build_registry, default_tools


class TestBootstrap:
    def test_default_tool_set(self) -> None:
        names = [tool.name for tool in default_tools()]
        assert names == [
            "get_current_time",
            "convert_timezone",
            "get_religious_calendar",
            "get_astronomical_info",
        ]

    def test_registries_are_independent(self) -> None:
        first, second = build_registry(), build_registry()
        first.unregister("get_current_time")
        assert "get_current_time" in second
        assert first.size() == 3

    def test_clock_is_shared_by_time_tools(self) -> None:
        moment = datetime(2030, 6, 1, tzinfo=timezone.utc)
        registry = build_registry(lambda: moment)
        data = registry.get("get_current_time").execute({}).data
        assert data["timestamp"] == "2030-06-01T00:00:00+00:00"

    def test_categories(self) -> None:
        assert build_registry().by_category() == {
            "time": ["get_current_time", "convert_timezone"],
            "calendar": ["get_religious_calendar"],
            "astronomy": ["get_astronomical_info"],
        }
