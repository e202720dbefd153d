"""Tests for CalendarService conversions."""

from __future__ import annotations

import warnings
from datetime import date
from unittest.mock import patch

import pytest

from fetchtime.services.calendar import (
    CalendarConversionError,
    CalendarService,
    CalendarType,
    ReligiousCalendarInfo,
)


@pytest.fixture
def service() -> CalendarService:
    return CalendarService()


class TestIslamic:
    def test_mid_ramadan(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 3, 20), CalendarType.ISLAMIC)
        assert info.year == 1445
        assert info.month == 9
        assert info.month_name == "Ramadan"
        assert info.era == "AH"
        assert "Ramadan" in info.observances
        assert info.calendar_name == "Islamic Calendar (Hijri)"


class TestHebrew:
    def test_rosh_hashanah(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 10, 3), CalendarType.HEBREW)
        assert (info.year, info.month, info.day) == (5785, 7, 1)
        assert info.month_name == "Tishrei"
        assert info.era == "AM"
        assert info.week_day == "Yom Chamishi"
        assert "Rosh Hashanah" in info.holidays

    def test_leap_year_names_first_adar(self, service: CalendarService) -> None:
        # 5784 is a leap year; 2024-02-20 falls in Adar I
        info = service.convert(date(2024, 2, 20), CalendarType.HEBREW)
        assert info.is_leap_year is True
        assert info.month_name == "Adar I"

    def test_shabbat(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 1, 13), CalendarType.HEBREW)
        assert info.week_day == "Shabbat"
        assert "Shabbat" in info.observances


class TestBuddhist:
    def test_vesak(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 5, 15), CalendarType.BUDDHIST)
        assert info.year == 2567
        assert (info.month, info.day) == (5, 15)
        assert info.era == "BE"
        assert "Vesak" in info.holidays
        assert info.formatted() == "BE 2567/5/15"


class TestHindu:
    def test_saka_new_year(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 3, 21), CalendarType.HINDU)
        assert (info.year, info.month, info.day) == (1946, 1, 1)
        assert info.month_name == "Chaitra"
        assert info.era == "Saka"
        assert info.is_leap_year is True
        assert "Ugadi" in info.holidays


class TestChinese:
    def test_spring_festival(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 2, 10), CalendarType.CHINESE)
        assert (info.year, info.month, info.day) == (2024, 1, 1)
        assert info.month_name == "1月"
        assert "Spring Festival" in info.holidays

    def test_mid_autumn(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 9, 17), CalendarType.CHINESE)
        assert (info.month, info.day) == (8, 15)
        assert "Mid-Autumn Festival" in info.holidays

    def test_leap_year_flag(self, service: CalendarService) -> None:
        # 2023 has an intercalary second month
        assert service.convert(date(2023, 6, 1), CalendarType.CHINESE).is_leap_year is True
        assert service.convert(date(2024, 6, 1), CalendarType.CHINESE).is_leap_year is False

    def test_intercalary_month_without_deprecation_warnings(self, service: CalendarService) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            info = service.convert(date(2023, 4, 1), CalendarType.CHINESE)
        assert info.month_name == "閏2月"
        assert info.holidays == {}


class TestJapanese:
    def test_reiwa_new_year(self, service: CalendarService) -> None:
        info = service.convert(date(2024, 1, 1), CalendarType.JAPANESE)
        assert info.era == "令和"
        assert info.year == 6
        assert info.month_name == "睦月"
        assert "元日" in info.holidays

    def test_heisei_before_may_2019(self, service: CalendarService) -> None:
        info = service.convert(date(2019, 4, 30), CalendarType.JAPANESE)
        assert (info.era, info.year) == ("平成", 31)

    def test_before_meiji_is_unknown(self, service: CalendarService) -> None:
        info = service.convert(date(1850, 6, 1), CalendarType.JAPANESE)
        assert info.era == "Unknown"
        assert info.year == 1850


class TestErrors:
    def test_backend_failure_becomes_conversion_error(self, service: CalendarService) -> None:
        with patch(
            "fetchtime.services.calendar.LunarDate.from_solar_date",
            side_effect=ValueError("year out of range"),
        ):
            with pytest.raises(CalendarConversionError, match="chinese") as exc_info:
                service.convert(date(2500, 1, 1), CalendarType.CHINESE)
        assert exc_info.value.detail == "year out of range"


class TestReligiousCalendarInfo:
    def test_converted_date_shape(self) -> None:
        info = ReligiousCalendarInfo(
            calendar_type=CalendarType.ISLAMIC,
            calendar_name="Islamic Calendar (Hijri)",
            year=1445,
            month=10,
            day=1,
            month_name="Shawwal",
            era="AH",
            week_day="Wednesday",
        )
        assert info.to_converted_date() == {
            "year": 1445,
            "month": 10,
            "day": 1,
            "month_name": "Shawwal",
            "era": "AH",
            "week_day": "Wednesday",
            "is_leap_year": False,
            "formatted": "AH 1445/Shawwal/1",
        }
