"""Gregorian to religious and traditional calendar conversion.

Islamic, Hebrew and Indian national (Saka) dates come from ``convertdate``;
Chinese lunisolar dates from ``lunardate``. Buddhist and Japanese era dates
share the Gregorian month and day and only renumber the year.
"""

from __future__ import annotations

import calendar as _gregorian
import logging
from datetime import date
from enum import Enum

from convertdate import hebrew, indian_civil, islamic
from lunardate import LunarDate
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CalendarType(str, Enum):
    ISLAMIC = "islamic"
    HEBREW = "hebrew"
    BUDDHIST = "buddhist"
    HINDU = "hindu"
    CHINESE = "chinese"
    JAPANESE = "japanese"


class CalendarConversionError(Exception):
    """A date falls outside what a calendar backend can convert."""

    def __init__(self, calendar_type: CalendarType, detail: str) -> None:
        self.calendar_type = calendar_type
        self.detail = detail
        super().__init__(f"Cannot convert to {calendar_type.value} calendar: {detail}")


class ReligiousCalendarInfo(BaseModel):
    """One Gregorian date expressed in another calendar."""

    calendar_type: CalendarType
    calendar_name: str
    year: int
    month: int
    day: int
    month_name: str = ""
    era: str = ""
    week_day: str = ""
    is_leap_year: bool = False
    holidays: dict[str, str] = Field(default_factory=dict)
    observances: dict[str, str] = Field(default_factory=dict)

    def formatted(self) -> str:
        """Render as ``"<era> <year>/<month name or number>/<day>"``."""
        prefix = f"{self.era} " if self.era else ""
        return f"{prefix}{self.year}/{self.month_name or self.month}/{self.day}"

    def to_converted_date(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "month_name": self.month_name,
            "era": self.era,
            "week_day": self.week_day,
            "is_leap_year": self.is_leap_year,
            "formatted": self.formatted(),
        }


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

CALENDAR_NAMES = {
    CalendarType.ISLAMIC: "Islamic Calendar (Hijri)",
    CalendarType.HEBREW: "Hebrew Calendar",
    CalendarType.BUDDHIST: "Buddhist Calendar",
    CalendarType.HINDU: "Hindu Calendar (Saka)",
    CalendarType.CHINESE: "Chinese Calendar",
    CalendarType.JAPANESE: "Japanese Calendar",
}

ISLAMIC_MONTHS = (
    "Muharram", "Safar", "Rabi' al-awwal", "Rabi' al-thani", "Jumada al-awwal",
    "Jumada al-thani", "Rajab", "Sha'ban", "Ramadan", "Shawwal", "Dhu al-Qi'dah",
    "Dhu al-Hijjah",
)

# convertdate numbers Hebrew months from Nisan = 1; Adar II = 13 in leap years
HEBREW_MONTHS = {
    1: "Nisan", 2: "Iyar", 3: "Sivan", 4: "Tammuz", 5: "Av", 6: "Elul",
    7: "Tishrei", 8: "Cheshvan", 9: "Kislev", 10: "Tevet", 11: "Shevat",
    12: "Adar", 13: "Adar II",
}
HEBREW_NISAN = 1
HEBREW_TISHREI = 7

SAKA_MONTHS = (
    "Chaitra", "Vaishakha", "Jyeshtha", "Ashadha", "Shravana", "Bhadrapada",
    "Ashvin", "Kartika", "Agrahayana", "Pausha", "Magha", "Phalguna",
)

JAPANESE_MONTHS = (
    "睦月", "如月", "弥生", "卯月", "皐月", "水無月",
    "文月", "葉月", "長月", "神無月", "霜月", "師走",
)

# (first Gregorian day, era name), newest first
JAPANESE_ERAS = (
    (date(2019, 5, 1), "令和"),
    (date(1989, 1, 8), "平成"),
    (date(1926, 12, 25), "昭和"),
    (date(1912, 7, 30), "大正"),
    (date(1868, 9, 8), "明治"),
)

WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
HEBREW_WEEK_DAYS = (
    "Yom Sheni", "Yom Shlishi", "Yom Revi'i", "Yom Chamishi", "Yom Shishi",
    "Shabbat", "Yom Rishon",
)

BUDDHIST_ERA_OFFSET = 543
SAKA_ERA_OFFSET = 78


class CalendarService:
    """Converts Gregorian dates and looks up the major observances on them.

    Usage::

        info = CalendarService().convert(date(2024, 4, 10), CalendarType.ISLAMIC)
        info.month_name   # "Shawwal"
        info.holidays     # {"Eid al-Fitr": "Festival of Breaking the Fast"}
    """

    def convert(self, day: date, calendar_type: CalendarType) -> ReligiousCalendarInfo:
        """Convert *day* to *calendar_type*.

        Raises:
            CalendarConversionError: If the backend cannot represent *day*.
        """
        logger.debug("Converting %s to %s calendar", day, calendar_type.value)
        converter = {
            CalendarType.ISLAMIC: self._islamic,
            CalendarType.HEBREW: self._hebrew,
            CalendarType.BUDDHIST: self._buddhist,
            CalendarType.HINDU: self._hindu,
            CalendarType.CHINESE: self._chinese,
            CalendarType.JAPANESE: self._japanese,
        }[calendar_type]
        try:
            return converter(day)
        except (ValueError, IndexError, KeyError) as exc:
            raise CalendarConversionError(calendar_type, str(exc)) from exc

    # ------------------------------------------------------------------
    # Per-calendar conversion
    # ------------------------------------------------------------------

    def _islamic(self, day: date) -> ReligiousCalendarInfo:
        year, month, dom = map(int, islamic.from_gregorian(day.year, day.month, day.day))
        info = self._info(CalendarType.ISLAMIC, day, year, month, dom)
        info.month_name = ISLAMIC_MONTHS[month - 1]
        info.era = "AH"
        info.is_leap_year = islamic.leap(year)

        if month == 9:
            info.observances["Ramadan"] = "Month of fasting"
        if month == 10 and dom == 1:
            info.holidays["Eid al-Fitr"] = "Festival of Breaking the Fast"
        if month == 12 and dom == 10:
            info.holidays["Eid al-Adha"] = "Festival of Sacrifice"
        if month == 3 and dom == 12:
            info.holidays["Mawlid al-Nabi"] = "Prophet Muhammad's Birthday"
        if month == 1 and dom == 1:
            info.holidays["Islamic New Year"] = "Hijri New Year"
        return info

    def _hebrew(self, day: date) -> ReligiousCalendarInfo:
        year, month, dom = map(int, hebrew.from_gregorian(day.year, day.month, day.day))
        leap = hebrew.leap(year)
        info = self._info(CalendarType.HEBREW, day, year, month, dom)
        info.month_name = "Adar I" if leap and month == 12 else HEBREW_MONTHS[month]
        info.era = "AM"
        info.week_day = HEBREW_WEEK_DAYS[day.weekday()]
        info.is_leap_year = leap

        if day.weekday() == 5:
            info.observances["Shabbat"] = "Sabbath"
        if month == HEBREW_TISHREI and dom in (1, 2):
            info.holidays["Rosh Hashanah"] = "Jewish New Year"
        if month == HEBREW_TISHREI and dom == 10:
            info.holidays["Yom Kippur"] = "Day of Atonement"
        if month == HEBREW_NISAN and 15 <= dom <= 22:
            info.holidays["Pesach"] = "Passover"
        return info

    def _buddhist(self, day: date) -> ReligiousCalendarInfo:
        info = self._info(
            CalendarType.BUDDHIST, day, day.year + BUDDHIST_ERA_OFFSET, day.month, day.day
        )
        info.month_name = str(day.month)
        info.era = "BE"
        info.is_leap_year = _gregorian.isleap(day.year)
        # Vesak falls on the May full moon; the fixed date is an approximation
        if day.month == 5 and day.day == 15:
            info.holidays["Vesak"] = "Buddha's Birthday"
        return info

    def _hindu(self, day: date) -> ReligiousCalendarInfo:
        year, month, dom = map(int, indian_civil.from_gregorian(day.year, day.month, day.day))
        info = self._info(CalendarType.HINDU, day, year, month, dom)
        info.month_name = SAKA_MONTHS[month - 1]
        info.era = "Saka"
        info.is_leap_year = _gregorian.isleap(year + SAKA_ERA_OFFSET)
        if month == 1 and dom == 1:
            info.holidays["Ugadi"] = "Saka New Year"
        return info

    def _chinese(self, day: date) -> ReligiousCalendarInfo:
        lunar = LunarDate.from_solar_date(day.year, day.month, day.day)
        info = self._info(CalendarType.CHINESE, day, lunar.year, lunar.month, lunar.day)
        info.month_name = ("閏" if lunar.is_leap_month else "") + f"{lunar.month}月"
        info.is_leap_year = bool(LunarDate.leap_month_for_year(lunar.year))

        if not lunar.is_leap_month:
            if lunar.month == 1 and lunar.day == 1:
                info.holidays["Spring Festival"] = "Chinese New Year"
            if lunar.month == 8 and lunar.day == 15:
                info.holidays["Mid-Autumn Festival"] = "Moon Festival"
        return info

    def _japanese(self, day: date) -> ReligiousCalendarInfo:
        era, era_year = "Unknown", day.year
        for start, name in JAPANESE_ERAS:
            if day >= start:
                era, era_year = name, day.year - start.year + 1
                break

        info = self._info(CalendarType.JAPANESE, day, era_year, day.month, day.day)
        info.month_name = JAPANESE_MONTHS[day.month - 1]
        info.era = era
        info.is_leap_year = _gregorian.isleap(day.year)
        if day.month == 1 and day.day == 1:
            info.holidays["元日"] = "New Year's Day"
        return info

    @staticmethod
    def _info(
        calendar_type: CalendarType, day: date, year: int, month: int, dom: int
    ) -> ReligiousCalendarInfo:
        return ReligiousCalendarInfo(
            calendar_type=calendar_type,
            calendar_name=CALENDAR_NAMES[calendar_type],
            year=year,
            month=month,
            day=dom,
            week_day=WEEK_DAYS[day.weekday()],
        )
