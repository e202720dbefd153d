"""Sun and moon calculations for a location and date, backed by ``astral``.

Times are reported in a caller-chosen zone, defaulting to the location's
mean solar offset (longitude / 15, rounded to the hour) so that sunrise and
sunset fall on the requested local date. Events that do not happen on that
date (polar day or night, a moon that never rises) are reported as
:data:`NOT_AVAILABLE`.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum

from astral import Observer, moon, sun
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

SYNODIC_MONTH = 29.530588
# astral.moon.phase() runs 0 .. 27.99 over one lunation
ASTRAL_PHASE_SCALE = 28.0
REFERENCE_NEW_MOON = date(2000, 1, 6)

TWILIGHT_DEPRESSIONS = {
    "civil": 6.0,
    "nautical": 12.0,
    "astronomical": 18.0,
}


class MoonPhaseType(str, Enum):
    NEW_MOON = "New Moon"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL_MOON = "Full Moon"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"
    UNKNOWN = "Unknown"


class SunInfo(BaseModel):
    sunrise: str = NOT_AVAILABLE
    sunset: str = NOT_AVAILABLE
    solar_noon: str = NOT_AVAILABLE
    day_length: str = NOT_AVAILABLE
    twilight: dict[str, str] = Field(default_factory=dict)


class MoonInfo(BaseModel):
    moonrise: str = NOT_AVAILABLE
    moonset: str = NOT_AVAILABLE
    phase: MoonPhaseType = MoonPhaseType.UNKNOWN
    illumination: float = 0.0
    age: float = 0.0


class SolarPosition(BaseModel):
    azimuth: float = 0.0
    altitude: float = 0.0


class AstronomicalInfo(BaseModel):
    sun: SunInfo
    moon: MoonInfo
    solar_position: SolarPosition


def mean_solar_zone(longitude: float) -> timezone:
    return timezone(timedelta(hours=round(longitude / 15)))


def classify_phase(illumination: float, waxing: bool) -> MoonPhaseType:
    """Map an illuminated fraction (0..1) to one of the eight named phases."""
    if illumination < 0.02:
        return MoonPhaseType.NEW_MOON
    if illumination < 0.35:
        return MoonPhaseType.WAXING_CRESCENT if waxing else MoonPhaseType.WANING_CRESCENT
    if illumination < 0.65:
        return MoonPhaseType.FIRST_QUARTER if waxing else MoonPhaseType.LAST_QUARTER
    if illumination < 0.98:
        return MoonPhaseType.WAXING_GIBBOUS if waxing else MoonPhaseType.WANING_GIBBOUS
    return MoonPhaseType.FULL_MOON


def moon_age(day: date) -> float:
    """Days since the last new moon, from a mean lunation, to one decimal."""
    elapsed = (day - REFERENCE_NEW_MOON).days
    return round(elapsed % SYNODIC_MONTH, 1)


def format_day_length(delta: timedelta) -> str:
    total = int(delta.total_seconds())
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _iso(moment: datetime | None) -> str:
    if moment is None:
        return NOT_AVAILABLE
    return moment.isoformat(timespec="seconds")


class AstronomyService:
    """Computes sun, moon and solar-position data for one observer and day.

    Usage::

        info = AstronomyService().calculate(35.68, 139.69, date(2024, 6, 21))
        info.sun.sunrise          # "2024-06-21T04:25:39+09:00"
        info.moon.phase           # MoonPhaseType.FULL_MOON
    """

    def calculate(
        self,
        latitude: float,
        longitude: float,
        day: date,
        *,
        tz: tzinfo | None = None,
        include_twilight: bool = False,
    ) -> AstronomicalInfo:
        logger.debug("Calculating astronomical info for lat=%s lon=%s date=%s", latitude, longitude, day)
        observer = Observer(latitude=latitude, longitude=longitude)
        zone = tz or mean_solar_zone(longitude)
        return AstronomicalInfo(
            sun=self.sun_info(observer, day, zone, include_twilight=include_twilight),
            moon=self.moon_info(observer, day, zone),
            solar_position=self.solar_position(observer, day),
        )

    def sun_info(
        self, observer: Observer, day: date, zone: tzinfo, *, include_twilight: bool = False
    ) -> SunInfo:
        info = SunInfo()
        try:
            info.solar_noon = _iso(sun.noon(observer, day, tzinfo=zone))
        except ValueError:
            logger.debug("Solar noon unavailable for %s", day)

        try:
            rise = sun.sunrise(observer, day, tzinfo=zone)
            set_ = sun.sunset(observer, day, tzinfo=zone)
        except ValueError:
            # Sun never rises or never sets on this date
            logger.debug("No sunrise/sunset at lat=%s on %s", observer.latitude, day)
        else:
            info.sunrise = _iso(rise)
            info.sunset = _iso(set_)
            length = set_ - rise
            if length < timedelta(0):
                length += timedelta(days=1)
            info.day_length = format_day_length(length)

        if include_twilight:
            info.twilight = self.twilight(observer, day, zone)
        return info

    def twilight(self, observer: Observer, day: date, zone: tzinfo) -> dict[str, str]:
        result: dict[str, str] = {}
        for kind, depression in TWILIGHT_DEPRESSIONS.items():
            try:
                result[f"{kind}_dawn"] = _iso(sun.dawn(observer, day, depression=depression, tzinfo=zone))
            except ValueError:
                result[f"{kind}_dawn"] = NOT_AVAILABLE
            try:
                result[f"{kind}_dusk"] = _iso(sun.dusk(observer, day, depression=depression, tzinfo=zone))
            except ValueError:
                result[f"{kind}_dusk"] = NOT_AVAILABLE
        return result

    def moon_info(self, observer: Observer, day: date, zone: tzinfo) -> MoonInfo:
        phase = moon.phase(day) / ASTRAL_PHASE_SCALE
        illumination = (1 - math.cos(2 * math.pi * phase)) / 2
        info = MoonInfo(
            phase=classify_phase(illumination, waxing=phase < 0.5),
            illumination=round(illumination * 100, 1),
            age=moon_age(day),
        )
        try:
            info.moonrise = _iso(moon.moonrise(observer, day, tzinfo=zone))
        except ValueError:
            logger.debug("Moon does not rise on %s", day)
        try:
            info.moonset = _iso(moon.moonset(observer, day, tzinfo=zone))
        except ValueError:
            logger.debug("Moon does not set on %s", day)
        return info

    def solar_position(self, observer: Observer, day: date) -> SolarPosition:
        """Sun azimuth and altitude at 12:00 UTC on *day*."""
        noon_utc = datetime.combine(day, time(12, 0), tzinfo=timezone.utc)
        return SolarPosition(
            azimuth=round(sun.azimuth(observer, noon_utc), 1),
            altitude=round(sun.elevation(observer, noon_utc), 1),
        )
