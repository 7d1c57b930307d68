"""
sunrisesunset.io Provider for Sun Ledger

This API reports local wall-clock times and leaves the offset to the caller:
- sunrise/sunset/solar_noon as "hh:mm:ss AM/PM" strings
- the report date as "YYYY-MM-DD"
- utc_offset as signed minutes east of UTC
- day_length as "HH:MM:SS"

Normalization: combine each clock time with the report date, then subtract
utc_offset to land on the absolute instant (06:00 AM local at -240 is 10:00Z).
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict

from sun_ledger.models import NormalizedDaylight
from sun_ledger.providers.base import SourceAdapter

logger = logging.getLogger(__name__)


def parse_clock_12h(value: str) -> time:
    """
    Parse "hh:mm:ss AM/PM" into a 24-hour time.

    12:xx AM is midnight hour 0; 12:xx PM stays 12.
    """
    clock, meridiem = value.strip().split(" ")
    hours, minutes, seconds = (int(part) for part in clock.split(":"))
    meridiem = meridiem.upper()

    if not 1 <= hours <= 12 or meridiem not in ("AM", "PM"):
        raise ValueError(f"Invalid 12-hour time: {value!r}")

    if meridiem == "PM" and hours != 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0

    return time(hours, minutes, seconds)


def parse_duration_seconds(value: str) -> int:
    """Convert "HH:MM:SS" to total seconds."""
    hours, minutes, seconds = (int(part) for part in value.strip().split(":"))
    return hours * 3600 + minutes * 60 + seconds


def local_to_utc(report_date: date, clock: time, utc_offset_minutes: int) -> datetime:
    """Shift a local wall-clock time on report_date to an aware UTC instant."""
    local = datetime.combine(report_date, clock)
    return (local - timedelta(minutes=utc_offset_minutes)).replace(tzinfo=timezone.utc)


class SunriseSunsetIoAdapter(SourceAdapter):
    """Provider B: api.sunrisesunset.io."""

    source = "sunrisesunset.io"
    BASE_URL = "https://api.sunrisesunset.io/json"

    def build_params(self, latitude: float, longitude: float, on_date: date) -> Dict[str, Any]:
        return {
            "lat": latitude,
            "lng": longitude,
            "date": on_date.isoformat(),
        }

    def parse(self, payload: Dict[str, Any], on_date: date) -> NormalizedDaylight:
        results = payload["results"]

        # Prefer the date the API says it answered for
        report_date = date.fromisoformat(results.get("date") or on_date.isoformat())
        offset = int(results["utc_offset"])

        logger.debug(
            f"[SunriseSunsetIoAdapter] {report_date} local sunrise={results['sunrise']} "
            f"sunset={results['sunset']} utc_offset={offset}min"
        )

        return NormalizedDaylight(
            sunrise=local_to_utc(report_date, parse_clock_12h(results["sunrise"]), offset),
            sunset=local_to_utc(report_date, parse_clock_12h(results["sunset"]), offset),
            solar_noon=local_to_utc(report_date, parse_clock_12h(results["solar_noon"]), offset),
            day_length=parse_duration_seconds(results["day_length"]),
        )
