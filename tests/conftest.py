"""Shared fixtures for the Sun Ledger test suite."""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from sun_ledger.models import AstronomicalRecord


@pytest.fixture
def make_record():
    """Factory for records; sunrise/sunset are derived from day_length."""

    def _make(location="Oslo", on_date="2024-06-01", day_length=36000,
              latitude=59.91, longitude=10.75, source="sunrise-sunset.org"):
        if isinstance(on_date, str):
            on_date = date.fromisoformat(on_date)
        sunrise = datetime(on_date.year, on_date.month, on_date.day, 4, 0, tzinfo=timezone.utc)
        sunset = sunrise + timedelta(seconds=day_length)
        return AstronomicalRecord(
            location=location,
            latitude=latitude,
            longitude=longitude,
            date=on_date,
            sunrise=sunrise,
            sunset=sunset,
            solar_noon=sunrise + timedelta(seconds=day_length // 2),
            day_length=day_length,
            source=source,
        )

    return _make
