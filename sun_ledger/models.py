"""
Data model for Sun Ledger.

AstronomicalRecord is one observation from one source for one location and
date. Several sources may report the same location/date; those records are
siblings for comparison, never merged.

All timestamps are timezone-aware and normalized to UTC, whatever encoding
the upstream API used.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class NormalizedDaylight:
    """Provider-independent sunrise/sunset payload produced by an adapter."""
    sunrise: datetime
    sunset: datetime
    solar_noon: datetime
    day_length: int  # seconds

    @property
    def measured_day_length(self) -> float:
        """Seconds between sunrise and sunset."""
        return (self.sunset - self.sunrise).total_seconds()


@dataclass(frozen=True)
class SourceResult:
    """One successful adapter outcome, tagged with the provider that produced it."""
    data: NormalizedDaylight
    source: str


@dataclass
class AstronomicalRecord:
    location: str
    latitude: float
    longitude: float
    date: date
    sunrise: datetime
    sunset: datetime
    solar_noon: datetime
    day_length: int
    source: str
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def from_result(
        cls,
        result: SourceResult,
        location: str,
        coords: Coordinates,
        on_date: date,
    ) -> "AstronomicalRecord":
        """Build an unsaved record from an adapter result."""
        return cls(
            location=location,
            latitude=coords.latitude,
            longitude=coords.longitude,
            date=on_date,
            sunrise=result.data.sunrise,
            sunset=result.data.sunset,
            solar_noon=result.data.solar_noon,
            day_length=result.data.day_length,
            source=result.source,
        )

    @property
    def day_length_minutes(self) -> float:
        return self.day_length / 60

    def to_row(self) -> Dict[str, Any]:
        """Persistence shape (created_at is assigned by the store)."""
        return {
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "date": self.date.isoformat(),
            "sunrise": to_utc_iso(self.sunrise),
            "sunset": to_utc_iso(self.sunset),
            "day_length": self.day_length,
            "solar_noon": to_utc_iso(self.solar_noon),
            "source": self.source,
        }


@dataclass(frozen=True)
class RecordFilter:
    """
    Location-substring and inclusive date-range filter.

    The same filter drives the store query and every statistic, so the table
    view and the derived numbers always describe the same subset.
    """
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def matches(self, record: AstronomicalRecord) -> bool:
        if self.location and fold_case(self.location) not in fold_case(record.location):
            return False
        if self.start_date is not None and record.date < self.start_date:
            return False
        if self.end_date is not None and record.date > self.end_date:
            return False
        return True

    def apply(self, records: Iterable[AstronomicalRecord]) -> List[AstronomicalRecord]:
        return [r for r in records if self.matches(r)]


def fold_case(text: Optional[str]) -> Optional[str]:
    """Unicode-aware lowercasing shared by the store query and RecordFilter."""
    return text.lower() if text is not None else None


def to_utc_iso(value: datetime) -> str:
    """Serialize an aware datetime as a UTC ISO-8601 string."""
    return value.astimezone(timezone.utc).isoformat()


def parse_utc(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z'. Naive values are taken to be UTC already.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
