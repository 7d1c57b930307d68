"""
Acquisition Coordinator for Sun Ledger

Fans out one request per provider for the same coordinates/date, waits for
every request to settle, and keeps whatever succeeded:

- Partial failure is success: one provider answering is enough for a date.
- Total failure (no provider answered) is a warning, never an exception, so
  a multi-date collection keeps going.
- Dates in a range run one after another: a date's fan-out and its store
  writes finish before the next date starts. Peak outbound concurrency is
  therefore the number of providers, and progress is reported per date.
- No retries inside an acquisition.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

from sun_ledger import config
from sun_ledger.errors import GeocodingError, categorize_error
from sun_ledger.geocoding import Geocoder
from sun_ledger.models import AstronomicalRecord, Coordinates, SourceResult
from sun_ledger.providers import SourceAdapter, default_adapters
from sun_ledger.store import AstronomicalStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class AcquisitionReport:
    """Outcome of one collect() call across its date range."""
    location: str
    latitude: float
    longitude: float
    requested_dates: int
    dates_succeeded: int = 0
    records_saved: int = 0
    records_failed: int = 0
    failed_dates: List[date] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def succeeded(self) -> bool:
        return self.dates_succeeded > 0


def date_range(start_date: date, end_date: date) -> List[date]:
    """Inclusive list of calendar days from start_date to end_date."""
    if start_date > end_date:
        raise ValueError(f"start_date {start_date} is after end_date {end_date}")
    days = (end_date - start_date).days
    return [start_date + timedelta(days=offset) for offset in range(days + 1)]


class AcquisitionCoordinator:
    """
    Runs the multi-source acquisition pipeline.

    Geocoder -> concurrent provider fan-out -> per-record store appends.
    """

    def __init__(
        self,
        adapters: Optional[Sequence[SourceAdapter]] = None,
        store: Optional[AstronomicalStore] = None,
        geocoder: Optional[Geocoder] = None,
        max_dates: Optional[int] = None,
    ):
        self.adapters = list(adapters) if adapters is not None else default_adapters()
        self.store = store
        self.geocoder = geocoder or Geocoder()
        self.max_dates = max_dates if max_dates is not None else config.MAX_DATES_PER_REQUEST

        sources = ", ".join(a.source for a in self.adapters)
        logger.info(f"[AcquisitionCoordinator] Initialized with {len(self.adapters)} providers: {sources}")

    async def acquire(self, latitude: float, longitude: float, on_date: date) -> List[SourceResult]:
        """
        Query every provider concurrently for one date.

        Returns:
            Successful results tagged with their source. Empty when every
            provider failed.
        """
        outcomes = await asyncio.gather(
            *(adapter.fetch(latitude, longitude, on_date) for adapter in self.adapters),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                error_type, error_msg = categorize_error(outcome)
                logger.warning(f"[AcquisitionCoordinator] {adapter.source} failed for {on_date}: "
                               f"{error_type.value} - {error_msg}")
                continue
            results.append(SourceResult(data=outcome, source=adapter.source))

        if results:
            logger.info(f"[AcquisitionCoordinator] {on_date}: {len(results)}/{len(self.adapters)} providers answered")
        else:
            logger.warning(f"[AcquisitionCoordinator] {on_date}: all {len(self.adapters)} providers failed")

        return results

    async def collect(
        self,
        place: str,
        start_date: date,
        end_date: Optional[date] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AcquisitionReport:
        """
        Geocode a place and collect every date in [start_date, end_date].

        Args:
            place: Free-text place name, stored as the record location
            start_date: First date to collect
            end_date: Last date (inclusive); defaults to start_date
            on_progress: Called with (completed, total) after each date settles

        Returns:
            AcquisitionReport summarizing the run

        Raises:
            GeocodingError: place could not be resolved (no provider is called)
            ValueError: start_date is after end_date
        """
        days = date_range(start_date, end_date or start_date)

        coords = await self.geocoder.geocode(place)
        if coords is None:
            logger.error(f"[AcquisitionCoordinator] Geocoding failed for '{place}'")
            raise GeocodingError(place)

        report = AcquisitionReport(
            location=place,
            latitude=coords.latitude,
            longitude=coords.longitude,
            requested_dates=len(days),
        )

        if len(days) > self.max_dates:
            message = (f"Date range of {len(days)} days exceeds the limit of {self.max_dates}; "
                       f"only the first {self.max_dates} will be collected")
            logger.warning(f"[AcquisitionCoordinator] {message}")
            report.warnings.append(message)
            report.truncated = True
            days = days[:self.max_dates]
            report.requested_dates = len(days)

        total = len(days)
        logger.info(f"[AcquisitionCoordinator] Collecting {total} date(s) for '{place}' "
                    f"({coords.latitude:.4f}, {coords.longitude:.4f})")

        for completed, on_date in enumerate(days, 1):
            results = await self.acquire(coords.latitude, coords.longitude, on_date)

            if results:
                report.dates_succeeded += 1
                self._save(results, place, coords, on_date, report)
            else:
                report.failed_dates.append(on_date)
                report.warnings.append(f"No provider returned data for {on_date.isoformat()}")

            if on_progress is not None:
                on_progress(completed, total)

        logger.info(f"[AcquisitionCoordinator] Done: {report.dates_succeeded}/{total} dates, "
                    f"{report.records_saved} saved, {report.records_failed} failed to save")
        return report

    def _save(
        self,
        results: List[SourceResult],
        place: str,
        coords: Coordinates,
        on_date: date,
        report: AcquisitionReport,
    ) -> None:
        if self.store is None:
            return

        for result in results:
            record = AstronomicalRecord.from_result(result, place, coords, on_date)
            if self.store.append(record):
                report.records_saved += 1
            else:
                report.records_failed += 1
                logger.error(f"[AcquisitionCoordinator] Could not store {result.source} data for {on_date}")
