"""
Daylight Analytics Engine for Sun Ledger

Derives comparative statistics from the full record set (or a filtered
subset). Everything is recomputed from scratch on each call; nothing is
cached and the input list is never modified.

Statistics (day length always in minutes):
1. Aggregate:     mean / max / min, whole minutes (round half away from zero)
2. Per location:  average per exact location string
3. Per source:    record count per provider
4. Correlation:   Pearson r between latitude and day length
5. Trends:        mean of per-step change rates between consecutive dates
6. Seasons:       Northern-hemisphere month buckets + top 3 locations each
7. Ranking:       locations ordered by average day length
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from sun_ledger.models import AstronomicalRecord, RecordFilter

logger = logging.getLogger(__name__)

# Trend classification threshold (minutes/day)
TREND_THRESHOLD = 1.0

# Fewer records than this gives a correlation of 0
MIN_CORRELATION_RECORDS = 3

TOP_LOCATIONS_PER_SEASON = 3

SEASON_ORDER = ["Winter", "Spring", "Summer", "Fall"]

SEASON_BY_MONTH: Dict[int, str] = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Fall", 10: "Fall", 11: "Fall",
}

SORTABLE_COLUMNS = ("location", "date", "day_length", "sunrise", "sunset", "source")


@dataclass(frozen=True)
class AggregateStats:
    record_count: int
    avg_minutes: int
    max_minutes: int
    min_minutes: int


@dataclass(frozen=True)
class LocationStat:
    location: str
    avg_day_length_minutes: int
    samples: int


@dataclass(frozen=True)
class SourceDistribution:
    source: str
    count: int


@dataclass(frozen=True)
class LatitudeCorrelation:
    coefficient: float
    label: str


@dataclass(frozen=True)
class LocationTrend:
    location: str
    direction: str  # "increasing", "decreasing", "stable"
    change_rate_minutes_per_day: float


@dataclass(frozen=True)
class SeasonalPattern:
    season: str
    avg_day_length_minutes: int
    top_locations: List[str]


@dataclass(frozen=True)
class DaylightStatistics:
    """Everything the presentation layer needs, derived from one record set."""
    summary: Optional[AggregateStats]
    location_stats: List[LocationStat] = field(default_factory=list)
    source_distribution: List[SourceDistribution] = field(default_factory=list)
    latitude_correlation: LatitudeCorrelation = field(
        default_factory=lambda: LatitudeCorrelation(0.0, correlation_label(0.0))
    )
    trends: List[LocationTrend] = field(default_factory=list)
    seasonal_patterns: List[SeasonalPattern] = field(default_factory=list)
    location_ranking: List[LocationStat] = field(default_factory=list)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def season_for_month(month: int) -> str:
    return SEASON_BY_MONTH[month]


def correlation_label(coefficient: float) -> str:
    if coefficient > 0.7:
        return "strong positive"
    elif coefficient > 0.3:
        return "moderate positive"
    elif coefficient > -0.3:
        return "none"
    elif coefficient > -0.7:
        return "moderate negative"
    else:
        return "strong negative"


def classify_trend(rate: float) -> str:
    if rate > TREND_THRESHOLD:
        return "increasing"
    elif rate < -TREND_THRESHOLD:
        return "decreasing"
    return "stable"


def records_to_frame(records: Sequence[AstronomicalRecord]) -> pd.DataFrame:
    """One row per record, preserving input order, day length in minutes."""
    df = pd.DataFrame({
        "location": [r.location for r in records],
        "latitude": [float(r.latitude) for r in records],
        "date": pd.to_datetime([r.date for r in records]),
        "source": [r.source for r in records],
        "day_length_min": [r.day_length_minutes for r in records],
    })
    df["season"] = df["date"].dt.month.map(SEASON_BY_MONTH)
    return df


def aggregate_stats(df: pd.DataFrame) -> Optional[AggregateStats]:
    if df.empty:
        return None
    minutes = df["day_length_min"]
    return AggregateStats(
        record_count=len(df),
        avg_minutes=round_half_away(float(minutes.mean())),
        max_minutes=round_half_away(float(minutes.max())),
        min_minutes=round_half_away(float(minutes.min())),
    )


def location_averages(df: pd.DataFrame) -> List[LocationStat]:
    """Average day length per exact location string, first-seen order."""
    if df.empty:
        return []
    grouped = df.groupby("location", sort=False)["day_length_min"].agg(["mean", "size"])
    return [
        LocationStat(location=str(loc), avg_day_length_minutes=round_half_away(float(row["mean"])), samples=int(row["size"]))
        for loc, row in grouped.iterrows()
    ]


def source_distribution(df: pd.DataFrame) -> List[SourceDistribution]:
    if df.empty:
        return []
    counts = df.groupby("source", sort=False).size()
    return [SourceDistribution(source=str(src), count=int(n)) for src, n in counts.items()]


def latitude_correlation(df: pd.DataFrame) -> LatitudeCorrelation:
    """
    Pearson correlation between latitude and day length (minutes).

    Reported as 0 with fewer than 3 records or when either series has no
    variance.
    """
    if len(df) < MIN_CORRELATION_RECORDS:
        return LatitudeCorrelation(0.0, correlation_label(0.0))

    x = df["latitude"].to_numpy(dtype=float)
    y = df["day_length_min"].to_numpy(dtype=float)
    dx = x - x.mean()
    dy = y - y.mean()

    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return LatitudeCorrelation(0.0, correlation_label(0.0))

    coefficient = float(np.clip(float(np.sum(dx * dy)) / denominator, -1.0, 1.0))
    return LatitudeCorrelation(coefficient, correlation_label(coefficient))


def location_trends(df: pd.DataFrame) -> List[LocationTrend]:
    """
    Per-location day-length trend.

    Sibling records for one date are averaged into a single value first.
    Each consecutive pair of distinct dates then contributes one rate
    (minutes/day); the trend is the plain mean of those rates, so every gap
    counts equally regardless of its length.
    """
    trends: List[LocationTrend] = []
    if df.empty:
        return trends

    for location, group in df.groupby("location", sort=False):
        daily = group.groupby("date", sort=True)["day_length_min"].mean()
        if len(daily) < 2:
            logger.debug(f"[location_trends] '{location}' has fewer than 2 distinct dates, skipping")
            continue

        dates = daily.index.tolist()
        minutes = daily.tolist()

        rates = [
            (minutes[i] - minutes[i - 1]) / (dates[i] - dates[i - 1]).days
            for i in range(1, len(daily))
        ]

        rate = sum(rates) / len(rates)
        trends.append(LocationTrend(
            location=str(location),
            direction=classify_trend(rate),
            change_rate_minutes_per_day=rate,
        ))

    return trends


def seasonal_patterns(df: pd.DataFrame) -> List[SeasonalPattern]:
    if df.empty:
        return []

    patterns: List[SeasonalPattern] = []
    for season in SEASON_ORDER:
        bucket = df[df["season"] == season]
        if bucket.empty:
            continue

        per_location = bucket.groupby("location", sort=False)["day_length_min"].mean()
        top = per_location.sort_values(ascending=False, kind="stable").head(TOP_LOCATIONS_PER_SEASON)

        patterns.append(SeasonalPattern(
            season=season,
            avg_day_length_minutes=round_half_away(float(bucket["day_length_min"].mean())),
            top_locations=[str(loc) for loc in top.index],
        ))

    return patterns


def rank_locations(stats: Sequence[LocationStat]) -> List[LocationStat]:
    """Locations ordered by average day length, longest first (stable)."""
    return sorted(stats, key=lambda s: s.avg_day_length_minutes, reverse=True)


def compute_statistics(
    records: Sequence[AstronomicalRecord],
    filters: Optional[RecordFilter] = None,
) -> DaylightStatistics:
    """
    Derive every statistic from one record set.

    Args:
        records: Full record set as read from the store
        filters: Optional location/date filter, applied once so that every
            statistic describes the same subset

    Returns:
        DaylightStatistics
    """
    selected = filters.apply(records) if filters is not None else list(records)
    logger.info(f"[compute_statistics] Computing statistics over {len(selected)} of {len(records)} records")

    if not selected:
        return DaylightStatistics(summary=None)

    df = records_to_frame(selected)
    locations = location_averages(df)

    stats = DaylightStatistics(
        summary=aggregate_stats(df),
        location_stats=locations,
        source_distribution=source_distribution(df),
        latitude_correlation=latitude_correlation(df),
        trends=location_trends(df),
        seasonal_patterns=seasonal_patterns(df),
        location_ranking=rank_locations(locations),
    )

    logger.info(f"[compute_statistics] {len(stats.location_stats)} locations, "
                f"{len(stats.trends)} trends, r={stats.latitude_correlation.coefficient:.3f} "
                f"({stats.latitude_correlation.label})")
    return stats


def sort_records(
    records: Sequence[AstronomicalRecord],
    column: str = "date",
    descending: bool = True,
) -> List[AstronomicalRecord]:
    """
    Order records for a table view.

    Args:
        records: Records to order (not modified)
        column: One of SORTABLE_COLUMNS
        descending: Reverse order when True

    Returns:
        New sorted list
    """
    if column not in SORTABLE_COLUMNS:
        raise ValueError(f"Cannot sort by {column!r}; expected one of {', '.join(SORTABLE_COLUMNS)}")
    return sorted(records, key=lambda r: getattr(r, column), reverse=descending)
