"""
Tests for the Daylight Analytics Engine

These tests verify that:
1. Aggregate stats are whole minutes rounded half away from zero
2. Per-location and per-source groupings keep first-seen order
3. Latitude correlation stays in [-1, 1] and degrades to 0
4. Trends average per-step rates rather than fitting one slope
5. Seasonal buckets follow the Northern-hemisphere months
6. Filters apply identically to every statistic
7. Repeated runs over the same input give identical results

Run with: python -m pytest tests/test_analytics.py -v
"""

import copy
import logging
from datetime import date

import pytest

from sun_ledger.analytics import (
    LatitudeCorrelation,
    classify_trend,
    compute_statistics,
    correlation_label,
    round_half_away,
    season_for_month,
    sort_records,
)
from sun_ledger.models import RecordFilter

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def minutes(m):
    return int(m * 60)


class TestHelpers:

    def test_round_half_away(self):
        assert round_half_away(2.5) == 3
        assert round_half_away(3.5) == 4
        assert round_half_away(-2.5) == -3
        assert round_half_away(1.4999) == 1
        assert round_half_away(0.0) == 0

    def test_seasons(self):
        assert season_for_month(1) == "Winter"
        assert season_for_month(12) == "Winter"
        assert season_for_month(4) == "Spring"
        assert season_for_month(7) == "Summer"
        assert season_for_month(10) == "Fall"

    def test_correlation_labels(self):
        assert correlation_label(0.9) == "strong positive"
        assert correlation_label(0.5) == "moderate positive"
        assert correlation_label(0.3) == "none"
        assert correlation_label(0.0) == "none"
        assert correlation_label(-0.5) == "moderate negative"
        assert correlation_label(-0.7) == "strong negative"

    def test_trend_classification(self):
        assert classify_trend(1.5) == "increasing"
        assert classify_trend(1.0) == "stable"
        assert classify_trend(-1.0) == "stable"
        assert classify_trend(-1.01) == "decreasing"


class TestAggregates:

    def test_empty_input(self):
        stats = compute_statistics([])
        assert stats.summary is None
        assert stats.location_stats == []
        assert stats.latitude_correlation == LatitudeCorrelation(0.0, "none")

    def test_summary_rounding(self, make_record):
        records = [
            make_record(day_length=90),    # 1.5 min
            make_record(day_length=150),   # 2.5 min
        ]
        assert records[0].day_length_minutes == 1.5
        s = compute_statistics(records).summary
        logger.info(f"[TEST] Summary: {s}")
        assert s.record_count == 2
        assert s.avg_minutes == 2
        assert s.max_minutes == 3
        assert s.min_minutes == 2

    def test_oslo_end_to_end(self, make_record):
        records = [
            make_record(location="Oslo", on_date="2024-06-01", day_length=64800),
            make_record(location="Oslo", on_date="2024-12-01", day_length=21600),
        ]
        stats = compute_statistics(records)

        assert [(s.location, s.avg_day_length_minutes) for s in stats.location_stats] == [("Oslo", 720)]
        seasons = {p.season: p.avg_day_length_minutes for p in stats.seasonal_patterns}
        assert seasons == {"Summer": 1080, "Winter": 360}
        assert [p.season for p in stats.seasonal_patterns] == ["Winter", "Summer"]

    def test_location_grouping_is_exact(self, make_record):
        records = [
            make_record(location="Oslo", day_length=minutes(600)),
            make_record(location="oslo", day_length=minutes(700)),
            make_record(location="Oslo", day_length=minutes(800)),
        ]
        stats = compute_statistics(records)
        assert [(s.location, s.avg_day_length_minutes, s.samples) for s in stats.location_stats] == [
            ("Oslo", 700, 2),
            ("oslo", 700, 1),
        ]

    def test_source_distribution(self, make_record):
        records = [
            make_record(source="sunrisesunset.io"),
            make_record(source="sunrise-sunset.org"),
            make_record(source="sunrisesunset.io"),
        ]
        dist = compute_statistics(records).source_distribution
        assert [(d.source, d.count) for d in dist] == [("sunrisesunset.io", 2), ("sunrise-sunset.org", 1)]

    def test_ranking_longest_first(self, make_record):
        records = [
            make_record(location="Cairo", day_length=minutes(700)),
            make_record(location="Oslo", day_length=minutes(1000)),
            make_record(location="Sydney", day_length=minutes(600)),
        ]
        ranking = compute_statistics(records).location_ranking
        assert [s.location for s in ranking] == ["Oslo", "Cairo", "Sydney"]


class TestLatitudeCorrelation:

    def test_fewer_than_three_records(self, make_record):
        records = [make_record(latitude=10, day_length=minutes(600)),
                   make_record(latitude=60, day_length=minutes(900))]
        corr = compute_statistics(records).latitude_correlation
        assert corr.coefficient == 0
        assert corr.label == "none"

    def test_perfect_positive(self, make_record):
        records = [make_record(latitude=lat, day_length=minutes(m))
                   for lat, m in [(10, 600), (20, 700), (30, 800)]]
        corr = compute_statistics(records).latitude_correlation
        logger.info(f"[TEST] Correlation: {corr}")
        assert corr.coefficient == pytest.approx(1.0)
        assert -1.0 <= corr.coefficient <= 1.0
        assert corr.label == "strong positive"

    def test_negative(self, make_record):
        records = [make_record(latitude=lat, day_length=minutes(m))
                   for lat, m in [(-30, 900), (0, 720), (30, 540), (60, 400)]]
        corr = compute_statistics(records).latitude_correlation
        assert -1.0 <= corr.coefficient < -0.7
        assert corr.label == "strong negative"

    def test_no_latitude_variance(self, make_record):
        records = [make_record(latitude=40, day_length=minutes(m)) for m in (600, 700, 800)]
        corr = compute_statistics(records).latitude_correlation
        assert corr.coefficient == 0.0
        assert corr.label == "none"

    def test_no_day_length_variance(self, make_record):
        records = [make_record(latitude=lat, day_length=minutes(720)) for lat in (0, 30, 60)]
        assert compute_statistics(records).latitude_correlation.coefficient == 0.0


class TestTrends:

    def test_two_records_increasing(self, make_record):
        records = [
            make_record(on_date="2024-03-01", day_length=minutes(600)),
            make_record(on_date="2024-03-02", day_length=minutes(610)),
        ]
        [trend] = compute_statistics(records).trends
        assert trend.direction == "increasing"
        assert trend.change_rate_minutes_per_day == 10.0

    def test_unsorted_input_is_ordered_by_date(self, make_record):
        records = [
            make_record(on_date="2024-03-02", day_length=minutes(600)),
            make_record(on_date="2024-03-01", day_length=minutes(610)),
        ]
        [trend] = compute_statistics(records).trends
        assert trend.direction == "decreasing"
        assert trend.change_rate_minutes_per_day == -10.0

    def test_steps_weighted_equally(self, make_record):
        records = [
            make_record(on_date="2024-03-01", day_length=minutes(600)),
            make_record(on_date="2024-03-02", day_length=minutes(604)),   # +4/day
            make_record(on_date="2024-03-12", day_length=minutes(624)),   # +2/day
        ]
        [trend] = compute_statistics(records).trends
        # Mean of per-step rates, not the overall slope (24/11)
        assert trend.change_rate_minutes_per_day == pytest.approx(3.0)

    def test_stable(self, make_record):
        records = [
            make_record(on_date="2024-06-20", day_length=minutes(1000)),
            make_record(on_date="2024-06-22", day_length=minutes(1001)),
        ]
        [trend] = compute_statistics(records).trends
        assert trend.direction == "stable"
        assert trend.change_rate_minutes_per_day == pytest.approx(0.5)

    def test_single_record_has_no_trend(self, make_record):
        assert compute_statistics([make_record()]).trends == []

    def test_same_date_siblings_only_has_no_trend(self, make_record):
        records = [
            make_record(on_date="2024-03-01", day_length=minutes(600), source="sunrise-sunset.org"),
            make_record(on_date="2024-03-01", day_length=minutes(601), source="sunrisesunset.io"),
        ]
        assert compute_statistics(records).trends == []

    def test_two_sources_averaged_per_date(self, make_record):
        records = [
            make_record(on_date="2024-03-01", day_length=minutes(600), source="sunrise-sunset.org"),
            make_record(on_date="2024-03-01", day_length=minutes(620), source="sunrisesunset.io"),
            make_record(on_date="2024-03-02", day_length=minutes(610), source="sunrise-sunset.org"),
            make_record(on_date="2024-03-02", day_length=minutes(630), source="sunrisesunset.io"),
        ]

        for ordering in (records, list(reversed(records)), records[1::2] + records[0::2]):
            [trend] = compute_statistics(ordering).trends
            logger.info(f"[TEST] Two-source trend: {trend}")
            assert trend.direction == "increasing"
            assert trend.change_rate_minutes_per_day == pytest.approx(10.0)

    def test_per_location(self, make_record):
        records = [
            make_record(location="Oslo", on_date="2024-03-01", day_length=minutes(600)),
            make_record(location="Sydney", on_date="2024-03-01", day_length=minutes(720)),
            make_record(location="Oslo", on_date="2024-03-02", day_length=minutes(606)),
            make_record(location="Sydney", on_date="2024-03-02", day_length=minutes(717)),
        ]
        trends = {t.location: t for t in compute_statistics(records).trends}
        assert trends["Oslo"].direction == "increasing"
        assert trends["Sydney"].direction == "decreasing"


class TestSeasons:

    def test_bucketing(self, make_record):
        records = [
            make_record(on_date="2024-01-15", day_length=minutes(400)),
            make_record(on_date="2024-07-04", day_length=minutes(1000)),
        ]
        patterns = {p.season: p for p in compute_statistics(records).seasonal_patterns}
        assert set(patterns) == {"Winter", "Summer"}
        assert patterns["Winter"].avg_day_length_minutes == 400
        assert patterns["Summer"].avg_day_length_minutes == 1000

    def test_top_three_with_ties(self, make_record):
        records = [
            make_record(location="Cairo", on_date="2024-07-01", day_length=minutes(840)),
            make_record(location="Oslo", on_date="2024-07-01", day_length=minutes(1100)),
            make_record(location="London", on_date="2024-07-01", day_length=minutes(990)),
            make_record(location="Paris", on_date="2024-07-01", day_length=minutes(990)),
            make_record(location="Sydney", on_date="2024-07-01", day_length=minutes(600)),
        ]
        [summer] = compute_statistics(records).seasonal_patterns
        assert summer.top_locations == ["Oslo", "London", "Paris"]


class TestFiltersAndPurity:

    def test_filters_apply_to_every_statistic(self, make_record):
        records = [
            make_record(location="Oslo", on_date="2024-06-01", day_length=minutes(1080), source="a"),
            make_record(location="Oslo", on_date="2024-12-01", day_length=minutes(360), source="b"),
            make_record(location="Cairo", on_date="2024-06-01", day_length=minutes(840), source="c"),
        ]
        flt = RecordFilter(location="oslo", start_date=None, end_date=None)
        stats = compute_statistics(records, flt)

        assert stats.summary.record_count == 2
        assert [s.location for s in stats.location_stats] == ["Oslo"]
        assert {d.source for d in stats.source_distribution} == {"a", "b"}
        assert all(p.top_locations == ["Oslo"] for p in stats.seasonal_patterns)

    def test_date_filter(self, make_record):
        records = [
            make_record(on_date="2024-06-01", day_length=minutes(1080)),
            make_record(on_date="2024-12-01", day_length=minutes(360)),
        ]
        stats = compute_statistics(records, RecordFilter(end_date=date(2024, 6, 30)))
        assert stats.summary.record_count == 1
        assert [p.season for p in stats.seasonal_patterns] == ["Summer"]

    def test_filter_excluding_everything(self, make_record):
        stats = compute_statistics([make_record()], RecordFilter(location="nowhere"))
        assert stats.summary is None

    def test_idempotent_and_input_untouched(self, make_record):
        records = [
            make_record(location="Oslo", on_date="2024-06-01", latitude=59.9, day_length=minutes(1080)),
            make_record(location="Cairo", on_date="2024-06-02", latitude=30.0, day_length=minutes(840)),
            make_record(location="Oslo", on_date="2024-06-05", latitude=59.9, day_length=minutes(1090)),
        ]
        snapshot = copy.deepcopy(records)

        first = compute_statistics(records)
        second = compute_statistics(records)

        assert first == second
        assert records == snapshot


class TestSortRecords:

    def test_sort_by_day_length(self, make_record):
        records = [make_record(day_length=d) for d in (300, 100, 200)]
        ordered = sort_records(records, "day_length", descending=False)
        assert [r.day_length for r in ordered] == [100, 200, 300]
        assert [r.day_length for r in records] == [300, 100, 200]

    def test_sort_by_location_descending(self, make_record):
        records = [make_record(location=loc) for loc in ("Cairo", "Oslo", "London")]
        assert [r.location for r in sort_records(records, "location")] == ["Oslo", "London", "Cairo"]

    def test_unknown_column(self, make_record):
        with pytest.raises(ValueError):
            sort_records([make_record()], "latitude")


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
