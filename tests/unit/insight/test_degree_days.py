"""Tests for heating-degree-day point building."""

from datetime import datetime, timezone

import pytest

from custom_components.heatpump_insight.insight.degree_days import (
    build_raw_points,
    extract_yesterday,
    heating_degree_days,
)
from custom_components.heatpump_insight.insight.types import Point, RawPoint

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


class TestHeatingDegreeDays:
    """Test HDD formula."""

    def test_below_limit(self):
        assert heating_degree_days(5.0, 15.0) == 10.0

    def test_above_limit_is_zero(self):
        assert heating_degree_days(18.0, 15.0) == 0.0


class TestBuildRawPoints:
    """Test joining energy and temperature maps."""

    def test_joins_days_with_both_values(self):
        """Days missing a temperature are dropped."""
        energy = {"2024-01-05": 20.0, "2024-01-06": 30.0}
        temps = {"2024-01-05": 5.0}

        points = build_raw_points(energy, temps, 15.0, None, False, now=NOW)

        assert points == [RawPoint(x=10.0, y=20.0, date_str="2024-01-05")]

    def test_excludes_today(self):
        """Today's incomplete day never becomes a point."""
        energy = {"2024-01-09": 20.0, "2024-01-10": 5.0}
        temps = {"2024-01-09": 5.0, "2024-01-10": 5.0}

        points = build_raw_points(energy, temps, 15.0, None, False, now=NOW)

        assert [p.date_str for p in points] == ["2024-01-09"]

    def test_excludes_zero_hdd_days_when_requested(self):
        """Warm days are dropped only with exclude_zero_hdd."""
        energy = {"2024-01-05": 4.0, "2024-01-06": 30.0}
        temps = {"2024-01-05": 20.0, "2024-01-06": 0.0}

        kept = build_raw_points(energy, temps, 15.0, None, False, now=NOW)
        filtered = build_raw_points(energy, temps, 15.0, None, False, exclude_zero_hdd=True, now=NOW)

        assert len(kept) == 2
        assert [p.date_str for p in filtered] == ["2024-01-06"]

    def test_filter_start_bounds_days(self):
        """Days before filter_start are dropped."""
        energy = {"2024-01-03": 20.0, "2024-01-05": 25.0}
        temps = {"2024-01-03": 5.0, "2024-01-05": 5.0}
        filter_start = datetime(2024, 1, 4, tzinfo=timezone.utc)

        points = build_raw_points(energy, temps, 15.0, filter_start, False, now=NOW)

        assert [p.date_str for p in points] == ["2024-01-05"]

    def test_yesterday_is_marked_and_exempt_from_filter_start(self):
        """Yesterday survives a filter_start that lies after it."""
        energy = {"2024-01-09": 20.0}
        temps = {"2024-01-09": 5.0}
        filter_start = datetime(2024, 1, 10, tzinfo=timezone.utc)

        points = build_raw_points(energy, temps, 15.0, filter_start, True, now=NOW)

        assert len(points) == 1
        assert points[0].is_yesterday is True

    def test_yesterday_not_marked_without_flag(self):
        energy = {"2024-01-09": 20.0}
        temps = {"2024-01-09": 5.0}

        points = build_raw_points(energy, temps, 15.0, None, False, now=NOW)

        assert points[0].is_yesterday is False


class TestExtractYesterday:
    """Test separating the protected yesterday point."""

    def test_separates_yesterday(self):
        points = [
            RawPoint(x=10.0, y=20.0, date_str="2024-01-08"),
            RawPoint(x=8.0, y=24.0, date_str="2024-01-09", is_yesterday=True),
        ]

        rest, yesterday, meta = extract_yesterday(points)

        assert rest == [Point(x=10.0, y=20.0)]
        assert yesterday == Point(x=8.0, y=24.0)
        assert meta.date == "2024-01-09"
        assert meta.efficiency == pytest.approx(3.0)

    def test_zero_hdd_yesterday_has_zero_efficiency(self):
        points = [RawPoint(x=0.0, y=4.0, date_str="2024-01-09", is_yesterday=True)]

        rest, yesterday, meta = extract_yesterday(points)

        assert rest == []
        assert meta.efficiency == 0.0

    def test_without_yesterday(self):
        rest, yesterday, meta = extract_yesterday([RawPoint(x=1.0, y=2.0, date_str="2024-01-01")])

        assert len(rest) == 1
        assert yesterday is None
        assert meta is None
