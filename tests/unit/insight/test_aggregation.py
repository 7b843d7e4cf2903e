"""Tests for daily aggregation of recorder statistics.

Covers:
- Heating / hot water / total energy map separation
- Same-day summing across sub-daily rows
- Clamping of negative and non-finite energy deltas
- Daily mean outdoor temperature
"""

import math
from datetime import datetime, timezone

from custom_components.heatpump_insight.insight.aggregation import (
    build_energy_maps,
    build_temperature_map,
)

from conftest import HEATING_ID, HOTWATER_ID, TEMP_ID, energy_rows, temperature_rows


class TestBuildEnergyMaps:
    """Test energy map construction."""

    def test_separates_heating_and_hot_water(self):
        """Heating and hot water land in their own maps and both feed total."""
        stats = {
            HEATING_ID: energy_rows([10, 15]),
            HOTWATER_ID: energy_rows([3, 4]),
        }

        maps = build_energy_maps(stats, HEATING_ID, HOTWATER_ID)

        assert maps.heating == {"2024-01-01": 10, "2024-01-02": 15}
        assert maps.hotwater == {"2024-01-01": 3, "2024-01-02": 4}
        assert maps.total == {"2024-01-01": 13, "2024-01-02": 19}

    def test_heating_only(self):
        """Without a hot water sensor total equals heating."""
        maps = build_energy_maps({HEATING_ID: energy_rows([10])}, HEATING_ID, None)

        assert maps.heating == {"2024-01-01": 10}
        assert maps.total == {"2024-01-01": 10}
        assert maps.hotwater == {}

    def test_hot_water_only(self):
        """A hot water series alone still fills total."""
        maps = build_energy_maps({HOTWATER_ID: energy_rows([5])}, None, HOTWATER_ID)

        assert maps.heating == {}
        assert maps.hotwater == {"2024-01-01": 5}
        assert maps.total == {"2024-01-01": 5}

    def test_sums_sub_daily_rows(self):
        """Hourly rows of one day add up to one daily value."""
        stats = {
            HEATING_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "change": 5},
                {"start": "2024-01-15T12:00:00+00:00", "change": 7},
            ]
        }

        maps = build_energy_maps(stats, HEATING_ID, None)

        assert maps.heating == {"2024-01-15": 12}

    def test_clamps_negative_deltas(self):
        """Counter resets must not cancel out real consumption."""
        stats = {
            HEATING_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "change": -5},
                {"start": "2024-01-15T12:00:00+00:00", "change": 7},
            ],
            HOTWATER_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "change": -2},
                {"start": "2024-01-15T12:00:00+00:00", "change": 3},
            ],
        }

        maps = build_energy_maps(stats, HEATING_ID, HOTWATER_ID)

        assert maps.heating["2024-01-15"] == 7
        assert maps.hotwater["2024-01-15"] == 3
        assert maps.total["2024-01-15"] == 10

    def test_non_finite_and_missing_changes_count_as_zero(self):
        """NaN, infinity, None and garbage contribute nothing."""
        stats = {
            HEATING_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "change": math.nan},
                {"start": "2024-01-15T01:00:00+00:00", "change": math.inf},
                {"start": "2024-01-15T02:00:00+00:00", "change": None},
                {"start": "2024-01-15T03:00:00+00:00", "change": "abc"},
                {"start": "2024-01-15T04:00:00+00:00", "change": 2.5},
            ]
        }

        maps = build_energy_maps(stats, HEATING_ID, None)

        assert maps.heating == {"2024-01-15": 2.5}

    def test_rows_without_start_are_skipped(self):
        """Rows that cannot be placed on a day are ignored."""
        stats = {
            HEATING_ID: [
                {"start": None, "change": 99},
                {"start": "not a date", "change": 99},
                {"start": "2024-01-15T00:00:00+00:00", "change": 4},
            ]
        }

        maps = build_energy_maps(stats, HEATING_ID, None)

        assert maps.heating == {"2024-01-15": 4}

    def test_accepts_datetime_and_epoch_starts(self):
        """Recorder rows carry epoch seconds, websocket rows ISO strings."""
        start = datetime(2024, 1, 15, tzinfo=timezone.utc)
        stats = {
            HEATING_ID: [
                {"start": start, "change": 1},
                {"start": start.timestamp() + 3600, "change": 2},
            ]
        }

        maps = build_energy_maps(stats, HEATING_ID, None)

        assert maps.heating == {"2024-01-15": 3}

    def test_missing_series_leaves_maps_empty(self):
        """A configured sensor without statistics is not an error."""
        maps = build_energy_maps({}, HEATING_ID, HOTWATER_ID)

        assert maps.heating == {}
        assert maps.hotwater == {}
        assert maps.total == {}


class TestBuildTemperatureMap:
    """Test daily mean temperature map."""

    def test_daily_means(self):
        """One row per day maps directly."""
        temp_map = build_temperature_map({TEMP_ID: temperature_rows([-2.0, 4.5])}, TEMP_ID)

        assert temp_map == {"2024-01-01": -2.0, "2024-01-02": 4.5}

    def test_averages_same_day_samples(self):
        """Several samples of one day are averaged."""
        stats = {
            TEMP_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "mean": 2.0},
                {"start": "2024-01-15T12:00:00+00:00", "mean": 6.0},
            ]
        }

        temp_map = build_temperature_map(stats, TEMP_ID)

        assert temp_map == {"2024-01-15": 4.0}

    def test_skips_invalid_means(self):
        """Missing, boolean and non-finite means are ignored."""
        stats = {
            TEMP_ID: [
                {"start": "2024-01-15T00:00:00+00:00", "mean": None},
                {"start": "2024-01-15T01:00:00+00:00", "mean": True},
                {"start": "2024-01-15T02:00:00+00:00", "mean": math.nan},
                {"start": "2024-01-16T00:00:00+00:00", "mean": "5"},
                {"start": "2024-01-17T00:00:00+00:00", "mean": 1.5},
            ]
        }

        temp_map = build_temperature_map(stats, TEMP_ID)

        assert temp_map == {"2024-01-17": 1.5}

    def test_missing_series(self):
        """No temperature statistics gives an empty map."""
        assert build_temperature_map({}, TEMP_ID) == {}
