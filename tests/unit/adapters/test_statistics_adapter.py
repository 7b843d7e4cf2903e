"""Tests for the recorder statistics adapter.

Covers:
- Energy meter resolution (split, heating only, total fallback)
- Recorder query arguments
- Malformed row handling
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.heatpump_insight.adapters.statistics_adapter import (
    StatisticsAdapter,
    resolve_energy_sources,
)
from custom_components.heatpump_insight.const import EnergyMode

from conftest import HEATING_ID, HOTWATER_ID, TEMP_ID, TOTAL_ID, create_mock_hass

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.fixture
def recorder(monkeypatch):
    """Patch the recorder instance; returns the executor job mock."""
    instance = MagicMock()
    instance.async_add_executor_job = AsyncMock(return_value={})
    monkeypatch.setattr(
        "custom_components.heatpump_insight.adapters.statistics_adapter.get_instance",
        lambda hass: instance,
    )
    return instance.async_add_executor_job


class TestResolveEnergySources:
    """Test energy meter selection."""

    def test_split_mode(self):
        energy = resolve_energy_sources(
            {"heating_energy_entity": HEATING_ID, "hotwater_energy_entity": HOTWATER_ID}
        )

        assert energy.mode == EnergyMode.SPLIT
        assert energy.statistic_ids == [HEATING_ID, HOTWATER_ID]
        assert energy.exclude_zero_hdd_days is True

    def test_heating_only(self):
        energy = resolve_energy_sources({"heating_energy_entity": HEATING_ID})

        assert energy.mode == EnergyMode.HEATING_ONLY
        assert energy.hotwater_id is None
        assert energy.statistic_ids == [HEATING_ID]

    def test_heating_preferred_over_total(self):
        energy = resolve_energy_sources(
            {"heating_energy_entity": HEATING_ID, "total_energy_entity": TOTAL_ID}
        )

        assert energy.heating_id == HEATING_ID

    def test_total_fallback(self):
        energy = resolve_energy_sources(
            {"total_energy_entity": TOTAL_ID, "hotwater_energy_entity": HOTWATER_ID}
        )

        assert energy.mode == EnergyMode.FALLBACK_TOTAL
        assert energy.heating_id == TOTAL_ID
        assert energy.hotwater_id is None
        assert energy.exclude_zero_hdd_days is False

    def test_no_energy_meter(self):
        assert resolve_energy_sources({"hotwater_energy_entity": HOTWATER_ID}) is None

    def test_empty_hotwater_string_is_ignored(self):
        energy = resolve_energy_sources(
            {"heating_energy_entity": HEATING_ID, "hotwater_energy_entity": ""}
        )

        assert energy.mode == EnergyMode.HEATING_ONLY


class TestStatisticsAdapter:
    """Test recorder access."""

    def _adapter(self, **config):
        return StatisticsAdapter(
            create_mock_hass(),
            {"outdoor_temp_entity": TEMP_ID, "heating_energy_entity": HEATING_ID, **config},
        )

    def test_statistic_ids_include_temperature(self):
        adapter = self._adapter(hotwater_energy_entity=HOTWATER_ID)

        assert adapter.statistic_ids == [HEATING_ID, HOTWATER_ID, TEMP_ID]

    def test_statistic_ids_empty_without_energy(self):
        adapter = StatisticsAdapter(create_mock_hass(), {"outdoor_temp_entity": TEMP_ID})

        assert adapter.energy is None
        assert adapter.statistic_ids == []

    @pytest.mark.asyncio
    async def test_fetch_queries_daily_change_and_mean(self, recorder):
        adapter = self._adapter()

        await adapter.async_fetch([HEATING_ID, TEMP_ID], START, END)

        args = recorder.call_args.args
        assert args[2:] == (START, END, {HEATING_ID, TEMP_ID}, "day", None, {"change", "mean"})

    @pytest.mark.asyncio
    async def test_fetch_without_ids_skips_recorder(self, recorder):
        adapter = self._adapter()

        assert await adapter.async_fetch([], START, END) == {}
        recorder.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_drops_malformed_rows(self, recorder):
        recorder.return_value = {
            HEATING_ID: [
                {"start": 1704067200.0, "change": 12.5, "sum": 100.0},
                {"change": 3.0},
                None,
            ],
            TEMP_ID: [{"start": 1704067200.0, "mean": 2.5}],
        }
        adapter = self._adapter()

        result = await adapter.async_fetch([HEATING_ID, TEMP_ID], START, END)

        assert result[HEATING_ID] == [{"start": 1704067200.0, "change": 12.5, "mean": None}]
        assert result[TEMP_ID] == [{"start": 1704067200.0, "change": None, "mean": 2.5}]

    @pytest.mark.asyncio
    async def test_fetch_propagates_recorder_errors(self, recorder):
        recorder.side_effect = OSError("database is locked")
        adapter = self._adapter()

        with pytest.raises(OSError):
            await adapter.async_fetch([HEATING_ID], START, END)
