"""Recorder statistics adapter.

Reads long-term statistics (sum of change for energy meters, mean for the
outdoor temperature) from Home Assistant's recorder and hands them to the
insight pipeline as plain rows:

    {"sensor.heating": [{"start": ..., "change": 12.3, "mean": None}, ...]}

Rows are validated here so the pipeline only ever sees well-shaped input.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from homeassistant.components.recorder import get_instance
from homeassistant.components.recorder.statistics import statistics_during_period
from homeassistant.core import HomeAssistant

from ..const import (
    CONF_HEATING_ENERGY_ENTITY,
    CONF_HOTWATER_ENERGY_ENTITY,
    CONF_OUTDOOR_TEMP_ENTITY,
    CONF_TOTAL_ENERGY_ENTITY,
    STATISTICS_PERIOD,
    STATISTICS_TYPES,
    EnergyMode,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergySources:
    """Energy meters resolved from the configuration."""

    heating_id: str
    hotwater_id: str | None
    mode: EnergyMode

    @property
    def statistic_ids(self) -> list[str]:
        """Energy statistic ids to fetch."""
        ids = [self.heating_id]
        if self.hotwater_id:
            ids.append(self.hotwater_id)
        return ids

    @property
    def exclude_zero_hdd_days(self) -> bool:
        """Days without heating demand are dropped unless only a total meter exists."""
        return self.mode != EnergyMode.FALLBACK_TOTAL


def resolve_energy_sources(config: dict[str, Any]) -> EnergySources | None:
    """Pick the energy meters to analyse.

    Preferred: a heating meter, optionally with a hot water meter (split).
    Fallback: a single total meter analysed as if it were heating.
    """
    heating = config.get(CONF_HEATING_ENERGY_ENTITY)
    hotwater = config.get(CONF_HOTWATER_ENERGY_ENTITY) or None
    if heating:
        return EnergySources(
            heating_id=heating,
            hotwater_id=hotwater,
            mode=EnergyMode.SPLIT if hotwater else EnergyMode.HEATING_ONLY,
        )

    total = config.get(CONF_TOTAL_ENERGY_ENTITY)
    if total:
        return EnergySources(heating_id=total, hotwater_id=None, mode=EnergyMode.FALLBACK_TOTAL)

    return None


def _normalize_row(row: Any) -> dict[str, Any] | None:
    """Keep start, change and mean of a recorder row; None if malformed."""
    if not hasattr(row, "get"):
        return None
    start = row.get("start")
    if start is None:
        return None
    return {"start": start, "change": row.get("change"), "mean": row.get("mean")}


class StatisticsAdapter:
    """Adapter for reading recorder long-term statistics."""

    def __init__(self, hass: HomeAssistant, config: dict[str, Any]):
        """Initialize statistics adapter.

        Args:
            hass: Home Assistant instance
            config: Configuration dictionary with entity IDs
        """
        self.hass = hass
        self._outdoor_temp_entity: str = config[CONF_OUTDOOR_TEMP_ENTITY]
        self.energy = resolve_energy_sources(config)

    @property
    def temp_id(self) -> str:
        """Outdoor temperature statistic id."""
        return self._outdoor_temp_entity

    @property
    def statistic_ids(self) -> list[str]:
        """All statistic ids an analysis needs, empty without energy meters."""
        if self.energy is None:
            return []
        return [*self.energy.statistic_ids, self._outdoor_temp_entity]

    async def async_fetch(
        self,
        statistic_ids: list[str],
        start: datetime,
        end: datetime,
        period: str = STATISTICS_PERIOD,
    ) -> dict[str, list[dict[str, Any]]]:
        """Fetch daily statistics for a window.

        Args:
            statistic_ids: Recorder statistic ids to read
            start: Window start
            end: Window end
            period: Recorder bucketing period ("5minute", "hour", "day", ...)

        Returns:
            Rows per statistic id. Ids without recorded statistics are absent.
        """
        if not statistic_ids:
            return {}

        _LOGGER.debug(
            "Fetching %s statistics for %s from %s to %s",
            period,
            sorted(statistic_ids),
            start.isoformat(),
            end.isoformat(),
        )

        raw = await get_instance(self.hass).async_add_executor_job(
            statistics_during_period,
            self.hass,
            start,
            end,
            set(statistic_ids),
            period,
            None,
            set(STATISTICS_TYPES),
        )

        result: dict[str, list[dict[str, Any]]] = {}
        for statistic_id, rows in (raw or {}).items():
            normalized = [r for r in (_normalize_row(row) for row in rows) if r is not None]
            dropped = len(rows) - len(normalized)
            if dropped:
                _LOGGER.debug("Dropped %d malformed rows for %s", dropped, statistic_id)
            result[statistic_id] = normalized

        return result
