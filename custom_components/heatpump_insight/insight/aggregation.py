"""Daily aggregation of recorder statistics.

Turns per-sensor statistic rows into one value per local calendar day:
energy meters are summed (from the "change" column), outdoor temperature is
averaged (from the "mean" column). Aggregation always re-groups by calendar
day, so hourly or 5-minute statistics give the same daily maps as daily ones.
"""

import logging
import math
from collections.abc import Sequence
from typing import Any

from ..utils.time_utils import day_key
from .types import DailyMap, EnergyMaps, StatisticRow, StatisticsResult

_LOGGER = logging.getLogger(__name__)


def _clamped_change(value: Any) -> float:
    """Energy delta of one row, clamped to a finite non-negative value.

    Negative deltas come from counter resets and sensor glitches and must not
    cancel out real consumption.
    """
    try:
        change = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(change):
        return 0.0
    return max(0.0, change)


def _accumulate_changes(rows: Sequence[StatisticRow], *targets: DailyMap) -> None:
    """Add every row's clamped change to its day in each target map."""
    skipped = 0
    for row in rows:
        key = day_key(row.get("start"))
        if key is None:
            skipped += 1
            continue
        value = _clamped_change(row.get("change"))
        for target in targets:
            target[key] = target.get(key, 0.0) + value

    if skipped:
        _LOGGER.debug("Skipped %d energy rows without a valid start", skipped)


def build_energy_maps(
    stats: StatisticsResult,
    heating_id: str | None,
    hotwater_id: str | None,
) -> EnergyMaps:
    """Build heating, hot water and total daily energy maps.

    Args:
        stats: Recorder statistics keyed by sensor id
        heating_id: Heating energy sensor (or single total sensor)
        hotwater_id: Hot water energy sensor

    Returns:
        EnergyMaps; a sensor absent from stats leaves its map empty
    """
    maps = EnergyMaps()

    if heating_id and stats.get(heating_id) is not None:
        _accumulate_changes(stats[heating_id], maps.heating, maps.total)

    if hotwater_id and stats.get(hotwater_id) is not None:
        _accumulate_changes(stats[hotwater_id], maps.hotwater, maps.total)

    return maps


def build_temperature_map(stats: StatisticsResult, temp_id: str) -> DailyMap:
    """Build the daily mean outdoor temperature map.

    Several rows on the same day are averaged. Rows without a finite mean
    are skipped.
    """
    sums: dict[str, float] = {}
    counts: dict[str, int] = {}

    for row in stats.get(temp_id) or ():
        mean = row.get("mean")
        if isinstance(mean, bool) or not isinstance(mean, (int, float)):
            continue
        if not math.isfinite(mean):
            continue
        key = day_key(row.get("start"))
        if key is None:
            continue
        sums[key] = sums.get(key, 0.0) + float(mean)
        counts[key] = counts.get(key, 0) + 1

    return {key: sums[key] / counts[key] for key in sums}
