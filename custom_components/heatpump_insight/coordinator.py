"""Data update coordinator for Heat Pump Insight."""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .adapters import BuildingAdapter, StatisticsAdapter
from .adapters.statistics_adapter import EnergySources
from .const import (
    ANALYSIS_PERIOD_DAYS,
    CONF_ANALYSIS_PERIOD,
    CONF_COMPARISON_MODE,
    CONF_HEATING_LIMIT,
    DEFAULT_ANALYSIS_PERIOD,
    DEFAULT_COMPARISON_MODE,
    DEFAULT_HEATING_LIMIT,
    DOMAIN,
    MIN_REGRESSION_POINTS,
    UPDATE_INTERVAL_HOURS,
    BaseLoadSource,
    ComparisonMode,
    EnergyMode,
)
from .insight import (
    DimensioningData,
    DimensioningInput,
    PeriodWindow,
    ProcessSeriesParams,
    RegressionMode,
    SelectedDay,
    SeriesResult,
    compute_dimensioning,
    process_insight_series,
    resolve_comparison_window,
    resolve_period_window,
)
from .insight.periods import find_day, select_day
from .utils.time_utils import yesterday_key

_LOGGER = logging.getLogger(__name__)


@dataclass
class InsightData:
    """Result of one analysis run, shared by all entities."""

    period: str
    comparison_mode: str
    energy_mode: EnergyMode
    window: PeriodWindow
    series: SeriesResult | None
    comparison: SeriesResult | None
    comparison_window: PeriodWindow | None
    selected_day: SelectedDay | None
    yesterday: SelectedDay | None
    dimensioning: DimensioningData | None
    base_load: float
    base_load_source: BaseLoadSource
    has_hotwater_series: bool
    updated_at: datetime


class InsightCoordinator(DataUpdateCoordinator[InsightData | None]):
    """Coordinate statistics fetching and analysis for Heat Pump Insight.

    Each refresh reads daily recorder statistics for the selected period (and
    the comparison window, if any), runs the insight pipeline and derives the
    dimensioning metrics. Period changes can trigger overlapping refreshes;
    only the most recently started one may publish its result.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        statistics_adapter: StatisticsAdapter,
        building_adapter: BuildingAdapter,
        entry: ConfigEntry,
    ):
        """Initialize coordinator with dependency injection."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(hours=UPDATE_INTERVAL_HOURS),
        )
        self.statistics = statistics_adapter
        self.building = building_adapter
        self.entry = entry

        options = {**entry.data, **entry.options}
        self.period: str = options.get(CONF_ANALYSIS_PERIOD, DEFAULT_ANALYSIS_PERIOD)
        self.comparison_mode: str = options.get(CONF_COMPARISON_MODE, DEFAULT_COMPARISON_MODE)
        self.heating_limit = float(options.get(CONF_HEATING_LIMIT, DEFAULT_HEATING_LIMIT))
        self.selected_date: str | None = None

        self._saved_options: dict[str, Any] = dict(entry.options)
        self._request_id = 0

    @property
    def energy(self) -> EnergySources | None:
        """Resolved energy meters, None when none is configured."""
        return self.statistics.energy

    async def _async_update_data(self) -> InsightData | None:
        """Fetch statistics and run the analysis.

        Returns:
            InsightData, or None when no energy meter is configured. A run that
            was superseded by a newer one keeps the current data.
        """
        self._request_id += 1
        request_id = self._request_id

        energy = self.energy
        if energy is None:
            _LOGGER.warning("No energy sensor configured, skipping analysis")
            return None

        now = dt_util.now()
        window = resolve_period_window(self.period, now)
        comparison_window = resolve_comparison_window(self.comparison_mode, now)

        try:
            series, comparison = await asyncio.gather(
                self._async_analyse(energy, window, now),
                self._async_analyse(energy, comparison_window, now),
            )
        except (HomeAssistantError, OSError, ValueError) as err:
            if request_id != self._request_id:
                _LOGGER.debug("Ignoring failure of superseded analysis %d: %s", request_id, err)
                return self.data
            _LOGGER.error("Insight analysis failed: %s", err)
            raise UpdateFailed(f"Cannot read statistics: {err}") from err

        if request_id != self._request_id:
            _LOGGER.debug(
                "Discarding superseded analysis %d (latest is %d)", request_id, self._request_id
            )
            return self.data

        return self._build_data(energy, window, series, comparison_window, comparison, now)

    async def _async_analyse(
        self,
        energy: EnergySources,
        window: PeriodWindow | None,
        now: datetime,
    ) -> SeriesResult | None:
        """Fetch one window and run the pipeline on it.

        Yesterday stays an ordinary, selectable day. The pipeline runs in the
        executor since the pairwise outlier baseline is quadratic in days.
        """
        if window is None:
            return None

        stats = await self.statistics.async_fetch(
            self.statistics.statistic_ids, window.start, window.end
        )
        params = ProcessSeriesParams(
            stats=stats,
            heating_id=energy.heating_id,
            hotwater_id=energy.hotwater_id,
            temp_id=self.statistics.temp_id,
            heating_limit=self.heating_limit,
            identify_yesterday=False,
            filter_start=window.filter_start,
            exclude_zero_hdd_days=energy.exclude_zero_hdd_days,
            now=now,
        )
        return await self.hass.async_add_executor_job(process_insight_series, params)

    def _build_data(
        self,
        energy: EnergySources,
        window: PeriodWindow,
        series: SeriesResult | None,
        comparison_window: PeriodWindow | None,
        comparison: SeriesResult | None,
        now: datetime,
    ) -> InsightData:
        """Combine pipeline output with building parameters."""
        # Measured hot water base load only exists when a split model was fitted
        has_hotwater = series is not None and series.mode == RegressionMode.SPLIT
        if series is None:
            base_load = 0.0
        elif has_hotwater:
            base_load = series.ww_base_load
        else:
            base_load = max(0.0, series.b)

        selected = None
        yesterday = None
        dimensioning = None
        if series is not None:
            selected = select_day(series.dated_points, series.m, series.b, self.selected_date)
            if selected is not None:
                self.selected_date = selected.date
            yesterday = find_day(series.dated_points, series.m, series.b, yesterday_key(now))
            dimensioning = self._compute_dimensioning(series)
        else:
            _LOGGER.info(
                "Not enough data for a %s analysis yet (need %d+ heating days)",
                self.period,
                MIN_REGRESSION_POINTS,
            )

        return InsightData(
            period=self.period,
            comparison_mode=self.comparison_mode,
            energy_mode=energy.mode,
            window=window,
            series=series,
            comparison=comparison,
            comparison_window=comparison_window,
            selected_day=selected,
            yesterday=yesterday,
            dimensioning=dimensioning,
            base_load=base_load,
            base_load_source=BaseLoadSource.HOT_WATER if has_hotwater else BaseLoadSource.REGRESSION,
            has_hotwater_series=has_hotwater,
            updated_at=now,
        )

    def _compute_dimensioning(self, series: SeriesResult) -> DimensioningData:
        params = self.building.get_parameters()
        return compute_dimensioning(
            DimensioningInput(
                m=series.m,
                b=series.b,
                total_elec_period=series.total_elec_period,
                total_days_period=series.total_days_period,
                annual_heating_elec_kwh=series.annual_heating_elec_kwh,
                ww_base_load=series.ww_base_load,
                avg_power_for_heating=series.avg_power_for_heating,
                jaz=params.jaz,
                jaz_source=params.jaz_source,
                cop_cold=params.cop_cold,
                area=params.area,
                electricity_price=params.electricity_price,
            )
        )

    async def async_set_period(self, period: str) -> None:
        """Switch the main analysis period and refresh."""
        if period not in ANALYSIS_PERIOD_DAYS:
            raise ValueError(f"Unknown analysis period: {period}")
        if period == self.period:
            return
        _LOGGER.debug("Analysis period changed: %s -> %s", self.period, period)
        self.period = period
        await self.async_refresh()

    async def async_set_comparison(self, mode: str) -> None:
        """Switch the comparison mode and refresh."""
        if mode not in {m.value for m in ComparisonMode}:
            raise ValueError(f"Unknown comparison mode: {mode}")
        if mode == self.comparison_mode:
            return
        _LOGGER.debug("Comparison mode changed: %s -> %s", self.comparison_mode, mode)
        self.comparison_mode = mode
        await self.async_refresh()

    @callback
    def async_select_day(self, date_str: str | None) -> None:
        """Move the selected day without fetching statistics again."""
        self.selected_date = date_str
        if self.data is None or self.data.series is None:
            return
        series = self.data.series
        selected = select_day(series.dated_points, series.m, series.b, date_str)
        self.selected_date = selected.date if selected else None
        self.async_set_updated_data(replace(self.data, selected_day=selected))

    async def async_update_config(self, new_options: dict[str, Any]) -> None:
        """Apply runtime options without reloading the entry.

        Period and comparison are only taken over when the saved value
        changed, so saving other options keeps the choice made in the selects.
        """
        if CONF_HEATING_LIMIT in new_options:
            self.heating_limit = float(new_options[CONF_HEATING_LIMIT])
        for key, attr in (
            (CONF_ANALYSIS_PERIOD, "period"),
            (CONF_COMPARISON_MODE, "comparison_mode"),
        ):
            if key in new_options and new_options[key] != self._saved_options.get(key):
                setattr(self, attr, new_options[key])
        self._saved_options = dict(new_options)
        self.building.update_config(new_options)
        await self.async_request_refresh()
