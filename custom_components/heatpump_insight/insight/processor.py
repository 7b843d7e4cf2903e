"""Insight series processing pipeline.

Orchestrates: daily maps -> degree-day points -> outlier filter -> regression
-> derived metrics. Every call works on its own copies of the daily maps, so
concurrent analyses (e.g. main and comparison periods) need no coordination.

Two mutually exclusive regression modes:

SPLIT (heating and hot water meters both present):
    Hot water is a temperature-independent base load. Folding it into an
    unconstrained regression biases the slope low and the intercept high, so
    the slope is fitted through the origin on heating-only days and the
    intercept is the measured hot water base load. Displayed points show total
    energy (heating + hot water) per day.

FALLBACK (a single series):
    Ordinary least squares on that series.
"""

import logging
from dataclasses import replace

from homeassistant.util import dt as dt_util

from ..const import MIN_LINE_MAX_HDD, MIN_REGRESSION_POINTS
from ..utils.time_utils import today_key
from .aggregation import build_energy_maps, build_temperature_map
from .degree_days import build_raw_points, extract_yesterday
from .metrics import (
    compute_annual_heating_projection,
    compute_avg_efficiency,
    compute_avg_heating_power,
    compute_deviation,
    compute_ww_base_load,
    sum_map_values,
)
from .outliers import filter_outliers_by_residual
from .regression import (
    clip_regression_line,
    compute_model_r2,
    compute_regression,
    compute_regression_through_origin,
)
from .types import (
    DailyMap,
    DatedPoint,
    ModelFit,
    Point,
    ProcessSeriesParams,
    RawPoint,
    RegressionMode,
    SeriesResult,
    StatisticsResult,
)

_LOGGER = logging.getLogger(__name__)


def _has_series(stats: StatisticsResult, sensor_id: str | None) -> bool:
    return bool(sensor_id) and stats.get(sensor_id) is not None


def _dated(points: list[RawPoint]) -> list[DatedPoint]:
    return [DatedPoint(p.x, p.y, p.date_str) for p in points if not p.is_yesterday]


def _fit_split_model(
    clean_points: list[RawPoint],
    regression_points: list[Point],
    total_map: DailyMap,
    ww_base_load: float,
) -> ModelFit | None:
    """Heating slope through the origin, measured hot water intercept."""
    m = compute_regression_through_origin(regression_points)
    b = ww_base_load

    display_raw = [
        replace(p, y=total_map[p.date_str]) for p in clean_points if p.date_str in total_map
    ]
    points, yesterday_point, yesterday_meta = extract_yesterday(display_raw)
    if len(points) < MIN_REGRESSION_POINTS:
        _LOGGER.debug("Split model: only %d total-energy points, no result", len(points))
        return None

    return ModelFit(
        mode=RegressionMode.SPLIT,
        m=m,
        b=b,
        r2=compute_model_r2(points, m, b),
        points=points,
        dated_points=_dated(display_raw),
        yesterday_point=yesterday_point,
        yesterday_meta=yesterday_meta,
    )


def _fit_fallback_model(clean_points: list[RawPoint]) -> ModelFit:
    """Ordinary least squares on the single available series."""
    points, yesterday_point, yesterday_meta = extract_yesterday(clean_points)
    regression = compute_regression(points)

    return ModelFit(
        mode=RegressionMode.FALLBACK,
        m=regression.m,
        b=regression.b,
        r2=regression.r2,
        points=points,
        dated_points=_dated(clean_points),
        yesterday_point=yesterday_point,
        yesterday_meta=yesterday_meta,
    )


def process_insight_series(params: ProcessSeriesParams) -> SeriesResult | None:
    """Run the full insight pipeline.

    Returns:
        SeriesResult, or None when there is nothing to display (no
        temperature data, no energy data, or fewer than two clean days)
    """
    stats = params.stats
    now = params.now if params.now is not None else dt_util.now()

    if not _has_series(stats, params.temp_id):
        _LOGGER.debug("No temperature statistics for %s", params.temp_id)
        return None

    has_heating = _has_series(stats, params.heating_id)
    has_hotwater = _has_series(stats, params.hotwater_id)
    if not has_heating and not has_hotwater:
        _LOGGER.debug("No energy statistics for %s / %s", params.heating_id, params.hotwater_id)
        return None

    # 1. Daily maps; today is incomplete
    maps = build_energy_maps(stats, params.heating_id, params.hotwater_id)
    today = today_key(now)
    maps.hotwater.pop(today, None)
    maps.total.pop(today, None)

    # 2. Regression source: heating only when available
    regression_source = maps.heating if has_heating else maps.total

    # 3. Degree-day points
    temperature_map = build_temperature_map(stats, params.temp_id)
    raw_points = build_raw_points(
        regression_source,
        temperature_map,
        params.heating_limit,
        params.filter_start,
        params.identify_yesterday,
        params.exclude_zero_hdd_days,
        now=now,
    )

    # 4. Outliers are removed from every map used downstream
    filtered = filter_outliers_by_residual(raw_points)
    for date_str in filtered.removed_dates:
        maps.total.pop(date_str, None)
        maps.hotwater.pop(date_str, None)

    regression_points, _, _ = extract_yesterday(filtered.clean)
    if len(regression_points) < MIN_REGRESSION_POINTS:
        _LOGGER.debug(
            "Only %d clean days (%d raw, %d removed), no result",
            len(regression_points),
            len(raw_points),
            len(filtered.removed_dates),
        )
        return None

    # 5. Model
    ww_base_load = compute_ww_base_load(maps.hotwater)
    if has_heating and has_hotwater:
        fit = _fit_split_model(filtered.clean, regression_points, maps.total, ww_base_load)
        if fit is None:
            return None
    else:
        fit = _fit_fallback_model(filtered.clean)

    # 6. Derived metrics (efficiency and power from heating-only days)
    max_hdd = max([p.x for p in fit.points] + [MIN_LINE_MAX_HDD])
    totals = sum_map_values(maps.total)

    result = SeriesResult(
        mode=fit.mode,
        points=fit.points,
        dated_points=fit.dated_points,
        yesterday_point=fit.yesterday_point,
        yesterday_meta=fit.yesterday_meta,
        m=fit.m,
        b=fit.b,
        r2=fit.r2,
        line_points=clip_regression_line(fit.m, fit.b, max_hdd),
        deviation=compute_deviation(fit.yesterday_point, fit.m, fit.b),
        avg_efficiency=compute_avg_efficiency(regression_points),
        avg_power_for_heating=compute_avg_heating_power(regression_points),
        annual_heating_elec_kwh=compute_annual_heating_projection(fit.m),
        total_elec_period=totals.total,
        total_days_period=totals.day_count,
        ww_base_load=ww_base_load,
        removed_dates=list(filtered.removed_dates),
    )

    _LOGGER.debug(
        "Insight %s model: m=%.3f kWh/HDD, b=%.2f kWh, R²=%.3f over %d days (%d outliers)",
        result.mode,
        result.m,
        result.b,
        result.r2,
        len(result.points),
        len(result.removed_dates),
    )

    return result
