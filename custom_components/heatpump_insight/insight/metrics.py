"""Derived metrics and building dimensioning.

Turns the degree-day model (slope m in kWh/HDD, intercept b in kWh/day) into
annual projections, average loads and a virtual energy certificate:

    peak electrical power  = (m × DESIGN_HDD + b) / 24        [kW]
    energy index           = annual electricity × JAZ / area  [kWh/(m²·a)]
    specific heat load     = peak electrical × COP(-10°C) × 1000 / area  [W/m²]
    cost index             = annual electricity × price / area  [currency/(m²·a)]

Area-normalized metrics are exactly 0 when no living area is configured.
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from ..const import ANNUAL_REFERENCE_HDD, DAYS_PER_YEAR, DESIGN_HDD, HOURS_PER_DAY
from .types import DimensioningData, DimensioningInput, MapTotals, Point

_LOGGER = logging.getLogger(__name__)


def compute_annual_heating_projection(m: float) -> float:
    """Annual heating electricity (kWh) for a reference climate year."""
    return m * ANNUAL_REFERENCE_HDD


def compute_ww_base_load(ww_map: Mapping[str, float]) -> float:
    """Mean daily hot water energy (kWh/day).

    Zero-valued days carry no hot water data and are left out of the mean.
    """
    values = [v for v in ww_map.values() if isinstance(v, (int, float)) and v > 0]
    return float(np.mean(values)) if values else 0.0


def compute_avg_efficiency(points: Sequence[Point]) -> float:
    """Total energy over total HDD for days with heating demand (kWh/HDD)."""
    heating_days = [p for p in points if p.x > 0]
    total_hdd = sum(p.x for p in heating_days)
    if total_hdd <= 0:
        return 0.0
    return sum(p.y for p in heating_days) / total_hdd


def compute_avg_heating_power(points: Sequence[Point]) -> float:
    """Average electrical power on heating days (kW)."""
    heating_days = [p.y for p in points if p.x > 0]
    if not heating_days:
        return 0.0
    return float(np.mean(heating_days)) / HOURS_PER_DAY


def compute_deviation(point: Point | None, m: float, b: float) -> float:
    """Actual minus expected energy of a day (kWh)."""
    if point is None:
        return 0.0
    return point.y - (m * point.x + b)


def sum_map_values(daily_map: Mapping[str, float]) -> MapTotals:
    """Sum and day count of a daily map."""
    values = [v for v in daily_map.values() if isinstance(v, (int, float))]
    return MapTotals(total=float(sum(values)), day_count=len(values))


def compute_dimensioning(data: DimensioningInput) -> DimensioningData:
    """Compute the virtual energy certificate.

    Annual electricity scales the measured period to a full year; without
    period data it falls back to the regression-based projection.
    """
    if data.total_days_period > 0:
        annual_electr = data.total_elec_period * (DAYS_PER_YEAR / data.total_days_period)
    else:
        annual_electr = data.annual_heating_elec_kwh

    peak_electr = (data.m * DESIGN_HDD + data.b) / HOURS_PER_DAY
    area = data.area

    result = DimensioningData(
        avg_electrical_power=data.avg_power_for_heating,
        avg_thermal_load=data.avg_power_for_heating * data.jaz,
        peak_electrical_power=peak_electr,
        peak_thermal_load=peak_electr * data.cop_cold,
        energy_index=(annual_electr * data.jaz) / area if area > 0 else 0.0,
        specific_heat_load=(peak_electr * data.cop_cold * 1000) / area if area > 0 else 0.0,
        cost_index=(annual_electr * data.electricity_price) / area if area > 0 else 0.0,
        annual_electrical_energy=annual_electr,
        annual_cost=annual_electr * data.electricity_price,
        jaz=data.jaz,
        jaz_source=data.jaz_source,
        ww_base_load=data.ww_base_load,
    )

    _LOGGER.debug(
        "Dimensioning: annual %.0f kWh, peak %.2f kW el / %.2f kW th, "
        "energy index %.1f kWh/m²a, heat load %.1f W/m² (JAZ %.2f from %s)",
        annual_electr,
        peak_electr,
        result.peak_thermal_load,
        result.energy_index,
        result.specific_heat_load,
        data.jaz,
        data.jaz_source,
    )

    return result
