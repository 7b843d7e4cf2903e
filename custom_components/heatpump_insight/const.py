"""Constants for Heat Pump Insight integration."""

from enum import StrEnum
from typing import Final

# Domain
DOMAIN: Final = "heatpump_insight"

# Configuration keys - entities
CONF_OUTDOOR_TEMP_ENTITY: Final = "outdoor_temp_entity"
CONF_HEATING_ENERGY_ENTITY: Final = "heating_energy_entity"  # Preferred: heating-only meter
CONF_HOTWATER_ENERGY_ENTITY: Final = "hotwater_energy_entity"  # Optional: DHW meter
CONF_TOTAL_ENERGY_ENTITY: Final = "total_energy_entity"  # Fallback: single total meter
CONF_SCOP_ENTITY: Final = "scop_entity"  # Optional: annual COP sensor
CONF_PRICE_ENTITY: Final = "electricity_price_entity"  # Optional: price sensor

# Configuration keys - building / settings
CONF_HEATING_LIMIT: Final = "heating_limit"
CONF_LIVING_AREA: Final = "living_area"
CONF_FIXED_JAZ: Final = "fixed_jaz"
CONF_COP_COLD: Final = "cop_cold"
CONF_ELECTRICITY_PRICE: Final = "electricity_price"
CONF_ANALYSIS_PERIOD: Final = "analysis_period"
CONF_COMPARISON_MODE: Final = "comparison_mode"

# Defaults
DEFAULT_NAME: Final = "Heat Pump Insight"
DEFAULT_HEATING_LIMIT: Final = 15.0  # °C - no heating demand above this mean temperature
DEFAULT_LIVING_AREA: Final = 0.0  # m² - 0 disables area-normalized metrics
DEFAULT_COP_COLD: Final = 2.7  # COP at -10°C design temperature
DEFAULT_ELECTRICITY_PRICE: Final = 0.30  # currency/kWh

# Limits for config validation
MIN_HEATING_LIMIT: Final = 10.0
MAX_HEATING_LIMIT: Final = 22.0
MAX_LIVING_AREA: Final = 2000.0
MIN_JAZ: Final = 1.0
MAX_JAZ: Final = 7.0
MIN_COP_COLD: Final = 1.0
MAX_COP_COLD: Final = 6.0
MAX_ELECTRICITY_PRICE: Final = 5.0


class AnalysisPeriod(StrEnum):
    """Main analysis window."""

    DAYS_30 = "30d"
    DAYS_90 = "90d"
    DAYS_365 = "365d"


class ComparisonMode(StrEnum):
    """Reference window used for comparison metrics."""

    NONE = "none"
    OPTIMIZER = "optimizer"  # Live optimization, last 14 days
    BENCHMARK = "benchmark"  # Season check, last 30 days
    BALANCE = "balance"  # Year to date
    FULL_YEAR = "full_year"  # Last 365 days
    LONGTERM = "longterm"  # All available data


class EnergyMode(StrEnum):
    """How energy sensors were resolved from the configuration."""

    SPLIT = "split"  # Heating + hot water meters
    HEATING_ONLY = "heating_only"  # Heating meter without hot water
    FALLBACK_TOTAL = "fallback_total"  # Single total meter


class JazSource(StrEnum):
    """Provenance of the annual COP used for dimensioning."""

    FIXED = "fixed"
    SENSOR = "sensor"
    MISSING = "missing"


class BaseLoadSource(StrEnum):
    """Where the displayed base load comes from."""

    HOT_WATER = "ww"  # Measured hot water meter
    REGRESSION = "regression"  # Regression intercept


DEFAULT_ANALYSIS_PERIOD: Final = AnalysisPeriod.DAYS_90
DEFAULT_COMPARISON_MODE: Final = ComparisonMode.NONE

# Days covered by each main analysis period
ANALYSIS_PERIOD_DAYS: Final[dict[str, int]] = {
    AnalysisPeriod.DAYS_30: 30,
    AnalysisPeriod.DAYS_90: 90,
    AnalysisPeriod.DAYS_365: 365,
}

# Days covered by the rolling comparison windows
COMPARISON_MODE_DAYS: Final[dict[str, int]] = {
    ComparisonMode.OPTIMIZER: 14,
    ComparisonMode.BENCHMARK: 30,
    ComparisonMode.FULL_YEAR: 365,
}

# Longterm comparison fetches from 1 January this many years back
LONGTERM_HISTORY_YEARS: Final = 4

# Statistics fetched from the recorder
STATISTICS_PERIOD: Final = "day"
STATISTICS_TYPES: Final = frozenset({"change", "mean"})

# ============================================================================
# Degree-day regression model
# ============================================================================
# Annual heating-degree-day reference (German standard climate, 15°C limit)
ANNUAL_REFERENCE_HDD: Final = 2800.0

# Design point for sizing: 15°C heating limit - (-10°C) design temperature
DESIGN_HDD: Final = 25.0

HOURS_PER_DAY: Final = 24.0
DAYS_PER_YEAR: Final = 365.25

# Minimum regression line extent on the HDD axis
MIN_LINE_MAX_HDD: Final = 20.0

# Minimum clean (non-yesterday) points needed for a model
MIN_REGRESSION_POINTS: Final = 2

# Numerical tolerance for degenerate statistics
EPSILON: Final = 1e-9

# ============================================================================
# Robust outlier filter
# ============================================================================
OUTLIER_MIN_POINTS: Final = 7  # Below this, robust statistics are not trusted
OUTLIER_FENCE_FACTOR: Final = 3.5  # Robust z-score cut-off
OUTLIER_MAX_FRACTION: Final = 0.2  # Never remove more than 20% of the days
MAD_NORMAL_CONSISTENCY: Final = 1.4826  # MAD -> sigma for normally distributed residuals

# ============================================================================
# Coordinator
# ============================================================================
UPDATE_INTERVAL_HOURS: Final = 6

# Services
SERVICE_REFRESH_ANALYSIS: Final = "refresh_analysis"
SERVICE_SELECT_DAY: Final = "select_day"
ATTR_DATE: Final = "date"

# Sensor attribute caps (keep state attributes small)
MAX_ATTRIBUTE_POINTS: Final = 400
