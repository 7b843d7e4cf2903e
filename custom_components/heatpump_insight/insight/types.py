"""Shared types for the insight analysis pipeline.

Dataclasses passed between aggregation, point building, outlier filtering,
regression and dimensioning. Point types are frozen so no stage can alter
another stage's output.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..const import JazSource

# Recorder statistics as consumed by the pipeline: sensor id -> rows with
# "start" plus optional "change" / "mean".
StatisticRow = Mapping[str, Any]
StatisticsResult = Mapping[str, Sequence[StatisticRow]]

# Calendar-day key (YYYY-MM-DD, local time) -> value
DailyMap = dict[str, float]


class RegressionMode(StrEnum):
    """Model used to fit the degree-day line."""

    SPLIT = "split"  # Heating slope through origin, measured hot water intercept
    FALLBACK = "fallback"  # Ordinary least squares on a single series


@dataclass(frozen=True)
class Point:
    """Scatter point: x = heating degree days, y = energy (kWh)."""

    x: float
    y: float


@dataclass(frozen=True)
class RawPoint:
    """Scatter point tagged with its calendar day."""

    x: float  # HDD
    y: float  # kWh
    date_str: str
    is_yesterday: bool = False

    def as_point(self) -> Point:
        """Strip date and flags."""
        return Point(self.x, self.y)


@dataclass(frozen=True)
class DatedPoint:
    """Display point with its calendar day."""

    x: float
    y: float
    date_str: str


@dataclass(frozen=True)
class LinePoint:
    """End point of the plotted regression line."""

    x: float
    y: float


@dataclass
class OutlierFilterResult:
    """Partition of the input points into kept and removed days."""

    clean: list[RawPoint]
    removed_dates: list[str]


@dataclass
class RegressionResult:
    """Linear model y = m * x + b with its coefficient of determination."""

    m: float  # kWh per HDD
    b: float  # kWh per day
    r2: float


@dataclass
class EnergyMaps:
    """Daily energy maps built from the energy meters."""

    heating: DailyMap = field(default_factory=dict)
    total: DailyMap = field(default_factory=dict)
    hotwater: DailyMap = field(default_factory=dict)


@dataclass
class MapTotals:
    """Sum of a daily map."""

    total: float
    day_count: int


@dataclass
class YesterdayMeta:
    """Details of yesterday's data point."""

    date: str
    energy: float
    hdd: float
    efficiency: float  # kWh per HDD


@dataclass
class ModelFit:
    """Result of one regression mode, including the series to display."""

    mode: RegressionMode
    m: float
    b: float
    r2: float
    points: list[Point]
    dated_points: list[DatedPoint]
    yesterday_point: Point | None
    yesterday_meta: YesterdayMeta | None


@dataclass
class ProcessSeriesParams:
    """Inputs of one insight analysis run."""

    stats: StatisticsResult
    heating_id: str | None
    hotwater_id: str | None
    temp_id: str
    heating_limit: float
    identify_yesterday: bool
    filter_start: datetime | None
    exclude_zero_hdd_days: bool = False
    now: datetime | None = None  # Defaults to the current local time


@dataclass
class SeriesResult:
    """Chart-ready output of the insight pipeline."""

    mode: RegressionMode
    points: list[Point]
    dated_points: list[DatedPoint]
    yesterday_point: Point | None
    yesterday_meta: YesterdayMeta | None
    m: float
    b: float
    r2: float
    line_points: list[LinePoint]
    deviation: float
    avg_efficiency: float
    avg_power_for_heating: float  # kW
    annual_heating_elec_kwh: float
    total_elec_period: float
    total_days_period: int
    ww_base_load: float
    removed_dates: list[str] = field(default_factory=list)


@dataclass
class DimensioningInput:
    """Inputs of the virtual energy certificate."""

    m: float
    b: float
    total_elec_period: float
    total_days_period: int
    annual_heating_elec_kwh: float
    ww_base_load: float
    avg_power_for_heating: float
    jaz: float
    jaz_source: JazSource
    cop_cold: float
    area: float
    electricity_price: float


@dataclass
class DimensioningData:
    """Virtual energy certificate."""

    avg_electrical_power: float  # kW
    avg_thermal_load: float  # kW
    peak_electrical_power: float  # kW at design temperature
    peak_thermal_load: float  # kW at design temperature
    energy_index: float  # kWh thermal / (m² a)
    specific_heat_load: float  # W/m²
    cost_index: float  # currency / (m² a)
    annual_electrical_energy: float  # kWh/a
    annual_cost: float  # currency/a
    jaz: float
    jaz_source: JazSource
    ww_base_load: float  # kWh/day
