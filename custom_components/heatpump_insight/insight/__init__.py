"""Insight analysis pipeline for Heat Pump Insight.

Pure statistics over recorder data, independent of entities and config
entries. Relates daily heating energy to heating degree days with a robust,
outlier-filtered regression and derives annual and sizing metrics.
"""

from .metrics import compute_dimensioning
from .periods import PeriodWindow, SelectedDay, resolve_comparison_window, resolve_period_window
from .processor import process_insight_series
from .types import (
    DimensioningData,
    DimensioningInput,
    ProcessSeriesParams,
    RegressionMode,
    SeriesResult,
)

__all__ = [
    "DimensioningData",
    "DimensioningInput",
    "PeriodWindow",
    "ProcessSeriesParams",
    "RegressionMode",
    "SelectedDay",
    "SeriesResult",
    "compute_dimensioning",
    "process_insight_series",
    "resolve_comparison_window",
    "resolve_period_window",
]
