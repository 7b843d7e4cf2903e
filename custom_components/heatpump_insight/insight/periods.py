"""Analysis windows and day selection.

The main analysis looks back a fixed number of days. Comparison windows give
a reference model for the same building over a different span:

- optimizer: last 14 days (live optimization)
- benchmark: last 30 days (season check)
- balance: year to date
- full_year: last 365 days
- longterm: all data from 1 January four years back
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from homeassistant.util import dt as dt_util

from ..const import (
    ANALYSIS_PERIOD_DAYS,
    COMPARISON_MODE_DAYS,
    DEFAULT_ANALYSIS_PERIOD,
    LONGTERM_HISTORY_YEARS,
    ComparisonMode,
)
from .types import DatedPoint


@dataclass(frozen=True)
class PeriodWindow:
    """Statistics window and the start bound applied to degree-day points."""

    start: datetime
    end: datetime
    filter_start: datetime | None


@dataclass(frozen=True)
class SelectedDay:
    """A single analysed day compared against the model."""

    date: str
    hdd: float
    energy: float
    expected: float
    deviation: float


def resolve_period_window(period: str, now: datetime) -> PeriodWindow:
    """Window of a main analysis period; unknown periods use the default."""
    days = ANALYSIS_PERIOD_DAYS.get(period, ANALYSIS_PERIOD_DAYS[DEFAULT_ANALYSIS_PERIOD])
    start = now - timedelta(days=days)
    return PeriodWindow(start=start, end=now, filter_start=start)


def resolve_comparison_window(mode: str, now: datetime) -> PeriodWindow | None:
    """Window of a comparison mode, or None when comparison is off."""
    if mode in COMPARISON_MODE_DAYS:
        start = now - timedelta(days=COMPARISON_MODE_DAYS[mode])
        return PeriodWindow(start=start, end=now, filter_start=start)

    local_now = dt_util.as_local(now)
    if mode == ComparisonMode.BALANCE:
        start = dt_util.start_of_local_day(local_now.date().replace(month=1, day=1))
        return PeriodWindow(start=start, end=now, filter_start=start)

    if mode == ComparisonMode.LONGTERM:
        first_day = local_now.date().replace(
            year=local_now.year - LONGTERM_HISTORY_YEARS, month=1, day=1
        )
        return PeriodWindow(start=dt_util.start_of_local_day(first_day), end=now, filter_start=None)

    return None


def sorted_days(points: list[DatedPoint]) -> list[DatedPoint]:
    """Dated points in chronological order."""
    return sorted(points, key=lambda p: p.date_str)


def select_day(
    points: list[DatedPoint],
    m: float,
    b: float,
    date_str: str | None = None,
) -> SelectedDay | None:
    """Pick a day and compare its energy with the model.

    Without date_str the most recent day is chosen. A date that was not
    analysed resolves to the latest day before it, or the first day when
    none is earlier.
    """
    if not points:
        return None

    days = sorted_days(points)
    if not date_str:
        chosen = days[-1]
    else:
        chosen = days[0]
        for point in days:
            if point.date_str > date_str:
                break
            chosen = point
    return _compare_with_model(chosen, m, b)


def find_day(
    points: list[DatedPoint],
    m: float,
    b: float,
    date_str: str,
) -> SelectedDay | None:
    """Compare an exact day with the model, None when it was not analysed."""
    chosen = next((p for p in points if p.date_str == date_str), None)
    if chosen is None:
        return None
    return _compare_with_model(chosen, m, b)


def _compare_with_model(chosen: DatedPoint, m: float, b: float) -> SelectedDay:
    expected = m * chosen.x + b
    return SelectedDay(
        date=chosen.date_str,
        hdd=chosen.x,
        energy=chosen.y,
        expected=expected,
        deviation=chosen.y - expected,
    )
