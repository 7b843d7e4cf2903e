"""Robust residual-based outlier filter.

Fits a Theil-Sen baseline through the degree-day points and removes the days
whose residuals are extreme relative to the robust spread (MAD). Protects the
regression against single-day sensor faults such as stuck counters or spikes.

Safeguards:
- Fewer than OUTLIER_MIN_POINTS points are passed through untouched
- Yesterday's point (is_yesterday) is never removed
- At most OUTLIER_MAX_FRACTION of the points are removed (minimum 1)

Pairwise slope enumeration is O(N²). Daily aggregation keeps N in the low
thousands even for multi-year windows.
"""

import logging
import math

import numpy as np

from ..const import (
    EPSILON,
    MAD_NORMAL_CONSISTENCY,
    OUTLIER_FENCE_FACTOR,
    OUTLIER_MAX_FRACTION,
    OUTLIER_MIN_POINTS,
)
from .types import OutlierFilterResult, RawPoint

_LOGGER = logging.getLogger(__name__)


def theil_sen_fit(points: list[RawPoint]) -> tuple[float, float]:
    """Robust line fit: median pairwise slope, median intercept.

    Pairs with (near) identical x are skipped. Without any usable pair the
    line is flat at the median energy.

    Returns:
        (m, b)
    """
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)

    i, j = np.triu_indices(len(points), k=1)
    dx = x[j] - x[i]
    usable = np.abs(dx) >= EPSILON

    if not usable.any():
        return 0.0, float(np.median(y))

    slopes = (y[j] - y[i])[usable] / dx[usable]
    m = float(np.median(slopes))
    b = float(np.median(y - m * x))
    return m, b


def _quantile(values: np.ndarray, q: float) -> float:
    """Quantile of the residuals (averaged inverted CDF).

    Returns the order statistic at ceil(n*q) when n*q is fractional and the
    average of the two neighbours when it is integral.
    """
    return float(np.quantile(values, q, method="averaged_inverted_cdf"))


def filter_outliers_by_residual(
    points: list[RawPoint],
    fence_factor: float = OUTLIER_FENCE_FACTOR,
) -> OutlierFilterResult:
    """Remove days whose residual against a robust baseline is extreme.

    Args:
        points: Degree-day points with unique day keys
        fence_factor: Robust z-score (or IQR multiple) above which a day
                      becomes a removal candidate

    Returns:
        OutlierFilterResult partitioning the input
    """
    if len(points) < OUTLIER_MIN_POINTS:
        return OutlierFilterResult(clean=list(points), removed_dates=[])

    m, b = theil_sen_fit(points)
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    residuals = y - (m * x + b)
    residual_median = float(np.median(residuals))
    deviations = np.abs(residuals - residual_median)
    mad = float(np.median(deviations))
    protected = np.array([p.is_yesterday for p in points], dtype=bool)

    if mad > EPSILON:
        sigma = MAD_NORMAL_CONSISTENCY * mad
        scores = deviations / sigma
        is_candidate = (scores > fence_factor) & ~protected
    else:
        # MAD collapses on near-perfect lines; fence on the residual IQR instead
        q1 = _quantile(residuals, 0.25)
        q3 = _quantile(residuals, 0.75)
        iqr = q3 - q1
        delta = fence_factor * iqr if iqr > EPSILON else EPSILON
        lower = residual_median - delta
        upper = residual_median + delta
        scores = deviations
        is_candidate = ((residuals < lower) | (residuals > upper)) & ~protected

    candidates = sorted(
        (int(idx) for idx in np.flatnonzero(is_candidate)),
        key=lambda idx: scores[idx],
        reverse=True,
    )

    max_removals = max(1, math.floor(len(points) * OUTLIER_MAX_FRACTION))
    removed_dates = list(dict.fromkeys(points[idx].date_str for idx in candidates[:max_removals]))
    removed = set(removed_dates)

    if removed:
        _LOGGER.debug(
            "Outlier filter removed %d of %d days (%d candidates, baseline m=%.3f b=%.3f): %s",
            len(removed),
            len(points),
            len(candidates),
            m,
            b,
            sorted(removed),
        )

    clean = [p for p in points if p.date_str not in removed]
    return OutlierFilterResult(clean=clean, removed_dates=removed_dates)
