"""Linear regression over degree-day points.

Three fits are used by the pipeline:
- Ordinary least squares (intercept fitted)
- Least squares through the origin (intercept known from a measurement)
- R² of an externally composed line (slope from one fit, intercept measured)

Degenerate inputs return neutral values (0) instead of raising.
"""

from collections.abc import Sequence

import numpy as np

from ..const import EPSILON
from .types import LinePoint, Point, RegressionResult


def _as_arrays(points: Sequence[Point]) -> tuple[np.ndarray, np.ndarray]:
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    return x, y


def compute_regression(points: Sequence[Point]) -> RegressionResult:
    """Ordinary least squares fit with R².

    R² is the squared Pearson correlation of x and y; it is 0 when either
    variable has no variance. With no spread in x the line is flat at the
    mean energy.
    """
    if len(points) < 2:
        return RegressionResult(m=0.0, b=0.0, r2=0.0)

    x, y = _as_arrays(points)
    x_dev = x - x.mean()
    y_dev = y - y.mean()
    sxx = float(np.dot(x_dev, x_dev))
    syy = float(np.dot(y_dev, y_dev))
    sxy = float(np.dot(x_dev, y_dev))

    if sxx <= EPSILON:
        return RegressionResult(m=0.0, b=float(y.mean()), r2=0.0)

    m = sxy / sxx
    b = float(y.mean()) - m * float(x.mean())
    r2 = (sxy * sxy) / (sxx * syy) if syy > EPSILON else 0.0
    return RegressionResult(m=m, b=b, r2=r2)


def compute_regression_through_origin(points: Sequence[Point]) -> float:
    """Least squares slope with the intercept fixed at 0.

    Returns:
        m = Σxy / Σx², or 0 when Σx² is negligible
    """
    x, y = _as_arrays(points)
    denominator = float(np.dot(x, x))
    if denominator <= EPSILON:
        return 0.0
    return float(np.dot(x, y)) / denominator


def compute_model_r2(points: Sequence[Point], m: float, b: float) -> float:
    """Coefficient of determination of a given line: 1 - SSE/SST.

    The line need not be the least squares optimum, so the result can be
    negative for a poor composite model.
    """
    if len(points) < 2:
        return 0.0

    x, y = _as_arrays(points)
    y_dev = y - y.mean()
    sst = float(np.dot(y_dev, y_dev))
    if sst <= EPSILON:
        return 0.0

    errors = y - (m * x + b)
    sse = float(np.dot(errors, errors))
    return 1.0 - sse / sst


def clip_regression_line(m: float, b: float, max_x: float) -> list[LinePoint]:
    """Two-point regression line that never dips below zero energy.

    Starts at x=0 when the intercept is non-negative, otherwise at the
    x-intercept -b/m.
    """
    if b >= 0:
        start_x = 0.0
    else:
        start_x = -b / m if m != 0 else 0.0

    return [
        LinePoint(x=start_x, y=max(0.0, m * start_x + b)),
        LinePoint(x=max_x, y=m * max_x + b),
    ]
