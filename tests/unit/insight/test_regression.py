"""Tests for regression helpers."""

import pytest

from custom_components.heatpump_insight.insight.regression import (
    clip_regression_line,
    compute_model_r2,
    compute_regression,
    compute_regression_through_origin,
)
from custom_components.heatpump_insight.insight.types import LinePoint, Point


class TestComputeRegression:
    """Test ordinary least squares."""

    def test_perfect_line(self):
        result = compute_regression([Point(0, 5), Point(10, 25)])

        assert result.m == pytest.approx(2.0)
        assert result.b == pytest.approx(5.0)
        assert result.r2 == pytest.approx(1.0)

    def test_fewer_than_two_points(self):
        result = compute_regression([Point(3, 4)])

        assert (result.m, result.b, result.r2) == (0.0, 0.0, 0.0)

    def test_empty(self):
        result = compute_regression([])

        assert (result.m, result.b, result.r2) == (0.0, 0.0, 0.0)

    def test_no_x_spread_is_flat_at_mean(self):
        result = compute_regression([Point(5, 10), Point(5, 20)])

        assert result.m == 0.0
        assert result.b == pytest.approx(15.0)
        assert result.r2 == 0.0

    def test_no_y_spread_has_zero_r2(self):
        result = compute_regression([Point(1, 7), Point(2, 7), Point(3, 7)])

        assert result.m == pytest.approx(0.0)
        assert result.b == pytest.approx(7.0)
        assert result.r2 == 0.0

    def test_noisy_data(self):
        points = [Point(1, 2.1), Point(2, 3.9), Point(3, 6.2), Point(4, 7.8)]

        result = compute_regression(points)

        assert result.m == pytest.approx(1.94)
        assert result.b == pytest.approx(0.15)
        assert 0.9 < result.r2 < 1.0


class TestRegressionThroughOrigin:
    """Test least squares without intercept."""

    def test_proportional_data(self):
        assert compute_regression_through_origin([Point(1, 2), Point(2, 4)]) == pytest.approx(2.0)

    def test_weighted_by_x(self):
        # Σxy / Σx² = (1*3 + 3*5) / (1 + 9)
        assert compute_regression_through_origin([Point(1, 3), Point(3, 5)]) == pytest.approx(1.8)

    def test_all_zero_x(self):
        assert compute_regression_through_origin([Point(0, 3), Point(0, 5)]) == 0.0


class TestModelR2:
    """Test R² of an externally composed line."""

    def test_exact_line(self):
        points = [Point(1, 6), Point(2, 8), Point(3, 10)]
        assert compute_model_r2(points, 2.0, 4.0) == pytest.approx(1.0)

    def test_poor_line_can_be_negative(self):
        points = [Point(1, 6), Point(2, 8), Point(3, 10)]
        assert compute_model_r2(points, 0.0, 50.0) < 0

    def test_constant_y(self):
        assert compute_model_r2([Point(1, 5), Point(2, 5)], 1.0, 0.0) == 0.0


class TestClipRegressionLine:
    """Test regression line clipping at zero energy."""

    def test_non_negative_intercept_starts_at_origin(self):
        line = clip_regression_line(2.0, 4.0, 20.0)

        assert line == [LinePoint(0.0, 4.0), LinePoint(20.0, 44.0)]

    def test_negative_intercept_starts_at_x_intercept(self):
        line = clip_regression_line(2.0, -4.0, 20.0)

        assert line[0].x == pytest.approx(2.0)
        assert line[0].y == pytest.approx(0.0)
        assert line[1] == LinePoint(20.0, 36.0)

    def test_negative_intercept_flat_slope(self):
        line = clip_regression_line(0.0, -4.0, 20.0)

        assert line[0] == LinePoint(0.0, 0.0)
