"""
Unit tests for the shared numeric helpers.

Tests cover:
- Mean / population standard deviation / CV edge cases
- Least squares slope and R² (including degenerate inputs)
- Lag-1 autocorrelation
- Clamping and output rounding
"""

import pytest # pyright: ignore[reportMissingImports]
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring.numeric import (
    autocorrelation_lag1,
    clamp,
    coefficient_of_variation,
    linear_regression,
    mean,
    round_score,
    stddev
)


class TestDescriptiveStats:
    """Test mean, stddev and coefficient of variation."""

    def test_empty_mean_is_zero(self):
        assert mean([]) == 0.0

    def test_population_stddev(self):
        """Denominator is N, not N-1."""
        assert stddev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_stddev_of_single_value(self):
        assert stddev([5.0]) == 0.0

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(0.4)

    def test_cv_undefined(self):
        """Empty input or zero mean has no CV."""
        assert coefficient_of_variation([]) is None
        assert coefficient_of_variation([0.0, 0.0, 0.0]) is None


class TestLinearRegression:
    """Test OLS fit."""

    def test_perfect_line(self):
        fit = linear_regression([0, 1, 2, 3], [1, 3, 5, 7])
        assert fit.slope == pytest.approx(2.0)
        assert fit.r_squared == pytest.approx(1.0)

    def test_flat_series_is_perfect_fit(self):
        fit = linear_regression([0, 1, 2], [5, 5, 5])
        assert fit.slope == 0.0
        assert fit.r_squared == 1.0

    def test_no_spread_in_x(self):
        fit = linear_regression([1, 1, 1], [1, 2, 3])
        assert fit.slope == 0.0
        assert fit.r_squared == 0.0

    def test_empty(self):
        fit = linear_regression([], [])
        assert fit.slope == 0.0
        assert fit.r_squared == 1.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            linear_regression([0, 1, 2], [1, 2])

    def test_noisy_fit_bounded(self):
        rng = np.random.default_rng(7)
        xs = np.arange(50)
        ys = xs * 0.5 + rng.normal(0, 5, size=50)
        fit = linear_regression(xs, ys)
        assert 0.0 <= fit.r_squared <= 1.0
        assert fit.slope > 0


class TestAutocorrelation:
    """Test lag-1 autocorrelation."""

    def test_alternating_series(self):
        assert autocorrelation_lag1([1, 2, 1, 2, 1, 2]) == pytest.approx(-1.0)

    def test_constant_series(self):
        """No spread means no defined coefficient."""
        assert autocorrelation_lag1([0.2, 0.2, 0.2, 0.2]) is None

    def test_too_short(self):
        assert autocorrelation_lag1([1.0]) is None

    def test_trend_is_positive(self):
        assert autocorrelation_lag1([1, 2, 3, 4, 5, 6, 7, 8]) > 0


class TestClampAndRound:
    """Test clamp and round_score."""

    def test_clamp(self):
        assert clamp(150.0) == 100.0
        assert clamp(-5.0) == 0.0
        assert clamp(42.0) == 42.0

    def test_round_score(self):
        assert round_score(12.36) == 12.4
        assert round_score(99.94) == 99.9


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
