"""
Shared numeric helpers for the modality scorers.

Every scorer works from the same small set of statistics:
- Mean and population standard deviation (denominator N)
- Coefficient of variation (dispersion relative to the mean)
- Ordinary least squares slope and R²
- Lag-1 autocorrelation of a z-normalized series

Degenerate inputs never raise; they resolve to documented values
(stddev of <2 samples is 0, a flat series is "perfectly fit", a constant
series is "fully correlated") so callers can map them to default scores.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import stats

# Variance below this is treated as exactly zero (float noise from unit conversion)
ZERO_TOLERANCE = 1e-12


@dataclass(frozen=True)
class RegressionResult:
    """OLS fit summary."""
    slope: float
    r_squared: float


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than 2 samples."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def coefficient_of_variation(values: Sequence[float]) -> Optional[float]:
    """
    Compute stddev / mean.

    Returns:
        The CV, or None when the input is empty or its mean is zero
    """
    if len(values) == 0:
        return None

    mean_value = mean(values)
    if mean_value == 0:
        return None

    return stddev(values) / mean_value


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> RegressionResult:
    """
    Ordinary least squares fit of ys against xs.

    Degenerate cases:
    - xs without spread (n·Σx² − (Σx)² == 0): slope 0
    - ys without spread (SSTot == 0): R² = 1, a flat series is perfectly fit

    Args:
        xs: Independent variable
        ys: Dependent variable, same length as xs

    Returns:
        RegressionResult with slope and R²
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)

    if len(x) != len(y):
        raise ValueError(f"Length mismatch: {len(x)} xs vs {len(y)} ys")

    n = len(x)
    if n == 0:
        return RegressionResult(slope=0.0, r_squared=1.0)

    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    ss_tot = np.sum((y - np.mean(y)) ** 2)

    if denominator <= ZERO_TOLERANCE:
        # No spread in x: nothing explains y
        slope = 0.0
        r_squared = 1.0 if ss_tot <= ZERO_TOLERANCE else 0.0
        return RegressionResult(slope=slope, r_squared=r_squared)

    if ss_tot <= ZERO_TOLERANCE:
        return RegressionResult(slope=0.0, r_squared=1.0)

    fit = stats.linregress(x, y)
    r_squared = float(fit.rvalue) ** 2

    return RegressionResult(
        slope=float(fit.slope),
        r_squared=finite_or(r_squared, 0.0)
    )


def autocorrelation_lag1(series: Sequence[float]) -> Optional[float]:
    """
    Lag-1 autocorrelation of the z-normalized series.

    Formula:
        r1 = Σ z[i]·z[i+1] / (n − 1),  z = (x − mean) / std

    Returns:
        The coefficient, or None when the series has no spread (or fewer
        than 2 samples). None means "fully correlated" and maps to the
        maximum score downstream.
    """
    values = np.asarray(series, dtype=float)

    if len(values) < 2:
        return None

    std = float(np.std(values))
    if std <= ZERO_TOLERANCE * max(1.0, abs(float(np.mean(values)))):
        return None

    z = (values - np.mean(values)) / std
    return float(np.sum(z[:-1] * z[1:]) / (len(z) - 1))


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clip value into [lower, upper]."""
    return float(np.clip(value, lower, upper))


def finite_or(value: float, default: float) -> float:
    """Return value unless it is NaN or infinite."""
    if value is None or not math.isfinite(value):
        return default
    return float(value)


def round_score(value: float) -> float:
    """Round for output (one decimal place)."""
    return round(float(value), 1)
