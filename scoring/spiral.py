"""
Spiral drawing scorer.

Derives motor-control subscores from a timestamped 2D pointer trajectory:
1. Tremor (0-100, higher = worse): RMS of velocity changes
2. Smoothness (0-100): inverse of mean jerk (second difference of position)
3. Speed (0-100): steadiness of drawing speed (inverse CV)
4. Consistency (0-100): how linearly the radius grows (R² of distance vs index)

Score interpretation (overall, higher = better):
- 75-100: Low risk
- 50-74: Moderate risk
- 0-49: High risk

Engineering approach:
- Finite differences over the raw samples, no resampling
- Near-duplicate samples (dt <= 1 ms) are skipped, never fatal
- Degenerate inputs map to fixed default scores before clamping
- Rounded to one decimal only when the result is built
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .errors import InvalidInputError, require_samples
from .numeric import (
    clamp,
    coefficient_of_variation,
    finite_or,
    linear_regression,
    mean,
    round_score,
)
from .results import ScoreStatus, SpiralResult
from .risk import SPIRAL_RISK_CUTS, RiskLevel, classify_risk

logger = logging.getLogger(__name__)

MIN_POINTS = 50
MIN_DT_SEC = 0.001

TREMOR_RMS_DIVISOR = 20.0
JERK_PENALTY = 5.0

TREMOR_WEIGHT = 0.25
SMOOTHNESS_WEIGHT = 0.30
SPEED_WEIGHT = 0.20
CONSISTENCY_WEIGHT = 0.25

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough drawing data to analyze. Please draw a complete spiral."
)


@dataclass(frozen=True)
class SpiralPoint:
    """Single pointer sample."""
    x: float
    y: float
    timestamp_ms: float


PointLike = Union[SpiralPoint, Mapping, Sequence]


def score_spiral(points: Sequence[PointLike]) -> SpiralResult:
    """
    Score a spiral drawing.

    Formula:
        overall = (100 - tremor) * 0.25 + smoothness * 0.30
                  + speed * 0.20 + consistency * 0.25

    Args:
        points: Ordered samples (SpiralPoint, {'x', 'y', 'timestamp_ms'}
                mapping, or (x, y, t) tuple). Order is temporal order.

    Returns:
        SpiralResult (status INSUFFICIENT_DATA below 50 points)

    Raises:
        InvalidInputError: Empty or malformed point sequence
    """
    xs, ys, ts = _to_arrays(points)

    if len(xs) < MIN_POINTS:
        logger.warning(f"Only {len(xs)} spiral points (need {MIN_POINTS})")
        return _insufficient_result()

    logger.info(f"Scoring spiral drawing from {len(xs)} points")

    tremor = _compute_tremor_score(xs, ys, ts)
    smoothness = _compute_smoothness_score(xs, ys)
    speed = _compute_speed_score(xs, ys, ts)
    consistency = _compute_consistency_score(xs, ys)

    overall = combine_spiral_scores(tremor, smoothness, speed, consistency)
    risk = classify_risk(round_score(overall), *SPIRAL_RISK_CUTS)

    logger.info(f"Spiral overall score: {overall:.1f}/100 ({risk.value} risk)")

    return SpiralResult(
        tremor_score=round_score(tremor),
        smoothness_score=round_score(smoothness),
        speed_score=round_score(speed),
        consistency_score=round_score(consistency),
        overall_score=round_score(overall),
        risk_level=risk
    )


def combine_spiral_scores(
    tremor: float,
    smoothness: float,
    speed: float,
    consistency: float
) -> float:
    """Fixed weighted sum of the spiral subscores (tremor is inverted)."""
    overall = (
        (100.0 - tremor) * TREMOR_WEIGHT +
        smoothness * SMOOTHNESS_WEIGHT +
        speed * SPEED_WEIGHT +
        consistency * CONSISTENCY_WEIGHT
    )
    return clamp(overall)


def _to_arrays(points: Sequence[PointLike]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validate samples and split them into x, y and timestamp arrays."""
    points = require_samples(points, "Spiral points")
    if len(points) == 0:
        raise InvalidInputError("Spiral drawing requires at least one point")

    rows = []
    for index, point in enumerate(points):
        try:
            if isinstance(point, SpiralPoint):
                row = (point.x, point.y, point.timestamp_ms)
            elif isinstance(point, Mapping):
                timestamp = point.get('timestamp_ms', point.get('timestamp'))
                row = (point['x'], point['y'], timestamp)
            else:
                x, y, timestamp = point
                row = (x, y, timestamp)
            row = tuple(float(value) for value in row)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Malformed spiral point at index {index}: {point!r}") from e

        if not all(np.isfinite(row)):
            raise InvalidInputError(f"Non-finite spiral point at index {index}: {point!r}")

        rows.append(row)

    data = np.array(rows, dtype=float)
    return data[:, 0], data[:, 1], data[:, 2]


def _velocities(xs: np.ndarray, ys: np.ndarray, ts: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Per-step velocity components, skipping near-duplicate samples."""
    dt = np.diff(ts) / 1000.0
    valid = dt > MIN_DT_SEC

    vx = np.diff(xs)[valid] / dt[valid]
    vy = np.diff(ys)[valid] / dt[valid]

    return vx, vy


def _compute_tremor_score(xs: np.ndarray, ys: np.ndarray, ts: np.ndarray) -> float:
    """
    Compute tremor score from acceleration magnitude.

    Method:
    - Velocity for each valid step
    - Acceleration = norm of consecutive velocity differences
    - tremor = min(100, RMS(acceleration) / 20)
    """
    if len(xs) < 5:
        return 0.0

    vx, vy = _velocities(xs, ys, ts)
    accelerations = np.hypot(np.diff(vx), np.diff(vy))

    if len(accelerations) < 4:
        return 0.0

    rms = float(np.sqrt(np.mean(accelerations ** 2)))
    if not np.isfinite(rms):
        return 0.0

    return clamp(rms / TREMOR_RMS_DIVISOR)


def _compute_smoothness_score(xs: np.ndarray, ys: np.ndarray) -> float:
    """
    Compute smoothness from jerk.

    Jerk at each interior point is the norm of the second difference of
    position; smoothness = 100 - 5 * mean(jerk).
    """
    if len(xs) < 3:
        return 100.0

    jerk = np.hypot(np.diff(xs, n=2), np.diff(ys, n=2))
    if len(jerk) == 0:
        return 100.0

    return clamp(100.0 - mean(jerk) * JERK_PENALTY)


def _compute_speed_score(xs: np.ndarray, ys: np.ndarray, ts: np.ndarray) -> float:
    """Speed steadiness: 100 - 100 * CV(step speed)."""
    if len(xs) < 2:
        return 0.0

    dt = np.diff(ts) / 1000.0
    valid = dt > MIN_DT_SEC
    if not np.any(valid):
        return 0.0

    distances = np.hypot(np.diff(xs), np.diff(ys))[valid]
    speeds = distances / dt[valid]

    cv = coefficient_of_variation(speeds)
    if cv is None:
        # Zero mean speed: the pen never moved
        return 0.0

    return clamp(finite_or(100.0 - cv * 100.0, 0.0))


def _compute_consistency_score(xs: np.ndarray, ys: np.ndarray) -> float:
    """
    Radial growth consistency.

    Method:
    - Distance of every point from the centroid of all points
    - Regress distance against sample index
    - consistency = 100 * R²
    """
    if len(xs) < 10:
        return 0.0

    distances = np.hypot(xs - np.mean(xs), ys - np.mean(ys))
    fit = linear_regression(np.arange(len(distances)), distances)

    return clamp(fit.r_squared * 100.0)


def _insufficient_result() -> SpiralResult:
    return SpiralResult(
        tremor_score=0.0,
        smoothness_score=0.0,
        speed_score=0.0,
        consistency_score=0.0,
        overall_score=0.0,
        risk_level=RiskLevel.LOW,
        status=ScoreStatus.INSUFFICIENT_DATA,
        message=INSUFFICIENT_DATA_MESSAGE
    )
