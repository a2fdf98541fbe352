"""
Finger tapping scorer.

Measures motor speed and regularity from tap timestamps:
1. Speed (0-100): taps per second on a piecewise-linear ramp
2. Consistency (0-100): inverse CV of inter-tap intervals
3. Rhythm (0-100): lag-1 autocorrelation of inter-tap intervals
4. Fatigue resistance (0-100): slowdown of the second half vs the first

Score interpretation (overall, higher = better):
- 70-100: Low risk
- 50-69: Moderate risk
- 0-49: High risk

Clinical rationale:
- Reduced tapping rate and amplitude decrement are classic bradykinesia signs
- Irregular intervals indicate impaired motor timing
- Progressive slowing within a single trial indicates fatigue (sequence effect)
"""

import logging
import math
from typing import Sequence

import numpy as np

from .errors import InvalidInputError, require_samples
from .numeric import (
    autocorrelation_lag1,
    clamp,
    coefficient_of_variation,
    finite_or,
    mean,
    round_score,
)
from .results import ScoreStatus, TappingResult
from .risk import TAPPING_RISK_CUTS, RiskLevel, classify_risk

logger = logging.getLogger(__name__)

MIN_TAPS = 10
MIN_TAPS_PER_HALF = 5

# Speed ramp: taps/s -> score, linear between knots, flat outside
SPEED_RAMP_TAPS_PER_SEC = [0.0, 1.5, 3.0, 4.5, 6.0]
SPEED_RAMP_SCORES = [0.0, 30.0, 60.0, 80.0, 100.0]

SPEED_WEIGHT = 0.35
CONSISTENCY_WEIGHT = 0.35
RHYTHM_WEIGHT = 0.20
FATIGUE_WEIGHT = 0.10

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough taps recorded for a complete analysis. "
    "Please tap for the full duration."
)


def score_tapping(
    tap_timestamps_ms: Sequence[float],
    duration_seconds: float
) -> TappingResult:
    """
    Score a finger tapping test.

    Formula:
        overall = speed * 0.35 + consistency * 0.35 + rhythm * 0.20 + fatigue * 0.10

    Args:
        tap_timestamps_ms: Tap offsets from test start in milliseconds (ascending)
        duration_seconds: Test duration in seconds

    Returns:
        TappingResult (status INSUFFICIENT_DATA below 10 taps)

    Raises:
        InvalidInputError: Non-positive duration or malformed timestamps
    """
    duration = _validate_duration(duration_seconds)
    taps_ms = _validate_timestamps(tap_timestamps_ms)

    tap_count = len(taps_ms)
    taps_per_second = tap_count / duration

    if tap_count < MIN_TAPS:
        logger.warning(f"Only {tap_count} taps recorded (need {MIN_TAPS})")
        return _insufficient_result(tap_count, taps_per_second)

    logger.info(f"Scoring tapping test: {tap_count} taps over {duration:.1f}s")

    # Differences are taken in milliseconds so equal spacing stays exactly equal
    intervals = np.diff(taps_ms) / 1000.0

    speed = _compute_speed_score(taps_per_second)
    consistency = _compute_consistency_score(intervals)
    rhythm = _compute_rhythm_score(intervals)
    fatigue = _compute_fatigue_score(taps_ms, duration)

    overall = combine_tapping_scores(speed, consistency, rhythm, fatigue)
    risk = classify_risk(round_score(overall), *TAPPING_RISK_CUTS)

    logger.info(
        f"Tapping overall score: {overall:.1f}/100 "
        f"({taps_per_second:.2f} taps/s, {risk.value} risk)"
    )

    return TappingResult(
        tap_count=tap_count,
        taps_per_second=round_score(taps_per_second),
        speed_score=round_score(speed),
        consistency_score=round_score(consistency),
        rhythm_score=round_score(rhythm),
        fatigue_score=round_score(fatigue),
        overall_score=round_score(overall),
        risk_level=risk
    )


def combine_tapping_scores(
    speed: float,
    consistency: float,
    rhythm: float,
    fatigue: float
) -> float:
    """Fixed weighted sum of the tapping subscores."""
    overall = (
        speed * SPEED_WEIGHT +
        consistency * CONSISTENCY_WEIGHT +
        rhythm * RHYTHM_WEIGHT +
        fatigue * FATIGUE_WEIGHT
    )
    return clamp(overall)


def _validate_duration(duration_seconds: float) -> float:
    try:
        duration = float(duration_seconds)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid test duration: {duration_seconds!r}") from e

    if not math.isfinite(duration) or duration <= 0:
        raise InvalidInputError(f"Test duration must be positive, got {duration_seconds!r}")

    return duration


def _validate_timestamps(tap_timestamps_ms: Sequence[float]) -> np.ndarray:
    taps = require_samples(tap_timestamps_ms, "Tap timestamps")

    try:
        taps = np.asarray(taps, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError("Tap timestamps must be numbers") from e

    if taps.ndim != 1:
        raise InvalidInputError("Tap timestamps must be a flat sequence")

    if len(taps) == 0:
        return taps

    if not np.all(np.isfinite(taps)) or np.any(taps < 0):
        raise InvalidInputError("Tap timestamps must be finite, non-negative offsets")

    if np.any(np.diff(taps) < 0):
        raise InvalidInputError("Tap timestamps must be in ascending order")

    return taps


def _compute_speed_score(taps_per_second: float) -> float:
    """
    Map tapping rate onto the speed ramp.

    >= 6 taps/s -> 100, 4.5 -> 80, 3 -> 60, 1.5 -> 30, 0 -> 0,
    linear in between.
    """
    score = np.interp(taps_per_second, SPEED_RAMP_TAPS_PER_SEC, SPEED_RAMP_SCORES)
    return clamp(score)


def _compute_consistency_score(intervals: np.ndarray) -> float:
    """Interval regularity: 100 - 100 * CV(intervals)."""
    if len(intervals) < 2:
        return 50.0

    cv = coefficient_of_variation(intervals)
    if cv is None:
        return 50.0

    return clamp(finite_or(100.0 - cv * 100.0, 50.0))


def _compute_rhythm_score(intervals: np.ndarray) -> float:
    """
    Rhythm regularity from lag-1 autocorrelation.

    rhythm = clamp((r1 + 0.5) * 100); perfectly even intervals score 100.
    """
    if len(intervals) < 3:
        return 50.0

    autocorr = autocorrelation_lag1(intervals)
    if autocorr is None:
        return 100.0

    return clamp(finite_or((autocorr + 0.5) * 100.0, 50.0))


def _compute_fatigue_score(taps_ms: np.ndarray, duration: float) -> float:
    """
    Fatigue resistance from the slowdown between test halves.

    Method:
    - Split taps at duration / 2 (early: t < mid, late: t >= mid)
    - Mean inter-tap interval within each half
    - fatigue = 100 - percent increase of the late mean over the early mean
    """
    midpoint_ms = duration * 1000.0 / 2.0
    early = taps_ms[taps_ms < midpoint_ms]
    late = taps_ms[taps_ms >= midpoint_ms]

    if len(early) < MIN_TAPS_PER_HALF or len(late) < MIN_TAPS_PER_HALF:
        return 100.0

    early_mean = mean(np.diff(early))
    late_mean = mean(np.diff(late))

    if early_mean == 0:
        return 100.0

    percent_increase = (late_mean - early_mean) / early_mean * 100.0

    return clamp(finite_or(100.0 - percent_increase, 100.0))


def _insufficient_result(tap_count: int, taps_per_second: float) -> TappingResult:
    return TappingResult(
        tap_count=tap_count,
        taps_per_second=round_score(taps_per_second),
        speed_score=0.0,
        consistency_score=0.0,
        rhythm_score=0.0,
        fatigue_score=0.0,
        overall_score=0.0,
        risk_level=RiskLevel.LOW,
        status=ScoreStatus.INSUFFICIENT_DATA,
        message=INSUFFICIENT_DATA_MESSAGE
    )
