"""
Reaction time scorer.

Measures cognitive-motor speed from per-trial latencies:
1. Reaction time score (0-100): mean latency on a linear scale
   (280 ms -> 100, 800 ms -> 0)
2. Consistency score (0-100): latency standard deviation on a linear scale
   (60 ms -> 100, 250 ms -> 0)

Score interpretation (overall, higher = better):
- 70-100: Low risk
- 50-69: Moderate risk
- 0-49: High risk

Historical variants anchored the speed scale at 250/750 ms instead.
"""

import logging
import math
from typing import Sequence

from .errors import InvalidInputError, require_samples
from .numeric import clamp, mean, round_score, stddev
from .results import ReactionResult, ScoreStatus
from .risk import REACTION_RISK_CUTS, RiskLevel, classify_risk

logger = logging.getLogger(__name__)

MIN_TRIALS = 3

FAST_REACTION_MS = 280.0
SLOW_REACTION_MS = 800.0
TIGHT_SPREAD_MS = 60.0
LOOSE_SPREAD_MS = 250.0

REACTION_WEIGHT = 0.6
CONSISTENCY_WEIGHT = 0.4

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough data for a complete analysis. Please complete all trials."
)


def score_reaction(reaction_times_ms: Sequence[float]) -> ReactionResult:
    """
    Score a reaction time test.

    Formula:
        overall = reaction_time_score * 0.6 + consistency_score * 0.4

    Args:
        reaction_times_ms: Elapsed milliseconds per trial (at least one)

    Returns:
        ReactionResult (status INSUFFICIENT_DATA below 3 trials)

    Raises:
        InvalidInputError: Empty sequence, negative or non-finite latency
    """
    times = _validate_times(reaction_times_ms)

    if len(times) < MIN_TRIALS:
        logger.warning(f"Only {len(times)} reaction trials (need {MIN_TRIALS})")
        return _insufficient_result()

    logger.info(f"Scoring reaction time test from {len(times)} trials")

    average_time = mean(times)
    spread = stddev(times)

    reaction_score = _linear_score(average_time, FAST_REACTION_MS, SLOW_REACTION_MS)
    consistency_score = _linear_score(spread, TIGHT_SPREAD_MS, LOOSE_SPREAD_MS)

    overall = combine_reaction_scores(reaction_score, consistency_score)
    risk = classify_risk(round_score(overall), *REACTION_RISK_CUTS)

    logger.info(
        f"Reaction overall score: {overall:.1f}/100 "
        f"(mean {average_time:.0f} ms, sd {spread:.0f} ms, {risk.value} risk)"
    )

    return ReactionResult(
        average_time=round_score(average_time),
        reaction_time_score=round_score(reaction_score),
        consistency_score=round_score(consistency_score),
        overall_score=round_score(overall),
        risk_level=risk
    )


def combine_reaction_scores(reaction_time_score: float, consistency_score: float) -> float:
    """Fixed weighted sum of the reaction subscores."""
    overall = (
        reaction_time_score * REACTION_WEIGHT +
        consistency_score * CONSISTENCY_WEIGHT
    )
    return clamp(overall)


def _linear_score(value: float, best: float, worst: float) -> float:
    """Linear map with best -> 100 and worst -> 0, clamped to [0, 100]."""
    return clamp(100.0 - (value - best) / (worst - best) * 100.0)


def _validate_times(reaction_times_ms: Sequence[float]):
    reaction_times_ms = require_samples(reaction_times_ms, "Reaction times")
    if len(reaction_times_ms) == 0:
        raise InvalidInputError("Reaction test requires at least one trial")

    times = []
    for index, value in enumerate(reaction_times_ms):
        try:
            elapsed = float(value)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Invalid reaction time at trial {index}: {value!r}") from e

        if not math.isfinite(elapsed) or elapsed < 0:
            raise InvalidInputError(f"Invalid reaction time at trial {index}: {value!r}")

        times.append(elapsed)

    return times


def _insufficient_result() -> ReactionResult:
    return ReactionResult(
        average_time=0.0,
        reaction_time_score=0.0,
        consistency_score=0.0,
        overall_score=0.0,
        risk_level=RiskLevel.LOW,
        status=ScoreStatus.INSUFFICIENT_DATA,
        message=INSUFFICIENT_DATA_MESSAGE
    )
