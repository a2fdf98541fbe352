"""
Three-band risk classification shared by all modalities.

The classifier itself is modality-agnostic: each scorer passes its own
(low_cut, high_cut) pair. Bands are contiguous and non-overlapping:

    overall >= high_cut            -> Low
    low_cut <= overall < high_cut  -> Moderate
    overall < low_cut              -> High

Scorers classify the reported overall score (rounded to one decimal), so a
result's risk_level always matches its overall_score.
"""

from enum import Enum
from typing import Tuple

from .errors import InvalidInputError


class RiskLevel(Enum):
    """Risk band derived from a modality's overall score."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


# (low_cut, high_cut) per modality. Historical variants also used 50/70 for
# spiral and voice, and 50/75 for tapping and reaction time.
SPIRAL_RISK_CUTS: Tuple[float, float] = (50.0, 75.0)
TAPPING_RISK_CUTS: Tuple[float, float] = (50.0, 70.0)
REACTION_RISK_CUTS: Tuple[float, float] = (50.0, 70.0)
VOICE_RISK_CUTS: Tuple[float, float] = (50.0, 75.0)


def classify_risk(overall: float, low_cut: float, high_cut: float) -> RiskLevel:
    """
    Classify an overall score into a risk band.

    Args:
        overall: Overall score (0-100, higher = better)
        low_cut: Scores below this are High risk
        high_cut: Scores at or above this are Low risk

    Returns:
        RiskLevel
    """
    if low_cut >= high_cut:
        raise InvalidInputError(
            f"Risk cuts must satisfy low_cut < high_cut (got {low_cut}, {high_cut})"
        )

    if overall >= high_cut:
        return RiskLevel.LOW
    if overall >= low_cut:
        return RiskLevel.MODERATE
    return RiskLevel.HIGH
