"""
Immutable result records returned by the modality scorers.

Each modality has its own frozen dataclass carrying:
- Named subscores (0-100, rounded to one decimal)
- overall_score (0-100) and risk_level
- status: OK for a computed result, INSUFFICIENT_DATA for the fixed
  sparse-sample fallback (so a genuine zero score cannot be mistaken for it)
- message: fallback explanation, None when status is OK
- recommendation: filled later by the recommendation collaborator

Results are flat and JSON-serializable through to_dict(), ready for the
result store and the REST layer.
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from .risk import RiskLevel


class ScoreStatus(Enum):
    """Outcome tag for a scoring call that did not fail."""
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"


class ScoreResultMixin:
    """Behaviour shared by all modality results."""

    test_type: ClassVar[str] = ""
    subscore_fields: ClassVar[Tuple[str, ...]] = ()

    @property
    def is_insufficient(self) -> bool:
        return self.status is ScoreStatus.INSUFFICIENT_DATA

    def subscores(self) -> Dict[str, float]:
        """Subscore name -> value, in declaration order."""
        return {name: getattr(self, name) for name in self.subscore_fields}

    def with_recommendation(self, recommendation: str):
        """Return a copy carrying the recommendation text."""
        return replace(self, recommendation=recommendation)

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-serializable record."""
        record = {'test_type': self.test_type}
        for key, value in asdict(self).items():
            record[key] = value.value if isinstance(value, Enum) else value
        return record


@dataclass(frozen=True)
class SpiralResult(ScoreResultMixin):
    """
    Spiral drawing scores.

    Attributes:
        tremor_score: Acceleration-based tremor (0-100, higher = worse)
        smoothness_score: Inverse jerk (0-100, higher = better)
        speed_score: Drawing-speed steadiness (0-100, higher = better)
        consistency_score: Linearity of radial growth (0-100, higher = better)
        overall_score: Weighted composite (0-100, higher = better)
    """
    tremor_score: float
    smoothness_score: float
    speed_score: float
    consistency_score: float
    overall_score: float
    risk_level: RiskLevel
    status: ScoreStatus = ScoreStatus.OK
    message: Optional[str] = None
    recommendation: Optional[str] = None

    test_type: ClassVar[str] = "spiral"
    subscore_fields: ClassVar[Tuple[str, ...]] = (
        'tremor_score', 'smoothness_score', 'speed_score', 'consistency_score'
    )


@dataclass(frozen=True)
class TappingResult(ScoreResultMixin):
    """
    Finger tapping scores.

    Attributes:
        tap_count: Number of taps recorded
        taps_per_second: tap_count / duration
        speed_score: Tapping rate (0-100)
        consistency_score: Inter-tap interval regularity (0-100)
        rhythm_score: Lag-1 interval autocorrelation (0-100)
        fatigue_score: Resistance to slowing down (0-100)
        overall_score: Weighted composite (0-100)
    """
    tap_count: int
    taps_per_second: float
    speed_score: float
    consistency_score: float
    rhythm_score: float
    fatigue_score: float
    overall_score: float
    risk_level: RiskLevel
    status: ScoreStatus = ScoreStatus.OK
    message: Optional[str] = None
    recommendation: Optional[str] = None

    test_type: ClassVar[str] = "tapping"
    subscore_fields: ClassVar[Tuple[str, ...]] = (
        'speed_score', 'consistency_score', 'rhythm_score', 'fatigue_score'
    )


@dataclass(frozen=True)
class ReactionResult(ScoreResultMixin):
    """
    Reaction time scores.

    Attributes:
        average_time: Mean latency in milliseconds
        reaction_time_score: Speed (0-100)
        consistency_score: Trial-to-trial steadiness (0-100)
        overall_score: Weighted composite (0-100)
    """
    average_time: float
    reaction_time_score: float
    consistency_score: float
    overall_score: float
    risk_level: RiskLevel
    status: ScoreStatus = ScoreStatus.OK
    message: Optional[str] = None
    recommendation: Optional[str] = None

    test_type: ClassVar[str] = "reaction"
    subscore_fields: ClassVar[Tuple[str, ...]] = (
        'reaction_time_score', 'consistency_score'
    )


@dataclass(frozen=True)
class VoiceResult(ScoreResultMixin):
    """Voice scores mapped from a qualitative assessment (tremor: higher = worse)."""
    pitch_score: float
    volume_score: float
    clarity_score: float
    tremor_score: float
    overall_score: float
    risk_level: RiskLevel
    status: ScoreStatus = ScoreStatus.OK
    message: Optional[str] = None
    recommendation: Optional[str] = None

    test_type: ClassVar[str] = "voice"
    subscore_fields: ClassVar[Tuple[str, ...]] = (
        'pitch_score', 'volume_score', 'clarity_score', 'tremor_score'
    )
