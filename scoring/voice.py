"""
Voice score mapper.

Maps a qualitative voice assessment (produced by an external classifier,
no audio processing happens here) onto numeric subscores through fixed
lookup tables, then combines them:

    overall = clarity * 0.40 + volume * 0.25 + pitch * 0.20 + (100 - tremor) * 0.15

Vocal markers considered:
- Monopitch and monoloudness (hypokinetic dysarthria)
- Trailing-off volume (hypophonia)
- Slurred or imprecise articulation
- Voice tremor (higher = worse)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type, TypeVar, Union

from .errors import InvalidInputError
from .numeric import clamp, round_score
from .results import VoiceResult
from .risk import VOICE_RISK_CUTS, classify_risk

logger = logging.getLogger(__name__)


class PitchQuality(Enum):
    MONOPITCH = "monopitch"
    VARIED = "varied"
    NATURAL = "natural"


class VolumeQuality(Enum):
    MONOLOUDNESS = "monoloudness"
    TRAILING_OFF = "trailing_off"
    CONSISTENT = "consistent"


class ClarityQuality(Enum):
    SLURRED = "slurred"
    IMPRECISE = "imprecise"
    CRISP = "crisp"


class VoiceTremor(Enum):
    NONE = "none"
    SLIGHT = "slight"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


PITCH_SCORES: Dict[PitchQuality, float] = {
    PitchQuality.MONOPITCH: 20.0,
    PitchQuality.VARIED: 70.0,
    PitchQuality.NATURAL: 95.0,
}

VOLUME_SCORES: Dict[VolumeQuality, float] = {
    VolumeQuality.MONOLOUDNESS: 25.0,
    VolumeQuality.TRAILING_OFF: 50.0,
    VolumeQuality.CONSISTENT: 95.0,
}

CLARITY_SCORES: Dict[ClarityQuality, float] = {
    ClarityQuality.SLURRED: 20.0,
    ClarityQuality.IMPRECISE: 60.0,
    ClarityQuality.CRISP: 95.0,
}

TREMOR_SCORES: Dict[VoiceTremor, float] = {
    VoiceTremor.NONE: 5.0,
    VoiceTremor.SLIGHT: 30.0,
    VoiceTremor.MODERATE: 65.0,
    VoiceTremor.SIGNIFICANT: 90.0,
}

CLARITY_WEIGHT = 0.40
VOLUME_WEIGHT = 0.25
PITCH_WEIGHT = 0.20
TREMOR_WEIGHT = 0.15


@dataclass(frozen=True)
class VoiceQualitativeAssessment:
    """Categorical voice descriptors from the external classifier."""
    pitch: PitchQuality
    volume: VolumeQuality
    clarity: ClarityQuality
    tremor: VoiceTremor

    @classmethod
    def from_labels(
        cls,
        pitch: str,
        volume: str,
        clarity: str,
        tremor: str
    ) -> 'VoiceQualitativeAssessment':
        """Build an assessment from raw labels (case and separator tolerant)."""
        return cls(
            pitch=_parse_label(PitchQuality, pitch, 'pitch'),
            volume=_parse_label(VolumeQuality, volume, 'volume'),
            clarity=_parse_label(ClarityQuality, clarity, 'clarity'),
            tremor=_parse_label(VoiceTremor, tremor, 'tremor'),
        )


AssessmentLike = Union[VoiceQualitativeAssessment, Mapping]


def score_voice(assessment: AssessmentLike) -> VoiceResult:
    """
    Map a qualitative voice assessment to scores.

    Args:
        assessment: VoiceQualitativeAssessment, or a mapping with the
                    'pitch', 'volume', 'clarity' and 'tremor' labels

    Returns:
        VoiceResult

    Raises:
        InvalidInputError: Missing or unknown label
    """
    assessment = _coerce_assessment(assessment)

    logger.info(
        f"Scoring voice assessment: pitch={assessment.pitch.value}, "
        f"volume={assessment.volume.value}, clarity={assessment.clarity.value}, "
        f"tremor={assessment.tremor.value}"
    )

    pitch = PITCH_SCORES[assessment.pitch]
    volume = VOLUME_SCORES[assessment.volume]
    clarity = CLARITY_SCORES[assessment.clarity]
    tremor = TREMOR_SCORES[assessment.tremor]

    overall = combine_voice_scores(pitch, volume, clarity, tremor)
    risk = classify_risk(round_score(overall), *VOICE_RISK_CUTS)

    logger.info(f"Voice overall score: {overall:.1f}/100 ({risk.value} risk)")

    return VoiceResult(
        pitch_score=round_score(pitch),
        volume_score=round_score(volume),
        clarity_score=round_score(clarity),
        tremor_score=round_score(tremor),
        overall_score=round_score(overall),
        risk_level=risk
    )


def combine_voice_scores(pitch: float, volume: float, clarity: float, tremor: float) -> float:
    """Fixed weighted sum of the voice subscores (tremor is inverted)."""
    overall = (
        clarity * CLARITY_WEIGHT +
        volume * VOLUME_WEIGHT +
        pitch * PITCH_WEIGHT +
        (100.0 - tremor) * TREMOR_WEIGHT
    )
    return clamp(overall)


E = TypeVar('E', bound=Enum)


def _parse_label(enum_cls: Type[E], label, field_name: str) -> E:
    if isinstance(label, enum_cls):
        return label

    if not isinstance(label, str):
        raise InvalidInputError(f"Voice {field_name} label must be a string, got {label!r}")

    normalized = label.strip().lower().replace('-', '_').replace(' ', '_')
    try:
        return enum_cls(normalized)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(
            f"Unknown voice {field_name} label {label!r} (expected one of: {allowed})"
        ) from None


def _coerce_assessment(assessment: AssessmentLike) -> VoiceQualitativeAssessment:
    if isinstance(assessment, VoiceQualitativeAssessment):
        return assessment

    if isinstance(assessment, Mapping):
        missing = [key for key in ('pitch', 'volume', 'clarity', 'tremor') if key not in assessment]
        if missing:
            raise InvalidInputError(f"Voice assessment missing labels: {', '.join(missing)}")
        return VoiceQualitativeAssessment.from_labels(
            pitch=assessment['pitch'],
            volume=assessment['volume'],
            clarity=assessment['clarity'],
            tremor=assessment['tremor'],
        )

    raise InvalidInputError(f"Unsupported voice assessment type: {type(assessment).__name__}")
