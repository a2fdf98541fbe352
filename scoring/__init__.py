"""
Biomarker scoring engine.

This package turns raw interaction signals into bounded, comparable scores:
1. Spiral drawing: tremor, smoothness, speed, consistency
2. Finger tapping: speed, consistency, rhythm, fatigue resistance
3. Reaction time: speed, consistency
4. Voice: pitch, volume, clarity, tremor (from a qualitative assessment)
5. Tremor trend: severity and stability of wearable tremor readings

All scores are:
- Bounded (0-100 scale, rounded to one decimal)
- Deterministic (pure functions, no I/O, no shared state)
- Non-diagnostic (screening indicators, not a medical diagnosis)
"""

from .dispatch import TEST_TYPES, score_test
from .errors import InvalidInputError, RecommendationUnavailable
from .reaction_time import score_reaction
from .results import ReactionResult, ScoreStatus, SpiralResult, TappingResult, VoiceResult
from .risk import RiskLevel, classify_risk
from .spiral import SpiralPoint, score_spiral
from .tapping import score_tapping
from .tremor_trend import TremorReading, TremorTrendResult, analyze_tremor_trend
from .voice import VoiceQualitativeAssessment, score_voice

__all__ = [
    'TEST_TYPES',
    'score_test',
    'score_spiral',
    'score_tapping',
    'score_reaction',
    'score_voice',
    'analyze_tremor_trend',
    'classify_risk',
    'RiskLevel',
    'ScoreStatus',
    'SpiralPoint',
    'SpiralResult',
    'TappingResult',
    'ReactionResult',
    'VoiceResult',
    'VoiceQualitativeAssessment',
    'TremorReading',
    'TremorTrendResult',
    'InvalidInputError',
    'RecommendationUnavailable',
]
