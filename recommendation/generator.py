"""
Recommendation generation for scored tests.

The scoring engine only hands over (test type, subscores, overall score,
risk level); the narrative comes from a RecommendationProvider. The
template provider shipped here is a static lookup keyed by test type and
risk level, optionally overridden from configuration. Other backends (for
example a hosted language model) implement the same generate() method.

Failure to produce text never invalidates scores: attach_recommendation()
raises RecommendationUnavailable carrying the untouched numeric result.
"""

import logging
from typing import Dict, Mapping, Optional

from scoring.errors import RecommendationUnavailable
from scoring.risk import RiskLevel
from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: Dict[str, Dict[str, str]] = {
    'spiral': {
        'Low': "No significant irregularities detected in your drawing. Continue regular monitoring.",
        'Moderate': "Some irregularities detected in your drawing. Consider retesting and consulting a healthcare provider if symptoms persist.",
        'High': "Significant irregularities detected in your drawing. We strongly recommend scheduling an appointment with a neurologist for comprehensive evaluation.",
    },
    'tapping': {
        'Low': "No significant irregularities detected. Continue regular monitoring.",
        'Moderate': "Some irregularities detected. Consider retesting and consulting a healthcare provider if symptoms persist.",
        'High': "Significant irregularities detected. We strongly recommend scheduling an appointment with a neurologist for comprehensive evaluation.",
    },
    'reaction': {
        'Low': "Your reaction times are within the expected range. Continue regular monitoring.",
        'Moderate': "Your reaction times show some slowing or variability. Keep monitoring and consider a consultation if this persists.",
        'High': "Your reaction times are notably slow or inconsistent. We strongly recommend seeing a healthcare provider.",
    },
    'voice': {
        'Low': "No significant vocal biomarkers detected. Continue regular monitoring.",
        'Moderate': "Some irregularities detected. Consider consulting a healthcare provider.",
        'High': "Significant vocal biomarkers detected. We strongly recommend consulting a neurologist for comprehensive evaluation.",
    },
}

# Subscores where a higher value is worse
INVERTED_SUBSCORES = {'tremor_score'}


class RecommendationProvider:
    """Interface for recommendation backends."""

    def generate(
        self,
        test_type: str,
        subscores: Mapping[str, float],
        overall_score: float,
        risk_level: RiskLevel
    ) -> str:
        raise NotImplementedError


class TemplateRecommendationProvider(RecommendationProvider):
    """
    Static template lookup by test type and risk level.

    For Moderate and High risk the weakest component is appended so the
    text points at what drove the score.
    """

    def __init__(self, templates: Optional[Mapping[str, Mapping[str, str]]] = None):
        merged = {test_type: dict(texts) for test_type, texts in DEFAULT_TEMPLATES.items()}
        for test_type, texts in (templates or {}).items():
            merged.setdefault(test_type, {}).update(texts)
        self.templates = merged

    @classmethod
    def from_config(cls, config: Mapping) -> 'TemplateRecommendationProvider':
        """Build from the 'recommendations.templates' config section."""
        return cls(get_nested_config(config, 'recommendations.templates', default=None))

    def generate(
        self,
        test_type: str,
        subscores: Mapping[str, float],
        overall_score: float,
        risk_level: RiskLevel
    ) -> str:
        text = self.templates.get(test_type, {}).get(risk_level.value)
        if not text:
            raise KeyError(f"No template for {test_type}/{risk_level.value}")

        if risk_level is RiskLevel.LOW or not subscores:
            return text

        name, value = _weakest_component(subscores)
        label = name.replace('_score', '').replace('_', ' ')
        return f"{text} Weakest area: {label} ({value:.1f}/100)."


def attach_recommendation(result, provider: RecommendationProvider):
    """
    Return a copy of result carrying a recommendation.

    Insufficient-data results reuse their fixed message.

    Raises:
        RecommendationUnavailable: Provider failed; exc.result holds the
                                   original scores
    """
    if result.is_insufficient:
        return result.with_recommendation(result.message)

    try:
        text = provider.generate(
            result.test_type,
            result.subscores(),
            result.overall_score,
            result.risk_level
        )
    except Exception as e:
        logger.warning(f"Recommendation generation failed for {result.test_type}: {e}")
        raise RecommendationUnavailable(
            f"Recommendation unavailable for {result.test_type} result", result=result
        ) from e

    if not text:
        raise RecommendationUnavailable(
            f"Empty recommendation for {result.test_type} result", result=result
        )

    return result.with_recommendation(text)


def _weakest_component(subscores: Mapping[str, float]):
    """Subscore contributing least, with inverted subscores flipped."""
    def effective(item):
        name, value = item
        return 100.0 - value if name in INVERTED_SUBSCORES else value

    return min(subscores.items(), key=effective)
