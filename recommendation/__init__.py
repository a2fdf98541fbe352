"""
Recommendation module.

Turns a scored result into user-facing guidance:
- RecommendationProvider: interface any backend implements
- TemplateRecommendationProvider: static text per test type and risk level
- attach_recommendation: returns a new result carrying the text, or raises
  RecommendationUnavailable without touching the scores
"""

from .generator import (
    DEFAULT_TEMPLATES,
    RecommendationProvider,
    TemplateRecommendationProvider,
    attach_recommendation
)

__all__ = [
    'DEFAULT_TEMPLATES',
    'RecommendationProvider',
    'TemplateRecommendationProvider',
    'attach_recommendation',
]
