# src/scoring/__init__.py
"""Weighted scoring of symbols from market factors and technical indicators."""

from .models import (
    CombinedScore,
    FactorAnalysisResult,
    FactorDetail,
    FactorReading,
    IndicatorAnalysisResult,
    IndicatorDetail,
    IndicatorReading,
    Recommendation,
    RiskLevel,
    Strength,
    WeightedScoreResult,
)
from .recommendation_builder import RecommendationBuilder
from .weighted_scoring_engine import WeightedScoringEngine

__all__ = [
    "CombinedScore",
    "FactorAnalysisResult",
    "FactorDetail",
    "FactorReading",
    "IndicatorAnalysisResult",
    "IndicatorDetail",
    "IndicatorReading",
    "Recommendation",
    "RecommendationBuilder",
    "RiskLevel",
    "Strength",
    "WeightedScoreResult",
    "WeightedScoringEngine",
]
