"""Shared data models for the market factor engine."""

from src.models.correlation import CorrelatedFactor, CorrelationRecord, CorrelationStrength
from src.models.errors import (
    AlreadyResolvedError,
    MarketFactorError,
    NotFoundError,
    ValidationError,
)
from src.models.prediction import (
    IndicatorAccuracyStats,
    PredictionAction,
    PredictionOutcome,
    PredictionRecord,
    PredictionStatus,
)

__all__ = [
    "AlreadyResolvedError",
    "CorrelatedFactor",
    "CorrelationRecord",
    "CorrelationStrength",
    "IndicatorAccuracyStats",
    "MarketFactorError",
    "NotFoundError",
    "PredictionAction",
    "PredictionOutcome",
    "PredictionRecord",
    "PredictionStatus",
    "ValidationError",
]
