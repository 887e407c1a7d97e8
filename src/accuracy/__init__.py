"""Indicator prediction tracking and accuracy scoring."""

from .accuracy_scorer import AccuracyScorer
from .prediction_tracker import PredictionTracker

__all__ = [
    "AccuracyScorer",
    "PredictionTracker",
]
