"""Indicator accuracy statistics and performance weighting."""

import logging

from src.models.prediction import IndicatorAccuracyStats, PredictionAction
from src.storage.base import AccuracyRepository

logger = logging.getLogger(__name__)


class AccuracyScorer:
    """Maintains running accuracy per indicator and derives a weight multiplier.

    Counters only change through ``record_outcome``, which PredictionTracker
    calls once per resolved prediction.
    """

    def __init__(
        self,
        repository: AccuracyRepository,
        minimum_sample_size: int = 5,
        neutral_multiplier: float = 1.0,
        base_multiplier: float = 0.5,
        accuracy_slope: float = 1.5,
        min_multiplier: float = 0.5,
        max_multiplier: float = 2.0,
    ):
        """Initialize the scorer.

        Args:
            repository: Persistence for accuracy stats.
            minimum_sample_size: Resolved predictions needed before accuracy counts.
            neutral_multiplier: Multiplier returned below the sample size.
            base_multiplier: Multiplier at 0% accuracy before clamping.
            accuracy_slope: Multiplier gained going from 0% to 100% accuracy.
            min_multiplier: Lower clamp bound.
            max_multiplier: Upper clamp bound.
        """
        self._repository = repository
        self._min_samples = minimum_sample_size
        self._neutral = neutral_multiplier
        self._base = base_multiplier
        self._slope = accuracy_slope
        self._min_multiplier = min_multiplier
        self._max_multiplier = max_multiplier

    def get_indicator_accuracy(self, indicator: str) -> IndicatorAccuracyStats:
        """Get accuracy stats for an indicator.

        Returns:
            Stats snapshot. An indicator with no resolved predictions gets
            all-zero stats rather than an error.
        """
        stats = self._repository.get(indicator)
        if stats is None:
            return IndicatorAccuracyStats(indicator=indicator)
        return stats

    def get_all_indicator_accuracy(self) -> list[IndicatorAccuracyStats]:
        """Get stats for every indicator with history, sorted by name."""
        return sorted(self._repository.list_all(), key=lambda s: s.indicator)

    def get_indicator_performance_score(self, indicator: str) -> float:
        """Get the weight multiplier for an indicator's signals.

        Below ``minimum_sample_size`` resolved predictions the neutral
        multiplier is returned. Otherwise the multiplier rises linearly with
        accuracy (0% -> 0.5x, 50% -> 1.25x, 100% -> 2.0x with defaults) and is
        clamped to [min_multiplier, max_multiplier].
        """
        stats = self.get_indicator_accuracy(indicator)
        if stats.total_predictions < self._min_samples:
            return self._neutral

        score = self._base + (stats.average_accuracy / 100) * self._slope
        return max(self._min_multiplier, min(self._max_multiplier, score))

    def get_indicator_sample_ratio(self, indicator: str) -> float:
        """Share of ``minimum_sample_size`` the indicator has resolved, capped at 1.0."""
        stats = self.get_indicator_accuracy(indicator)
        return min(1.0, stats.total_predictions / self._min_samples)

    def record_outcome(
        self,
        indicator: str,
        action: PredictionAction,
        was_correct: bool,
        confidence: float,
    ) -> IndicatorAccuracyStats:
        """Count one resolved prediction for an indicator.

        Args:
            indicator: Indicator name.
            action: Action the prediction made.
            was_correct: Whether the prediction was correct.
            confidence: Confidence the prediction carried.

        Returns:
            Updated stats snapshot.
        """
        stats = self._repository.increment(indicator, action, was_correct, confidence)
        logger.info(
            f"{indicator} accuracy now {stats.correct_predictions}/{stats.total_predictions} "
            f"({stats.average_accuracy:.1f}%)"
        )
        return stats
