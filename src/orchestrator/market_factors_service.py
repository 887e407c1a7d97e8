"""Facade that wires the market factor engine components together."""

import logging
from typing import Any, Mapping, Sequence

from src.accuracy.accuracy_scorer import AccuracyScorer
from src.accuracy.prediction_tracker import PredictionTracker
from src.config.settings import Settings
from src.correlation.correlation_store import CorrelationStore
from src.models.correlation import CorrelatedFactor, CorrelationRecord, CorrelationStrength
from src.models.prediction import (
    IndicatorAccuracyStats,
    PredictionAction,
    PredictionOutcome,
    PredictionRecord,
)
from src.scoring.models import FactorReading, IndicatorReading, WeightedScoreResult
from src.scoring.recommendation_builder import RecommendationBuilder
from src.scoring.weighted_scoring_engine import WeightedScoringEngine
from src.storage import Repositories, create_repositories

logger = logging.getLogger(__name__)


class MarketFactorsService:
    """Single entry point for correlations, prediction tracking and scoring.

    Construct one per process and pass it to request handlers. Every
    component gets its storage through the injected repositories.
    """

    def __init__(self, settings: Settings, repositories: Repositories):
        """Wire all components from settings.

        Args:
            settings: Engine configuration.
            repositories: Storage for correlations, predictions and accuracy.
        """
        self._settings = settings
        self.correlation_store = CorrelationStore(repositories.correlations)
        self.accuracy_scorer = AccuracyScorer(
            repository=repositories.accuracy,
            minimum_sample_size=settings.accuracy.minimum_sample_size,
            neutral_multiplier=settings.accuracy.neutral_multiplier,
            base_multiplier=settings.accuracy.base_multiplier,
            accuracy_slope=settings.accuracy.accuracy_slope,
            min_multiplier=settings.accuracy.min_multiplier,
            max_multiplier=settings.accuracy.max_multiplier,
        )
        self.prediction_tracker = PredictionTracker(
            repository=repositories.predictions,
            accuracy_scorer=self.accuracy_scorer,
        )
        scoring = settings.scoring
        self.scoring_engine = WeightedScoringEngine(
            correlation_store=self.correlation_store,
            accuracy_scorer=self.accuracy_scorer,
            recommendation_builder=RecommendationBuilder(
                buy_threshold=scoring.buy_threshold,
                sell_threshold=scoring.sell_threshold,
                weak_band=scoring.weak_band,
                moderate_band=scoring.moderate_band,
                low_risk_confidence=scoring.low_risk_confidence,
                medium_risk_confidence=scoring.medium_risk_confidence,
                max_reasons=scoring.max_reasons,
            ),
            factor_weight=scoring.factor_weight,
            evidence_saturation=scoring.evidence_saturation,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "MarketFactorsService":
        """Build the service with repositories for the configured storage backend."""
        return cls(settings, create_repositories(settings.storage))

    # Correlations

    def set_correlation(self, symbol: str, factor: str, coefficient: float) -> None:
        self.correlation_store.set_correlation(symbol, factor, coefficient)

    def analyze_correlation(self, symbol: str, factor: str) -> float:
        return self.correlation_store.analyze_correlation(symbol, factor)

    def get_correlated_factors(
        self, symbol: str, threshold: float | None = None
    ) -> list[CorrelatedFactor]:
        """Get factors meeting a threshold, defaulting to the configured one."""
        if threshold is None:
            threshold = self._settings.correlation.default_threshold
        return self.correlation_store.get_correlated_factors(symbol, threshold)

    def get_correlations_for_symbol(self, symbol: str) -> list[CorrelationRecord]:
        return self.correlation_store.get_correlations_for_symbol(symbol)

    def get_correlation_matrix(self) -> dict[str, float]:
        return self.correlation_store.get_correlation_matrix()

    def get_correlation_strength(self, coefficient: float) -> CorrelationStrength:
        return self.correlation_store.get_correlation_strength(coefficient)

    # Predictions and accuracy

    def track_indicator_prediction(
        self,
        indicator: str,
        symbol: str,
        action: PredictionAction | str,
        confidence: float,
        price_at_prediction: float,
        horizon: str,
    ) -> str:
        return self.prediction_tracker.track_indicator_prediction(
            indicator, symbol, action, confidence, price_at_prediction, horizon
        )

    def update_indicator_accuracy(
        self,
        prediction_id: str,
        outcome: PredictionOutcome | str,
        actual_price: float,
    ) -> PredictionRecord:
        return self.prediction_tracker.update_indicator_accuracy(
            prediction_id, outcome, actual_price
        )

    def get_prediction(self, prediction_id: str) -> PredictionRecord:
        return self.prediction_tracker.get_prediction(prediction_id)

    def get_pending_predictions(self, indicator: str | None = None) -> list[PredictionRecord]:
        return self.prediction_tracker.get_pending_predictions(indicator)

    def get_indicator_accuracy(self, indicator: str) -> IndicatorAccuracyStats:
        return self.accuracy_scorer.get_indicator_accuracy(indicator)

    def get_all_indicator_accuracy(self) -> list[IndicatorAccuracyStats]:
        return self.accuracy_scorer.get_all_indicator_accuracy()

    def get_indicator_performance_score(self, indicator: str) -> float:
        return self.accuracy_scorer.get_indicator_performance_score(indicator)

    # Scoring

    def calculate_weighted_score(
        self,
        symbol: str,
        market_factors: Sequence[FactorReading | Mapping[str, Any]],
        technical_indicators: Sequence[IndicatorReading | Mapping[str, Any]],
    ) -> WeightedScoreResult:
        return self.scoring_engine.calculate_weighted_score(
            symbol, market_factors, technical_indicators
        )
