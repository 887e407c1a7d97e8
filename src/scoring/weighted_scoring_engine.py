"""Weighted scoring engine combining factor correlations and indicator accuracy."""

import logging
from datetime import datetime
from typing import Any, Mapping, Sequence

from src.accuracy.accuracy_scorer import AccuracyScorer
from src.correlation.correlation_store import CorrelationStore
from src.models.validation import require_name

from .models import (
    CombinedScore,
    FactorAnalysisResult,
    FactorDetail,
    FactorReading,
    IndicatorAnalysisResult,
    IndicatorDetail,
    IndicatorReading,
    WeightedScoreResult,
)
from .recommendation_builder import RecommendationBuilder

logger = logging.getLogger(__name__)


class WeightedScoringEngine:
    """Scores a symbol from market factor readings and technical indicator readings.

    Scoring pipeline:
    1. Factor leg: each factor value is weighted by its correlation with the
       symbol and normalized by the sum of absolute correlations.
    2. Indicator leg: each indicator value is weighted by its accuracy-derived
       performance multiplier and normalized by the sum of multipliers.
    3. The legs are blended with ``factor_weight`` and confidence grows with
       the evidence weight: correlations plus history-backed indicator weight.
    4. RecommendationBuilder derives action, strength, risk and reasoning.

    Reads from the stores are not isolated from concurrent writes; a score
    may reflect a slightly stale correlation or accuracy snapshot.
    """

    def __init__(
        self,
        correlation_store: CorrelationStore,
        accuracy_scorer: AccuracyScorer,
        recommendation_builder: RecommendationBuilder,
        factor_weight: float = 0.4,
        evidence_saturation: float = 6.0,
    ):
        """Initialize the engine.

        Args:
            correlation_store: Source of symbol/factor correlations.
            accuracy_scorer: Source of indicator performance multipliers.
            recommendation_builder: Builds the final recommendation.
            factor_weight: Blend weight of the factor leg (indicators get the rest).
            evidence_saturation: Total evidence weight at which confidence is 1.0.
        """
        self._correlations = correlation_store
        self._accuracy = accuracy_scorer
        self._builder = recommendation_builder
        self._factor_weight = factor_weight
        self._evidence_saturation = evidence_saturation

    def analyze_factors(
        self, symbol: str, market_factors: Sequence[FactorReading]
    ) -> FactorAnalysisResult:
        """Weight factor readings by their correlation with ``symbol``."""
        details = []
        total_contribution = 0.0
        total_weight = 0.0

        for reading in market_factors:
            weight = self._correlations.analyze_correlation(symbol, reading.symbol)
            contribution = reading.value * weight
            total_contribution += contribution
            total_weight += abs(weight)
            details.append(
                FactorDetail(
                    factor=reading.symbol,
                    value=reading.value,
                    correlation=weight,
                    weighted_contribution=contribution,
                )
            )

        normalized = total_contribution / total_weight if total_weight > 0 else 0.0

        return FactorAnalysisResult(
            normalized_score=normalized,
            total_weight=total_weight,
            factors_analyzed=len(details),
            details=tuple(details),
        )

    def analyze_indicators(
        self, technical_indicators: Sequence[IndicatorReading]
    ) -> IndicatorAnalysisResult:
        """Weight indicator readings by their historical performance."""
        details = []
        total_contribution = 0.0
        total_weight = 0.0
        evidence_weight = 0.0

        for reading in technical_indicators:
            perf_weight = self._accuracy.get_indicator_performance_score(reading.name)
            stats = self._accuracy.get_indicator_accuracy(reading.name)
            contribution = reading.value * perf_weight
            total_contribution += contribution
            total_weight += perf_weight
            sample_ratio = self._accuracy.get_indicator_sample_ratio(reading.name)
            evidence_weight += perf_weight * sample_ratio
            details.append(
                IndicatorDetail(
                    indicator=reading.name,
                    value=reading.value,
                    performance_weight=perf_weight,
                    weighted_contribution=contribution,
                    accuracy=stats.average_accuracy if stats.has_data else None,
                )
            )

        normalized = total_contribution / total_weight if total_weight > 0 else 0.0

        return IndicatorAnalysisResult(
            normalized_score=normalized,
            total_weight=total_weight,
            indicators_analyzed=len(details),
            details=tuple(details),
            evidence_weight=evidence_weight,
        )

    def calculate_confidence(
        self,
        factor_analysis: FactorAnalysisResult,
        indicator_analysis: IndicatorAnalysisResult,
    ) -> float:
        """Confidence in [0, 1] from the evidence weight of both legs.

        Factors count by abs(correlation). Indicators count by performance
        weight scaled by how much resolved history backs it, so indicators
        with no resolved predictions add no confidence.
        """
        evidence = factor_analysis.total_weight + indicator_analysis.evidence_weight
        return min(1.0, evidence / self._evidence_saturation)

    def calculate_weighted_score(
        self,
        symbol: str,
        market_factors: Sequence[FactorReading | Mapping[str, Any]],
        technical_indicators: Sequence[IndicatorReading | Mapping[str, Any]],
    ) -> WeightedScoreResult:
        """Calculate the weighted score and recommendation for a symbol.

        Args:
            symbol: Symbol to score.
            market_factors: Factor readings, as FactorReading or
                ``{"symbol": ..., "value": ...}`` mappings.
            technical_indicators: Indicator readings, as IndicatorReading or
                ``{"name": ..., "value": ...}`` mappings.

        Returns:
            Read-only result with both analyses, the combined score and the
            recommendation.

        Raises:
            ValidationError: If the symbol or any reading is malformed.
        """
        require_name(symbol, "symbol")
        factors = [_as_factor(f) for f in market_factors]
        indicators = [_as_indicator(i) for i in technical_indicators]

        factor_analysis = self.analyze_factors(symbol, factors)
        indicator_analysis = self.analyze_indicators(indicators)

        weighted_score = (
            self._factor_weight * factor_analysis.normalized_score
            + (1 - self._factor_weight) * indicator_analysis.normalized_score
        )
        confidence = self.calculate_confidence(factor_analysis, indicator_analysis)
        combined = CombinedScore(weighted_score=weighted_score, confidence=confidence)

        recommendation = self._builder.build(
            score=weighted_score,
            confidence=confidence,
            factor_analysis=factor_analysis,
            indicator_analysis=indicator_analysis,
        )

        logger.debug(
            f"{symbol}: factors={factor_analysis.normalized_score:+.3f} "
            f"(w={factor_analysis.total_weight:.2f}), "
            f"indicators={indicator_analysis.normalized_score:+.3f} "
            f"(w={indicator_analysis.total_weight:.2f}), "
            f"score={weighted_score:+.3f}, confidence={confidence:.2f} "
            f"-> {recommendation.action.value}"
        )

        return WeightedScoreResult(
            symbol=symbol,
            factor_analysis=factor_analysis,
            indicator_analysis=indicator_analysis,
            combined_score=combined,
            recommendation=recommendation,
            calculated_at=datetime.now(),
        )


def _as_factor(reading: FactorReading | Mapping[str, Any]) -> FactorReading:
    if isinstance(reading, FactorReading):
        return reading
    return FactorReading.from_dict(reading)


def _as_indicator(reading: IndicatorReading | Mapping[str, Any]) -> IndicatorReading:
    if isinstance(reading, IndicatorReading):
        return reading
    return IndicatorReading.from_dict(reading)
