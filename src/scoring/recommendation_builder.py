"""Recommendation builder for weighted score results."""

from src.models.prediction import PredictionAction

from .models import (
    FactorAnalysisResult,
    IndicatorAnalysisResult,
    Recommendation,
    RiskLevel,
    Strength,
)

NO_EVIDENCE_REASON = "No market factor or indicator evidence available"


class RecommendationBuilder:
    """Turns a combined score and confidence into an actionable recommendation."""

    # Leg scores closer than this are reported as agreeing
    AGREEMENT_TOLERANCE = 0.2

    def __init__(
        self,
        buy_threshold: float = 0.3,
        sell_threshold: float = -0.3,
        weak_band: float = 0.15,
        moderate_band: float = 0.45,
        low_risk_confidence: float = 0.7,
        medium_risk_confidence: float = 0.4,
        max_reasons: int = 3,
    ):
        """Initialize RecommendationBuilder with configurable thresholds.

        Args:
            buy_threshold: Scores strictly above this recommend BUY.
            sell_threshold: Scores strictly below this recommend SELL.
            weak_band: abs(score) below this is WEAK.
            moderate_band: abs(score) below this (and not WEAK) is MODERATE.
            low_risk_confidence: Minimum confidence for LOW risk.
            medium_risk_confidence: Minimum confidence for MEDIUM risk.
            max_reasons: Maximum contribution reasons to cite.
        """
        self.buy_threshold = buy_threshold
        self.sell_threshold = sell_threshold
        self.weak_band = weak_band
        self.moderate_band = moderate_band
        self.low_risk_confidence = low_risk_confidence
        self.medium_risk_confidence = medium_risk_confidence
        self.max_reasons = max_reasons

    def get_action(self, score: float) -> PredictionAction:
        if score > self.buy_threshold:
            return PredictionAction.BUY
        elif score < self.sell_threshold:
            return PredictionAction.SELL
        else:
            return PredictionAction.HOLD

    def get_strength(self, score: float) -> Strength:
        magnitude = abs(score)
        if magnitude < self.weak_band:
            return Strength.WEAK
        elif magnitude < self.moderate_band:
            return Strength.MODERATE
        else:
            return Strength.STRONG

    def get_risk_level(self, confidence: float) -> RiskLevel:
        if confidence >= self.low_risk_confidence:
            return RiskLevel.LOW
        elif confidence >= self.medium_risk_confidence:
            return RiskLevel.MEDIUM
        else:
            return RiskLevel.HIGH

    def build_reasoning(
        self,
        factor_analysis: FactorAnalysisResult,
        indicator_analysis: IndicatorAnalysisResult,
    ) -> tuple[str, ...]:
        """Explain the score from its largest contributions.

        Cites up to ``max_reasons`` non-zero contributions ordered by
        descending absolute value (ties by name), then compares the factor
        and indicator legs when both carry evidence.

        Returns:
            Ordered reasons; a single no-evidence reason when nothing contributed.
        """
        contributions: list[tuple[float, str, str]] = []

        for detail in factor_analysis.details:
            if detail.weighted_contribution == 0:
                continue
            contributions.append((
                detail.weighted_contribution,
                detail.factor,
                f"{detail.factor} is {_bias(detail.weighted_contribution)}: "
                f"{detail.value:+.2f} x {detail.correlation:+.2f} correlation "
                f"= {detail.weighted_contribution:+.3f}",
            ))

        for detail in indicator_analysis.details:
            if detail.weighted_contribution == 0:
                continue
            contributions.append((
                detail.weighted_contribution,
                detail.indicator,
                f"{detail.indicator} is {_bias(detail.weighted_contribution)}: "
                f"{detail.value:+.2f} x {detail.performance_weight:.2f}x performance weight "
                f"= {detail.weighted_contribution:+.3f}",
            ))

        contributions.sort(key=lambda c: (-abs(c[0]), c[1]))
        reasons = [text for _, _, text in contributions[: self.max_reasons]]

        if factor_analysis.total_weight > 0 and indicator_analysis.total_weight > 0:
            factor_score = factor_analysis.normalized_score
            indicator_score = indicator_analysis.normalized_score
            if abs(factor_score - indicator_score) < self.AGREEMENT_TOLERANCE:
                reasons.append("Market factors and technical indicators are in agreement")
            elif factor_score > indicator_score:
                reasons.append("Market factors are more bullish than technical indicators")
            else:
                reasons.append("Technical indicators are more bullish than market factors")

        if not reasons:
            reasons.append(NO_EVIDENCE_REASON)

        return tuple(reasons)

    def build(
        self,
        score: float,
        confidence: float,
        factor_analysis: FactorAnalysisResult,
        indicator_analysis: IndicatorAnalysisResult,
    ) -> Recommendation:
        """Build the complete recommendation.

        Args:
            score: Combined weighted score in [-1, 1].
            confidence: Combined confidence in [0, 1].
            factor_analysis: Factor leg of the score.
            indicator_analysis: Indicator leg of the score.

        Returns:
            Recommendation with action, strength, risk and reasoning.
        """
        return Recommendation(
            action=self.get_action(score),
            strength=self.get_strength(score),
            risk_level=self.get_risk_level(confidence),
            reasoning=self.build_reasoning(factor_analysis, indicator_analysis),
            score=score,
            confidence=confidence,
        )


def _bias(contribution: float) -> str:
    return "bullish" if contribution > 0 else "bearish"
