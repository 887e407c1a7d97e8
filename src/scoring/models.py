# src/scoring/models.py
"""Data models for the weighted scoring engine."""
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from src.models.errors import ValidationError
from src.models.prediction import PredictionAction
from src.models.validation import require_name, require_range


class Strength(str, Enum):
    """Recommendation strength from the magnitude of the weighted score."""

    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class RiskLevel(str, Enum):
    """Recommendation risk from the confidence of its inputs."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class FactorReading:
    """Current sentiment value of a market factor, in [-1, 1]."""

    symbol: str
    value: float

    def __post_init__(self):
        require_name(self.symbol, "factor symbol")
        object.__setattr__(
            self, "value", require_range(self.value, -1.0, 1.0, f"{self.symbol} value")
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FactorReading":
        try:
            return cls(symbol=data["symbol"], value=data["value"])
        except KeyError as e:
            raise ValidationError(f"Factor reading is missing {e.args[0]!r}") from None


@dataclass(frozen=True)
class IndicatorReading:
    """Current signal value of a technical indicator, in [-1, 1]."""

    name: str
    value: float

    def __post_init__(self):
        require_name(self.name, "indicator name")
        object.__setattr__(
            self, "value", require_range(self.value, -1.0, 1.0, f"{self.name} value")
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IndicatorReading":
        try:
            return cls(name=data["name"], value=data["value"])
        except KeyError as e:
            raise ValidationError(f"Indicator reading is missing {e.args[0]!r}") from None


@dataclass(frozen=True)
class FactorDetail:
    """Per-factor breakdown: value x correlation = weighted_contribution."""

    factor: str
    value: float
    correlation: float
    weighted_contribution: float


@dataclass(frozen=True)
class IndicatorDetail:
    """Per-indicator breakdown.

    Attributes:
        indicator: Indicator name.
        value: Signal value in [-1, 1].
        performance_weight: Accuracy-derived multiplier applied to the value.
        weighted_contribution: value x performance_weight.
        accuracy: Historical accuracy percentage, None if no resolved predictions.
    """

    indicator: str
    value: float
    performance_weight: float
    weighted_contribution: float
    accuracy: float | None


@dataclass(frozen=True)
class FactorAnalysisResult:
    normalized_score: float
    total_weight: float
    factors_analyzed: int
    details: tuple[FactorDetail, ...]


@dataclass(frozen=True)
class IndicatorAnalysisResult:
    normalized_score: float
    total_weight: float
    indicators_analyzed: int
    details: tuple[IndicatorDetail, ...]
    # Weight backed by resolved history; drives confidence
    evidence_weight: float = 0.0


@dataclass(frozen=True)
class CombinedScore:
    """Blended score in [-1, 1] and confidence in [0, 1]."""

    weighted_score: float
    confidence: float


@dataclass(frozen=True)
class Recommendation:
    """Buy/sell/hold recommendation with strength, risk and reasoning.

    Attributes:
        action: BUY, SELL or HOLD.
        strength: Band of abs(score).
        risk_level: Band of confidence; high confidence means low risk.
        reasoning: Short justifications, largest contributions first.
        score: Combined weighted score the recommendation was built from.
        confidence: Combined confidence the recommendation was built from.
    """

    action: PredictionAction
    strength: Strength
    risk_level: RiskLevel
    reasoning: tuple[str, ...]
    score: float
    confidence: float


@dataclass(frozen=True)
class WeightedScoreResult:
    """Complete output of one weighted score calculation."""

    symbol: str
    factor_analysis: FactorAnalysisResult
    indicator_analysis: IndicatorAnalysisResult
    combined_score: CombinedScore
    recommendation: Recommendation
    calculated_at: datetime

    def to_dict(self) -> dict:
        """Convert to plain JSON-friendly types."""
        data = asdict(self)
        data["calculated_at"] = self.calculated_at.isoformat()
        recommendation = data["recommendation"]
        recommendation["action"] = self.recommendation.action.value
        recommendation["strength"] = self.recommendation.strength.value
        recommendation["risk_level"] = self.recommendation.risk_level.value
        recommendation["reasoning"] = list(self.recommendation.reasoning)
        return data
