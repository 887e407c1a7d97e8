"""Data models for indicator predictions and accuracy statistics."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PredictionAction(str, Enum):
    """Action an indicator predicted."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class PredictionStatus(str, Enum):
    """Lifecycle status of a prediction. PENDING is the only non-terminal state."""

    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"

    @property
    def is_terminal(self) -> bool:
        return self is not PredictionStatus.PENDING


class PredictionOutcome(str, Enum):
    """Outcome supplied when resolving a prediction."""

    CORRECT = "correct"
    INCORRECT = "incorrect"

    def to_status(self) -> PredictionStatus:
        if self is PredictionOutcome.CORRECT:
            return PredictionStatus.CORRECT
        return PredictionStatus.INCORRECT


@dataclass
class PredictionRecord:
    """A single indicator prediction.

    Attributes:
        id: Opaque unique identifier.
        indicator: Indicator name (e.g. "RSI").
        symbol: Symbol the prediction is about.
        action: Predicted action.
        confidence: Indicator confidence (0-100).
        price_at_prediction: Price when the prediction was made.
        horizon: Caller-defined time bucket label (e.g. "1d").
        created_at: When the prediction was tracked.
        status: PENDING until resolved exactly once.
        actual_price: Price at resolution, None while pending.
        resolved_at: Resolution time, None while pending.
    """

    id: str
    indicator: str
    symbol: str
    action: PredictionAction
    confidence: float
    price_at_prediction: float
    horizon: str
    created_at: datetime
    status: PredictionStatus = PredictionStatus.PENDING
    actual_price: float | None = None
    resolved_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PredictionStatus.PENDING

    @property
    def price_change_percent(self) -> float | None:
        """Percent move from prediction price to actual price, None while pending."""
        if self.actual_price is None:
            return None
        return (self.actual_price - self.price_at_prediction) / self.price_at_prediction * 100


@dataclass
class IndicatorAccuracyStats:
    """Running accuracy statistics for one indicator.

    Only resolved predictions are counted. Per-action tallies allow
    buy/sell/hold accuracy to be reported separately.
    """

    indicator: str
    total_predictions: int = 0
    correct_predictions: int = 0
    confidence_sum: float = 0.0

    buy_predictions: int = 0
    buy_correct: int = 0
    sell_predictions: int = 0
    sell_correct: int = 0
    hold_predictions: int = 0
    hold_correct: int = 0

    updated_at: datetime | None = None

    @staticmethod
    def _percent(correct: int, total: int) -> float:
        if total == 0:
            return 0.0
        return correct / total * 100

    @property
    def average_accuracy(self) -> float:
        """Percentage of correct predictions (0.0 when there is no data)."""
        return self._percent(self.correct_predictions, self.total_predictions)

    @property
    def average_confidence(self) -> float:
        if self.total_predictions == 0:
            return 0.0
        return self.confidence_sum / self.total_predictions

    @property
    def buy_accuracy(self) -> float:
        return self._percent(self.buy_correct, self.buy_predictions)

    @property
    def sell_accuracy(self) -> float:
        return self._percent(self.sell_correct, self.sell_predictions)

    @property
    def hold_accuracy(self) -> float:
        return self._percent(self.hold_correct, self.hold_predictions)

    @property
    def has_data(self) -> bool:
        return self.total_predictions > 0

    def record(self, action: PredictionAction, was_correct: bool, confidence: float) -> None:
        """Apply one resolved prediction to the counters.

        Callers must hold the repository lock for this indicator.
        """
        self.total_predictions += 1
        self.confidence_sum += confidence
        if was_correct:
            self.correct_predictions += 1

        if action == PredictionAction.BUY:
            self.buy_predictions += 1
            self.buy_correct += int(was_correct)
        elif action == PredictionAction.SELL:
            self.sell_predictions += 1
            self.sell_correct += int(was_correct)
        elif action == PredictionAction.HOLD:
            self.hold_predictions += 1
            self.hold_correct += int(was_correct)
        else:
            raise ValueError(f"Unhandled prediction action: {action}")
