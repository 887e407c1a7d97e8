"""Tracks indicator predictions and resolves them into outcomes."""

import logging
import uuid
from datetime import datetime

from src.accuracy.accuracy_scorer import AccuracyScorer
from src.models.errors import AlreadyResolvedError, NotFoundError, ValidationError
from src.models.prediction import (
    PredictionAction,
    PredictionOutcome,
    PredictionRecord,
    PredictionStatus,
)
from src.models.validation import require_name, require_positive, require_range
from src.storage.base import PredictionRepository

logger = logging.getLogger(__name__)


def _parse_action(action: PredictionAction | str) -> PredictionAction:
    try:
        return PredictionAction(action)
    except ValueError:
        valid = ", ".join(a.value for a in PredictionAction)
        raise ValidationError(f"Invalid action {action!r}. Must be one of: {valid}") from None


def _parse_outcome(outcome: PredictionOutcome | str) -> PredictionOutcome:
    try:
        return PredictionOutcome(outcome)
    except ValueError:
        valid = ", ".join(o.value for o in PredictionOutcome)
        raise ValidationError(f"Invalid outcome {outcome!r}. Must be one of: {valid}") from None


class PredictionTracker:
    """Records pending indicator predictions and resolves each exactly once.

    Tracking a prediction does not touch accuracy stats. Resolving one
    moves it to CORRECT or INCORRECT and feeds the outcome to the
    AccuracyScorer.
    """

    def __init__(self, repository: PredictionRepository, accuracy_scorer: AccuracyScorer):
        """Initialize the tracker.

        Args:
            repository: Persistence for prediction records.
            accuracy_scorer: Scorer to update when predictions resolve.
        """
        self._repository = repository
        self._accuracy = accuracy_scorer

    def track_indicator_prediction(
        self,
        indicator: str,
        symbol: str,
        action: PredictionAction | str,
        confidence: float,
        price_at_prediction: float,
        horizon: str,
    ) -> str:
        """Record a new pending prediction.

        Args:
            indicator: Indicator that made the prediction (e.g. "RSI").
            symbol: Symbol the prediction is about.
            action: "buy", "sell" or "hold".
            confidence: Confidence from 0 to 100.
            price_at_prediction: Price when the prediction was made.
            horizon: Opaque time bucket label such as "1d".

        Returns:
            The new prediction id.

        Raises:
            ValidationError: If any argument is malformed.
        """
        require_name(indicator, "indicator")
        require_name(symbol, "symbol")
        require_name(horizon, "horizon")
        parsed_action = _parse_action(action)
        confidence = require_range(confidence, 0.0, 100.0, "confidence")
        price = require_positive(price_at_prediction, "price_at_prediction")

        record = PredictionRecord(
            id=uuid.uuid4().hex,
            indicator=indicator,
            symbol=symbol,
            action=parsed_action,
            confidence=confidence,
            price_at_prediction=price,
            horizon=horizon,
            created_at=datetime.now(),
        )
        self._repository.add(record)

        logger.info(
            f"Tracked {indicator} prediction {record.id} for {symbol}: "
            f"{parsed_action.value} ({confidence:.1f}%) @ ${price:.2f} [{horizon}]"
        )
        return record.id

    def update_indicator_accuracy(
        self,
        prediction_id: str,
        outcome: PredictionOutcome | str,
        actual_price: float,
    ) -> PredictionRecord:
        """Resolve a pending prediction and count it toward indicator accuracy.

        Args:
            prediction_id: Id returned by ``track_indicator_prediction``.
            outcome: "correct" or "incorrect".
            actual_price: Observed price at resolution.

        Returns:
            The resolved record.

        Raises:
            ValidationError: If outcome or price is malformed.
            NotFoundError: If the id is unknown.
            AlreadyResolvedError: If the prediction was already resolved.
            OSError: If storage fails. A failed accuracy update leaves the
                prediction pending.
        """
        parsed_outcome = _parse_outcome(outcome)
        actual_price = require_positive(actual_price, "actual_price")

        resolved = self._repository.resolve(
            prediction_id,
            parsed_outcome.to_status(),
            actual_price,
            datetime.now(),
        )
        if resolved is None:
            current = self._repository.get(prediction_id)
            status = current.status.value if current else "unknown"
            logger.warning(f"Rejected second resolution of {prediction_id} ({status})")
            raise AlreadyResolvedError(prediction_id, status)

        try:
            self._accuracy.record_outcome(
                resolved.indicator,
                resolved.action,
                resolved.status == PredictionStatus.CORRECT,
                resolved.confidence,
            )
        except Exception:
            # Every resolved prediction is counted exactly once
            logger.error(f"Accuracy update failed for {prediction_id}, reverting to pending")
            self._repository.unresolve(prediction_id, resolved.status)
            raise

        logger.info(
            f"Resolved {resolved.indicator} prediction {prediction_id}: "
            f"{resolved.status.value.upper()} @ ${actual_price:.2f}"
        )
        return resolved

    def get_prediction(self, prediction_id: str) -> PredictionRecord:
        """Get a prediction by id.

        Raises:
            NotFoundError: If the id is unknown.
        """
        record = self._repository.get(prediction_id)
        if record is None:
            raise NotFoundError(prediction_id)
        return record

    def get_pending_predictions(self, indicator: str | None = None) -> list[PredictionRecord]:
        """List unresolved predictions, oldest first."""
        return self._repository.list_pending(indicator)
