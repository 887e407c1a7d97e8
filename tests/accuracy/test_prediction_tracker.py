"""Tests for PredictionTracker."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.accuracy.accuracy_scorer import AccuracyScorer
from src.accuracy.prediction_tracker import PredictionTracker
from src.models.errors import AlreadyResolvedError, NotFoundError, ValidationError
from src.models.prediction import PredictionAction, PredictionOutcome, PredictionStatus
from src.storage.memory_store import InMemoryAccuracyRepository, InMemoryPredictionRepository


@pytest.fixture
def scorer():
    return AccuracyScorer(InMemoryAccuracyRepository())


@pytest.fixture
def tracker(scorer):
    return PredictionTracker(InMemoryPredictionRepository(), scorer)


class TestTrackPrediction:
    """Tests for track_indicator_prediction."""

    def test_returns_retrievable_pending_record(self, tracker):
        """Test the tracked record keeps action, confidence and horizon."""
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.00, "1d"
        )

        record = tracker.get_prediction(prediction_id)
        assert record.id == prediction_id
        assert record.indicator == "RSI"
        assert record.symbol == "AAPL"
        assert record.action == PredictionAction.BUY
        assert record.confidence == 85.0
        assert record.price_at_prediction == 150.00
        assert record.horizon == "1d"
        assert record.status == PredictionStatus.PENDING
        assert record.actual_price is None
        assert record.resolved_at is None

    def test_ids_are_unique(self, tracker):
        ids = {
            tracker.track_indicator_prediction("MACD", "AAPL", "sell", 75.0, 149.0, "1w")
            for _ in range(20)
        }
        assert len(ids) == 20

    def test_accepts_enum_action(self, tracker):
        prediction_id = tracker.track_indicator_prediction(
            "MACD", "AAPL", PredictionAction.HOLD, 60.0, 151.0, "1d"
        )
        assert tracker.get_prediction(prediction_id).action == PredictionAction.HOLD

    def test_tracking_does_not_touch_accuracy(self, tracker, scorer):
        tracker.track_indicator_prediction("RSI", "AAPL", "buy", 85.0, 150.0, "1d")

        assert scorer.get_indicator_accuracy("RSI").total_predictions == 0

    @pytest.mark.parametrize("action", ["BUY", "strong_buy", "", "long"])
    def test_invalid_action_rejected(self, tracker, action):
        with pytest.raises(ValidationError):
            tracker.track_indicator_prediction("RSI", "AAPL", action, 50.0, 150.0, "1d")

    @pytest.mark.parametrize("confidence", [-0.1, 100.5, float("nan")])
    def test_invalid_confidence_rejected(self, tracker, confidence):
        with pytest.raises(ValidationError):
            tracker.track_indicator_prediction("RSI", "AAPL", "buy", confidence, 150.0, "1d")

    @pytest.mark.parametrize("confidence", [0.0, 100.0])
    def test_confidence_bounds_inclusive(self, tracker, confidence):
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", confidence, 150.0, "1d"
        )
        assert tracker.get_prediction(prediction_id).confidence == confidence

    def test_invalid_price_rejected(self, tracker):
        with pytest.raises(ValidationError):
            tracker.track_indicator_prediction("RSI", "AAPL", "buy", 50.0, 0.0, "1d")

    def test_pending_listing(self, tracker):
        first = tracker.track_indicator_prediction("RSI", "AAPL", "buy", 85.0, 150.0, "1d")
        second = tracker.track_indicator_prediction("MACD", "AAPL", "sell", 75.0, 149.0, "1d")
        third = tracker.track_indicator_prediction("RSI", "MSFT", "hold", 60.0, 300.0, "1w")
        tracker.update_indicator_accuracy(first, "correct", 155.0)

        assert [r.id for r in tracker.get_pending_predictions()] == [second, third]
        assert [r.id for r in tracker.get_pending_predictions("RSI")] == [third]


class TestResolvePrediction:
    """Tests for update_indicator_accuracy."""

    def test_resolution_updates_record_and_stats(self, tracker, scorer):
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )

        resolved = tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)

        assert resolved.status == PredictionStatus.CORRECT
        assert resolved.actual_price == 155.0
        assert resolved.resolved_at is not None
        assert resolved.price_change_percent == pytest.approx(3.3333, abs=1e-3)

        stats = scorer.get_indicator_accuracy("RSI")
        assert stats.total_predictions == 1
        assert stats.correct_predictions == 1

    def test_incorrect_outcome(self, tracker, scorer):
        prediction_id = tracker.track_indicator_prediction(
            "MACD", "AAPL", "sell", 75.0, 149.0, "1d"
        )

        resolved = tracker.update_indicator_accuracy(
            prediction_id, PredictionOutcome.INCORRECT, 152.0
        )

        assert resolved.status == PredictionStatus.INCORRECT
        stats = scorer.get_indicator_accuracy("MACD")
        assert stats.total_predictions == 1
        assert stats.correct_predictions == 0

    def test_second_resolution_fails(self, tracker, scorer):
        """Test a prediction can only be resolved once."""
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )
        tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)

        with pytest.raises(AlreadyResolvedError) as exc_info:
            tracker.update_indicator_accuracy(prediction_id, "incorrect", 140.0)

        assert exc_info.value.status == "correct"
        record = tracker.get_prediction(prediction_id)
        assert record.status == PredictionStatus.CORRECT
        assert record.actual_price == 155.0
        assert scorer.get_indicator_accuracy("RSI").total_predictions == 1

    def test_unknown_id_fails(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.update_indicator_accuracy("missing", "correct", 100.0)

    def test_get_unknown_id_fails(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.get_prediction("missing")

    @pytest.mark.parametrize("outcome", ["pending", "right", "CORRECT"])
    def test_invalid_outcome_rejected(self, tracker, outcome):
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )

        with pytest.raises(ValidationError):
            tracker.update_indicator_accuracy(prediction_id, outcome, 155.0)

        assert tracker.get_prediction(prediction_id).is_pending

    def test_concurrent_resolution_succeeds_once(self, tracker, scorer):
        """Test racing resolutions of one id: one wins, the rest see AlreadyResolvedError."""
        prediction_id = tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )

        def attempt(_):
            try:
                tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)
                return "ok"
            except AlreadyResolvedError:
                return "already"

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(32)))

        assert results.count("ok") == 1
        assert results.count("already") == 31
        assert scorer.get_indicator_accuracy("RSI").total_predictions == 1

    def test_concurrent_resolutions_do_not_lose_counts(self, tracker, scorer):
        """Test resolving many predictions of one indicator in parallel counts each."""
        ids = [
            tracker.track_indicator_prediction("RSI", "AAPL", "buy", 70.0, 150.0, "1d")
            for _ in range(100)
        ]

        def resolve(index_and_id):
            index, prediction_id = index_and_id
            outcome = "correct" if index % 4 else "incorrect"
            tracker.update_indicator_accuracy(prediction_id, outcome, 151.0)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(resolve, enumerate(ids)))

        stats = scorer.get_indicator_accuracy("RSI")
        assert stats.total_predictions == 100
        assert stats.correct_predictions == 75
        assert stats.buy_predictions == 100


class FlakyAccuracyRepository(InMemoryAccuracyRepository):
    """Accuracy repository whose first increment fails like a full disk."""

    def __init__(self):
        super().__init__()
        self.failures_left = 1

    def increment(self, indicator, action, was_correct, confidence):
        if self.failures_left:
            self.failures_left -= 1
            raise OSError("disk full")
        return super().increment(indicator, action, was_correct, confidence)


class TestFailedAccuracyUpdate:
    """Tests for resolution when the accuracy store fails."""

    @pytest.fixture
    def flaky_scorer(self):
        return AccuracyScorer(FlakyAccuracyRepository())

    @pytest.fixture
    def flaky_tracker(self, flaky_scorer):
        return PredictionTracker(InMemoryPredictionRepository(), flaky_scorer)

    def test_prediction_returns_to_pending(self, flaky_tracker, flaky_scorer):
        prediction_id = flaky_tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )

        with pytest.raises(OSError):
            flaky_tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)

        record = flaky_tracker.get_prediction(prediction_id)
        assert record.is_pending
        assert record.actual_price is None
        assert flaky_scorer.get_indicator_accuracy("RSI").total_predictions == 0

    def test_retry_counts_the_outcome(self, flaky_tracker, flaky_scorer):
        """Test a retry after a failed accuracy update is counted once."""
        prediction_id = flaky_tracker.track_indicator_prediction(
            "RSI", "AAPL", "buy", 85.0, 150.0, "1d"
        )
        with pytest.raises(OSError):
            flaky_tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)

        resolved = flaky_tracker.update_indicator_accuracy(prediction_id, "correct", 155.0)

        assert resolved.status == PredictionStatus.CORRECT
        stats = flaky_scorer.get_indicator_accuracy("RSI")
        assert stats.total_predictions == 1
        assert stats.correct_predictions == 1
