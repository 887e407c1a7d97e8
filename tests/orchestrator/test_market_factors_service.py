import pytest

from src.config.settings import Settings, StorageSettings
from src.models import (
    AlreadyResolvedError,
    NotFoundError,
    PredictionAction,
    PredictionStatus,
    ValidationError,
)
from src.orchestrator import MarketFactorsService
from src.scoring import RiskLevel
from src.storage import create_memory_repositories


@pytest.fixture
def service():
    return MarketFactorsService(Settings(), create_memory_repositories())


class TestCorrelations:
    """Tests for correlation delegation."""

    def test_default_threshold_from_settings(self, service):
        service.set_correlation("AAPL", "SPY", 0.6)
        service.set_correlation("AAPL", "VIX", 0.4)

        factors = service.get_correlated_factors("AAPL")

        assert [f.factor for f in factors] == ["SPY"]

    def test_explicit_threshold(self, service):
        service.set_correlation("AAPL", "SPY", 0.6)
        service.set_correlation("AAPL", "VIX", -0.4)

        factors = service.get_correlated_factors("AAPL", 0.3)

        assert [f.factor for f in factors] == ["SPY", "VIX"]

    def test_matrix_and_lookup(self, service):
        service.set_correlation("AAPL", "SPY", 0.6)

        assert service.analyze_correlation("AAPL", "SPY") == 0.6
        assert service.analyze_correlation("AAPL", "GLD") == 0.0
        assert service.get_correlation_matrix() == {"AAPL:SPY": 0.6}
        assert len(service.get_correlations_for_symbol("AAPL")) == 1


class TestPredictions:
    """Tests for the prediction lifecycle through the service."""

    def test_track_and_resolve(self, service):
        prediction_id = service.track_indicator_prediction(
            "RSI", "AAPL", "buy", 0.8, 150.0, "1d"
        )

        assert [p.id for p in service.get_pending_predictions()] == [prediction_id]

        record = service.update_indicator_accuracy(prediction_id, "correct", 155.0)

        assert record.status == PredictionStatus.CORRECT
        assert service.get_pending_predictions() == []
        stats = service.get_indicator_accuracy("RSI")
        assert stats.total_predictions == 1
        assert stats.correct_predictions == 1
        assert stats.buy_accuracy == 100.0

    def test_double_resolve_rejected(self, service):
        prediction_id = service.track_indicator_prediction(
            "RSI", "AAPL", PredictionAction.SELL, 0.5, 150.0, "1d"
        )
        service.update_indicator_accuracy(prediction_id, "incorrect", 160.0)

        with pytest.raises(AlreadyResolvedError):
            service.update_indicator_accuracy(prediction_id, "correct", 140.0)

        assert service.get_indicator_accuracy("RSI").total_predictions == 1

    def test_unknown_prediction(self, service):
        with pytest.raises(NotFoundError):
            service.get_prediction("missing")

    def test_performance_score_neutral_without_history(self, service):
        assert service.get_indicator_performance_score("MACD") == 1.0

    def test_all_indicator_accuracy(self, service):
        for indicator in ("RSI", "MACD"):
            prediction_id = service.track_indicator_prediction(
                indicator, "AAPL", "hold", 0.5, 100.0, "1d"
            )
            service.update_indicator_accuracy(prediction_id, "correct", 100.5)

        names = sorted(s.indicator for s in service.get_all_indicator_accuracy())

        assert names == ["MACD", "RSI"]


class TestScoring:
    """Tests for end-to-end weighted scoring."""

    def test_score_uses_tracked_accuracy(self, service):
        service.set_correlation("AAPL", "SPY", 0.8)
        for _ in range(5):
            prediction_id = service.track_indicator_prediction(
                "RSI", "AAPL", "buy", 0.7, 100.0, "1d"
            )
            service.update_indicator_accuracy(prediction_id, "correct", 105.0)

        result = service.calculate_weighted_score(
            "AAPL",
            [{"symbol": "SPY", "value": 0.5}],
            [{"name": "RSI", "value": 0.6}],
        )

        rsi = result.indicator_analysis.details[0]
        assert rsi.performance_weight == pytest.approx(2.0)
        assert rsi.accuracy == pytest.approx(100.0)
        assert result.factor_analysis.normalized_score == pytest.approx(0.5)
        assert result.combined_score.weighted_score == pytest.approx(0.4 * 0.5 + 0.6 * 0.6)
        assert result.recommendation.action == PredictionAction.BUY

    def test_empty_inputs(self, service):
        result = service.calculate_weighted_score("AAPL", [], [])

        assert result.combined_score.weighted_score == 0.0
        assert result.combined_score.confidence == 0.0
        assert result.recommendation.action == PredictionAction.HOLD
        assert result.recommendation.risk_level == RiskLevel.HIGH

    def test_invalid_reading(self, service):
        with pytest.raises(ValidationError):
            service.calculate_weighted_score("AAPL", [{"symbol": "SPY", "value": 2.0}], [])


class TestFromSettings:
    """Tests for building the service from settings."""

    def test_json_backend_persists(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARKET_FACTORS_STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("MARKET_FACTORS_STORAGE_DATA_DIR", raising=False)
        settings = Settings(
            storage=StorageSettings(backend="json", data_dir=str(tmp_path))
        )

        first = MarketFactorsService.from_settings(settings)
        first.set_correlation("AAPL", "SPY", 0.7)
        prediction_id = first.track_indicator_prediction(
            "RSI", "AAPL", "buy", 0.6, 100.0, "1d"
        )

        second = MarketFactorsService.from_settings(settings)

        assert second.analyze_correlation("AAPL", "SPY") == 0.7
        assert second.get_prediction(prediction_id).is_pending
