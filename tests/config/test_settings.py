import pytest
from pydantic import ValidationError

from src.config.settings import (
    AccuracySettings,
    ScoringSettings,
    Settings,
    StorageSettings,
)


@pytest.fixture(autouse=True)
def clear_storage_env(monkeypatch):
    monkeypatch.delenv("MARKET_FACTORS_STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("MARKET_FACTORS_STORAGE_DATA_DIR", raising=False)


class TestDefaults:
    """Tests for default configuration values."""

    def test_settings_sections(self):
        settings = Settings()

        assert isinstance(settings.scoring, ScoringSettings)
        assert isinstance(settings.accuracy, AccuracySettings)
        assert isinstance(settings.storage, StorageSettings)

    def test_scoring_defaults(self):
        settings = ScoringSettings()

        assert settings.factor_weight == 0.4
        assert settings.buy_threshold == 0.3
        assert settings.sell_threshold == -0.3
        assert settings.weak_band == 0.15
        assert settings.moderate_band == 0.45
        assert settings.evidence_saturation == 6.0
        assert settings.low_risk_confidence == 0.7
        assert settings.medium_risk_confidence == 0.4
        assert settings.max_reasons == 3

    def test_accuracy_defaults(self):
        settings = AccuracySettings()

        assert settings.minimum_sample_size == 5
        assert settings.neutral_multiplier == 1.0
        assert settings.base_multiplier == 0.5
        assert settings.accuracy_slope == 1.5
        assert settings.min_multiplier == 0.5
        assert settings.max_multiplier == 2.0

    def test_storage_defaults(self):
        settings = StorageSettings()

        assert settings.backend == "memory"
        assert settings.data_dir == "data/market_factors"


class TestValidation:
    """Tests for settings validation."""

    def test_factor_weight_bounds(self):
        with pytest.raises(ValidationError):
            ScoringSettings(factor_weight=1.5)

    def test_sell_threshold_must_be_negative(self):
        with pytest.raises(ValidationError):
            ScoringSettings(sell_threshold=0.1)

    def test_bands_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ScoringSettings(weak_band=0.5, moderate_band=0.3)

    def test_risk_bands_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ScoringSettings(low_risk_confidence=0.3, medium_risk_confidence=0.6)

    def test_multiplier_bounds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            AccuracySettings(min_multiplier=2.5, max_multiplier=2.0)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StorageSettings(backend="mysql")


class TestFromYaml:
    """Tests for YAML loading."""

    def test_from_yaml(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "scoring:\n"
            "  factor_weight: 0.6\n"
            "  buy_threshold: 0.25\n"
            "accuracy:\n"
            "  minimum_sample_size: 10\n"
            "storage:\n"
            "  backend: json\n"
            "  data_dir: /tmp/factors\n"
        )

        settings = Settings.from_yaml(config_file)

        assert settings.scoring.factor_weight == 0.6
        assert settings.scoring.buy_threshold == 0.25
        assert settings.scoring.sell_threshold == -0.3
        assert settings.accuracy.minimum_sample_size == 10
        assert settings.storage.backend == "json"
        assert settings.storage.data_dir == "/tmp/factors"

    def test_empty_yaml_uses_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")

        settings = Settings.from_yaml(config_file)

        assert settings.scoring.factor_weight == 0.4

    def test_env_overrides_yaml_storage(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MARKET_FACTORS_STORAGE_BACKEND", "memory")
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("storage:\n  backend: json\n  data_dir: data/x\n")

        settings = Settings.from_yaml(config_file)

        assert settings.storage.backend == "memory"
        assert settings.storage.data_dir == "data/x"
