from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SystemConfig(BaseModel):
    name: str = "Market Factor Scoring Engine"
    version: str = "1.0.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class CorrelationSettings(BaseModel):
    """Settings for correlation queries."""

    default_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class AccuracySettings(BaseModel):
    """Settings for indicator performance weighting.

    The performance multiplier is
    ``clamp(base_multiplier + accuracy/100 * accuracy_slope, min_multiplier, max_multiplier)``
    once an indicator has ``minimum_sample_size`` resolved predictions,
    and ``neutral_multiplier`` before that.
    """

    minimum_sample_size: int = Field(default=5, ge=1)
    neutral_multiplier: float = Field(default=1.0, gt=0)
    base_multiplier: float = Field(default=0.5, ge=0)
    accuracy_slope: float = Field(default=1.5, gt=0)
    min_multiplier: float = Field(default=0.5, ge=0)
    max_multiplier: float = Field(default=2.0, gt=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "AccuracySettings":
        if self.min_multiplier > self.max_multiplier:
            raise ValueError("min_multiplier must not exceed max_multiplier")
        return self


class ScoringSettings(BaseModel):
    """Settings for the weighted scoring engine."""

    # Blend weight of the market factor leg; indicators get 1 - factor_weight
    factor_weight: float = Field(default=0.4, ge=0.0, le=1.0)

    # Action thresholds on the combined score
    buy_threshold: float = Field(default=0.3, gt=0.0, le=1.0)
    sell_threshold: float = Field(default=-0.3, ge=-1.0, lt=0.0)

    # Strength bands on abs(score)
    weak_band: float = Field(default=0.15, gt=0.0, le=1.0)
    moderate_band: float = Field(default=0.45, gt=0.0, le=1.0)

    # Total weight at which confidence reaches 1.0
    evidence_saturation: float = Field(default=6.0, gt=0.0)

    # Risk bands on confidence
    low_risk_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    medium_risk_confidence: float = Field(default=0.4, ge=0.0, le=1.0)

    max_reasons: int = Field(default=3, ge=1, le=20)

    @model_validator(mode="after")
    def validate_bands(self) -> "ScoringSettings":
        if self.weak_band >= self.moderate_band:
            raise ValueError("weak_band must be below moderate_band")
        if self.medium_risk_confidence > self.low_risk_confidence:
            raise ValueError("medium_risk_confidence must not exceed low_risk_confidence")
        return self


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MARKET_FACTORS_STORAGE_")

    backend: Literal["memory", "json"] = "memory"
    data_dir: str = "data/market_factors"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment overrides values passed in from the YAML file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class Settings(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    correlation: CorrelationSettings = Field(default_factory=CorrelationSettings)
    accuracy: AccuracySettings = Field(default_factory=AccuracySettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file with env var overrides for storage."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # Env vars win over the YAML storage section
        storage = StorageSettings(**data.pop("storage", {}))

        return cls(
            **data,
            storage=storage,
        )
