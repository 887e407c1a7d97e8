"""Data models for symbol/factor correlations."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CorrelationStrength(str, Enum):
    """Qualitative strength band for a correlation coefficient."""

    VERY_STRONG = "very_strong"
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    VERY_WEAK = "very_weak"

    @classmethod
    def from_coefficient(cls, coefficient: float) -> "CorrelationStrength":
        """Get the strength band for a coefficient.

        Args:
            coefficient: Correlation coefficient in [-1, 1].

        Returns:
            CorrelationStrength based on abs(coefficient):
                - >= 0.8 -> VERY_STRONG
                - >= 0.6 -> STRONG
                - >= 0.4 -> MODERATE
                - >= 0.2 -> WEAK
                - < 0.2 -> VERY_WEAK
        """
        magnitude = abs(coefficient)
        if magnitude >= 0.8:
            return cls.VERY_STRONG
        elif magnitude >= 0.6:
            return cls.STRONG
        elif magnitude >= 0.4:
            return cls.MODERATE
        elif magnitude >= 0.2:
            return cls.WEAK
        else:
            return cls.VERY_WEAK


@dataclass
class CorrelationRecord:
    """Directional correlation between a subject symbol and a factor.

    Attributes:
        subject_symbol: The tradable symbol (e.g. "AAPL").
        factor_symbol: The macro or technical factor (e.g. "SP500").
        coefficient: Correlation coefficient in [-1, 1].
        updated_at: When the record was last written.
    """

    subject_symbol: str
    factor_symbol: str
    coefficient: float
    updated_at: datetime

    @property
    def key(self) -> str:
        """Composite matrix key in the form ``symbol:factor``."""
        return f"{self.subject_symbol}:{self.factor_symbol}"


@dataclass(frozen=True)
class CorrelatedFactor:
    """A factor returned by a threshold query."""

    factor: str
    correlation: float
