"""Directional symbol/factor correlation store."""

import logging
from datetime import datetime

from src.models.correlation import CorrelatedFactor, CorrelationRecord, CorrelationStrength
from src.models.validation import require_range, require_symbol
from src.storage.base import CorrelationRepository

logger = logging.getLogger(__name__)


class CorrelationStore:
    """Stores correlations between symbols and macro/technical factors.

    Pairs are directional: (AAPL, SP500) and (SP500, AAPL) are separate
    records. Unknown pairs read as 0.0, meaning no evidence of a relationship.
    """

    NEUTRAL_CORRELATION = 0.0

    def __init__(self, repository: CorrelationRepository):
        """Initialize the store.

        Args:
            repository: Persistence for correlation records.
        """
        self._repository = repository

    def set_correlation(self, symbol: str, factor: str, coefficient: float) -> None:
        """Insert or overwrite the correlation for a (symbol, factor) pair.

        Args:
            symbol: Subject symbol.
            factor: Factor symbol.
            coefficient: Correlation coefficient in [-1, 1].

        Raises:
            ValidationError: If a name is empty or contains ":", or the
                coefficient is out of range.
        """
        require_symbol(symbol, "symbol")
        require_symbol(factor, "factor")
        coefficient = require_range(coefficient, -1.0, 1.0, "coefficient")

        self._repository.upsert(
            CorrelationRecord(
                subject_symbol=symbol,
                factor_symbol=factor,
                coefficient=coefficient,
                updated_at=datetime.now(),
            )
        )
        logger.info(f"Set correlation {symbol}:{factor} = {coefficient:+.4f}")

    def analyze_correlation(self, symbol: str, factor: str) -> float:
        """Get the stored coefficient, or 0.0 for an unknown pair."""
        record = self._repository.get(symbol, factor)
        if record is None:
            logger.debug(f"No correlation for {symbol}:{factor}, using neutral")
            return self.NEUTRAL_CORRELATION
        return record.coefficient

    def get_correlated_factors(self, symbol: str, threshold: float) -> list[CorrelatedFactor]:
        """Get factors whose absolute correlation with ``symbol`` meets a threshold.

        Args:
            symbol: Subject symbol.
            threshold: Minimum abs(correlation), in [0, 1].

        Returns:
            Factors sorted by descending abs(correlation), ties by factor name.
        """
        threshold = require_range(threshold, 0.0, 1.0, "threshold")

        matches = [
            CorrelatedFactor(factor=r.factor_symbol, correlation=r.coefficient)
            for r in self._repository.list_for_symbol(symbol)
            if abs(r.coefficient) >= threshold
        ]
        matches.sort(key=lambda m: (-abs(m.correlation), m.factor))
        return matches

    def get_correlations_for_symbol(self, symbol: str) -> list[CorrelationRecord]:
        """Get every correlation record for a symbol, sorted by factor name."""
        return sorted(
            self._repository.list_for_symbol(symbol),
            key=lambda r: r.factor_symbol,
        )

    def get_correlation_matrix(self) -> dict[str, float]:
        """Dump all correlations as ``{"symbol:factor": coefficient}`` sorted by key."""
        records = sorted(self._repository.list_all(), key=lambda r: r.key)
        return {r.key: r.coefficient for r in records}

    @staticmethod
    def get_correlation_strength(coefficient: float) -> CorrelationStrength:
        """Classify a coefficient into a strength band."""
        return CorrelationStrength.from_coefficient(coefficient)
