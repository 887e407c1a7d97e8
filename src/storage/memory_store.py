"""In-memory repositories guarded by a lock."""
import threading
from dataclasses import replace
from datetime import datetime

from src.models.prediction import (
    IndicatorAccuracyStats,
    PredictionAction,
    PredictionRecord,
    PredictionStatus,
)
from src.models.correlation import CorrelationRecord
from src.models.errors import NotFoundError
from src.storage.base import (
    AccuracyRepository,
    CorrelationRepository,
    PredictionRepository,
    Repositories,
)


class InMemoryCorrelationRepository(CorrelationRepository):
    """Correlations held in a dict keyed by (symbol, factor)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str], CorrelationRecord] = {}

    def upsert(self, record: CorrelationRecord) -> None:
        with self._lock:
            self._records[(record.subject_symbol, record.factor_symbol)] = replace(record)

    def get(self, symbol: str, factor: str) -> CorrelationRecord | None:
        with self._lock:
            record = self._records.get((symbol, factor))
            return replace(record) if record else None

    def list_for_symbol(self, symbol: str) -> list[CorrelationRecord]:
        with self._lock:
            return [
                replace(r) for (s, _), r in self._records.items() if s == symbol
            ]

    def list_all(self) -> list[CorrelationRecord]:
        with self._lock:
            return [replace(r) for r in self._records.values()]


class InMemoryPredictionRepository(PredictionRepository):
    """Predictions held in a dict keyed by id.

    Records are copied in and out so callers never mutate stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, PredictionRecord] = {}

    def add(self, record: PredictionRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Duplicate prediction id: {record.id}")
            self._records[record.id] = replace(record)

    def get(self, prediction_id: str) -> PredictionRecord | None:
        with self._lock:
            record = self._records.get(prediction_id)
            return replace(record) if record else None

    def resolve(
        self,
        prediction_id: str,
        status: PredictionStatus,
        actual_price: float,
        resolved_at: datetime,
    ) -> PredictionRecord | None:
        with self._lock:
            record = self._records.get(prediction_id)
            if record is None:
                raise NotFoundError(prediction_id)
            if not record.is_pending:
                return None
            record.status = status
            record.actual_price = actual_price
            record.resolved_at = resolved_at
            return replace(record)

    def unresolve(self, prediction_id: str, status: PredictionStatus) -> bool:
        with self._lock:
            record = self._records.get(prediction_id)
            if record is None or record.status != status:
                return False
            record.status = PredictionStatus.PENDING
            record.actual_price = None
            record.resolved_at = None
            return True

    def list_pending(self, indicator: str | None = None) -> list[PredictionRecord]:
        with self._lock:
            pending = [
                replace(r)
                for r in self._records.values()
                if r.is_pending and (indicator is None or r.indicator == indicator)
            ]
        return sorted(pending, key=lambda r: r.created_at)


class InMemoryAccuracyRepository(AccuracyRepository):
    """Accuracy stats held in a dict keyed by indicator."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats: dict[str, IndicatorAccuracyStats] = {}

    def get(self, indicator: str) -> IndicatorAccuracyStats | None:
        with self._lock:
            stats = self._stats.get(indicator)
            return replace(stats) if stats else None

    def increment(
        self,
        indicator: str,
        action: PredictionAction,
        was_correct: bool,
        confidence: float,
    ) -> IndicatorAccuracyStats:
        with self._lock:
            stats = self._stats.get(indicator)
            if stats is None:
                stats = IndicatorAccuracyStats(indicator=indicator)
                self._stats[indicator] = stats
            stats.record(action, was_correct, confidence)
            stats.updated_at = datetime.now()
            return replace(stats)

    def list_all(self) -> list[IndicatorAccuracyStats]:
        with self._lock:
            return [replace(s) for s in self._stats.values()]


def create_memory_repositories() -> Repositories:
    """Build a fresh set of in-memory repositories."""
    return Repositories(
        correlations=InMemoryCorrelationRepository(),
        predictions=InMemoryPredictionRepository(),
        accuracy=InMemoryAccuracyRepository(),
    )
