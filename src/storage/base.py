"""Repository interfaces for correlation, prediction and accuracy records."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from src.models.prediction import (
    IndicatorAccuracyStats,
    PredictionAction,
    PredictionRecord,
    PredictionStatus,
)
from src.models.correlation import CorrelationRecord


class CorrelationRepository(ABC):
    """Stores one CorrelationRecord per (symbol, factor) pair."""

    @abstractmethod
    def upsert(self, record: CorrelationRecord) -> None:
        """Insert or overwrite the record for its (symbol, factor) pair."""

    @abstractmethod
    def get(self, symbol: str, factor: str) -> CorrelationRecord | None:
        """Get the record for a pair, or None if it was never set."""

    @abstractmethod
    def list_for_symbol(self, symbol: str) -> list[CorrelationRecord]:
        """List all records whose subject is ``symbol``."""

    @abstractmethod
    def list_all(self) -> list[CorrelationRecord]:
        """List every stored record."""


class PredictionRepository(ABC):
    """Stores PredictionRecords and performs their one-way status transition."""

    @abstractmethod
    def add(self, record: PredictionRecord) -> None:
        """Persist a new pending record."""

    @abstractmethod
    def get(self, prediction_id: str) -> PredictionRecord | None:
        """Get a record by id, or None if unknown."""

    @abstractmethod
    def resolve(
        self,
        prediction_id: str,
        status: PredictionStatus,
        actual_price: float,
        resolved_at: datetime,
    ) -> PredictionRecord | None:
        """Atomically move a pending record to a terminal status.

        The pending check and the write happen under the same lock, so of
        several concurrent calls for one id exactly one succeeds.

        Returns:
            The updated record, or None if the record was not pending.

        Raises:
            NotFoundError: If the id is unknown.
        """

    @abstractmethod
    def unresolve(self, prediction_id: str, status: PredictionStatus) -> bool:
        """Move a record back to pending if it still has ``status``.

        Undoes a ``resolve`` whose follow-up work failed.

        Returns:
            True if the record was reset, False if its status had changed.
        """

    @abstractmethod
    def list_pending(self, indicator: str | None = None) -> list[PredictionRecord]:
        """List pending records ordered by creation time."""


class AccuracyRepository(ABC):
    """Stores IndicatorAccuracyStats keyed by indicator name."""

    @abstractmethod
    def get(self, indicator: str) -> IndicatorAccuracyStats | None:
        """Get a snapshot of the stats for an indicator, or None if never resolved."""

    @abstractmethod
    def increment(
        self,
        indicator: str,
        action: PredictionAction,
        was_correct: bool,
        confidence: float,
    ) -> IndicatorAccuracyStats:
        """Atomically count one resolved prediction and return the new snapshot."""

    @abstractmethod
    def list_all(self) -> list[IndicatorAccuracyStats]:
        """List stats for every indicator with at least one resolution."""


@dataclass
class Repositories:
    """The three repositories the engine needs, from one backend."""

    correlations: CorrelationRepository
    predictions: PredictionRepository
    accuracy: AccuracyRepository
