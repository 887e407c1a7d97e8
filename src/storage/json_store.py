"""JSON file persistence for correlation, prediction and accuracy records."""
import json
import logging
import os
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path

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

logger = logging.getLogger(__name__)


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class _JsonFile:
    """A JSON document on disk with an in-memory cache.

    The whole document is rewritten on every save. Callers hold ``lock``
    around read-modify-save sequences.
    """

    def __init__(self, file_path: Path):
        self.file_path = file_path
        self.lock = threading.Lock()
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self, empty: dict | list):
        """Read the document, or return ``empty`` if the file does not exist yet."""
        if not self.file_path.exists():
            return empty
        with open(self.file_path) as f:
            return json.load(f)

    def save(self, data: dict | list) -> None:
        """Write to a temp file, sync it, then swap it into place."""
        tmp_path = self.file_path.with_suffix(".tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(self.file_path)
        finally:
            tmp_path.unlink(missing_ok=True)


class JsonCorrelationRepository(CorrelationRepository):
    """Correlations stored as a list of records in ``{data_dir}/correlations.json``."""

    def __init__(self, data_dir: Path):
        self._file = _JsonFile(data_dir / "correlations.json")
        records = [self._dict_to_record(data) for data in self._file.load([])]
        self._cache: dict[tuple[str, str], CorrelationRecord] = {
            (r.subject_symbol, r.factor_symbol): r for r in records
        }
        logger.debug(f"Loaded {len(self._cache)} correlations from {self._file.file_path}")

    def _record_to_dict(self, record: CorrelationRecord) -> dict:
        return {
            "subject_symbol": record.subject_symbol,
            "factor_symbol": record.factor_symbol,
            "coefficient": record.coefficient,
            "updated_at": record.updated_at.isoformat(),
        }

    def _dict_to_record(self, data: dict) -> CorrelationRecord:
        return CorrelationRecord(
            subject_symbol=data["subject_symbol"],
            factor_symbol=data["factor_symbol"],
            coefficient=data["coefficient"],
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def _flush(self) -> None:
        self._file.save([self._record_to_dict(r) for r in self._cache.values()])

    def upsert(self, record: CorrelationRecord) -> None:
        key = (record.subject_symbol, record.factor_symbol)
        with self._file.lock:
            previous = self._cache.get(key)
            self._cache[key] = replace(record)
            try:
                self._flush()
            except OSError:
                if previous is None:
                    del self._cache[key]
                else:
                    self._cache[key] = previous
                raise

    def get(self, symbol: str, factor: str) -> CorrelationRecord | None:
        with self._file.lock:
            record = self._cache.get((symbol, factor))
            return replace(record) if record else None

    def list_for_symbol(self, symbol: str) -> list[CorrelationRecord]:
        with self._file.lock:
            return [replace(r) for r in self._cache.values() if r.subject_symbol == symbol]

    def list_all(self) -> list[CorrelationRecord]:
        with self._file.lock:
            return [replace(r) for r in self._cache.values()]


class JsonPredictionRepository(PredictionRepository):
    """Predictions stored in ``{data_dir}/predictions.json`` keyed by id."""

    def __init__(self, data_dir: Path):
        self._file = _JsonFile(data_dir / "predictions.json")
        self._cache: dict[str, PredictionRecord] = {
            key: self._dict_to_record(data) for key, data in self._file.load({}).items()
        }
        logger.debug(f"Loaded {len(self._cache)} predictions from {self._file.file_path}")

    def _record_to_dict(self, record: PredictionRecord) -> dict:
        return {
            "id": record.id,
            "indicator": record.indicator,
            "symbol": record.symbol,
            "action": record.action.value,
            "confidence": record.confidence,
            "price_at_prediction": record.price_at_prediction,
            "horizon": record.horizon,
            "created_at": record.created_at.isoformat(),
            "status": record.status.value,
            "actual_price": record.actual_price,
            "resolved_at": record.resolved_at.isoformat() if record.resolved_at else None,
        }

    def _dict_to_record(self, data: dict) -> PredictionRecord:
        return PredictionRecord(
            id=data["id"],
            indicator=data["indicator"],
            symbol=data["symbol"],
            action=PredictionAction(data["action"]),
            confidence=data["confidence"],
            price_at_prediction=data["price_at_prediction"],
            horizon=data["horizon"],
            created_at=datetime.fromisoformat(data["created_at"]),
            status=PredictionStatus(data["status"]),
            actual_price=data.get("actual_price"),
            resolved_at=_parse_time(data.get("resolved_at")),
        )

    def _flush(self) -> None:
        self._file.save({key: self._record_to_dict(r) for key, r in self._cache.items()})

    def add(self, record: PredictionRecord) -> None:
        with self._file.lock:
            if record.id in self._cache:
                raise ValueError(f"Duplicate prediction id: {record.id}")
            self._cache[record.id] = replace(record)
            self._flush()

    def get(self, prediction_id: str) -> PredictionRecord | None:
        with self._file.lock:
            record = self._cache.get(prediction_id)
            return replace(record) if record else None

    def resolve(
        self,
        prediction_id: str,
        status: PredictionStatus,
        actual_price: float,
        resolved_at: datetime,
    ) -> PredictionRecord | None:
        with self._file.lock:
            record = self._cache.get(prediction_id)
            if record is None:
                raise NotFoundError(prediction_id)
            if not record.is_pending:
                return None
            updated = replace(
                record,
                status=status,
                actual_price=actual_price,
                resolved_at=resolved_at,
            )
            self._cache[prediction_id] = updated
            try:
                self._flush()
            except OSError:
                # Keep the cache consistent with disk
                self._cache[prediction_id] = record
                raise
            return replace(updated)

    def unresolve(self, prediction_id: str, status: PredictionStatus) -> bool:
        with self._file.lock:
            record = self._cache.get(prediction_id)
            if record is None or record.status != status:
                return False
            self._cache[prediction_id] = replace(
                record,
                status=PredictionStatus.PENDING,
                actual_price=None,
                resolved_at=None,
            )
            try:
                self._flush()
            except OSError:
                self._cache[prediction_id] = record
                raise
            return True

    def list_pending(self, indicator: str | None = None) -> list[PredictionRecord]:
        with self._file.lock:
            pending = [
                replace(r)
                for r in self._cache.values()
                if r.is_pending and (indicator is None or r.indicator == indicator)
            ]
        return sorted(pending, key=lambda r: r.created_at)


class JsonAccuracyRepository(AccuracyRepository):
    """Accuracy stats stored in ``{data_dir}/indicator_accuracy.json`` keyed by indicator."""

    _COUNTER_FIELDS = (
        "total_predictions",
        "correct_predictions",
        "buy_predictions",
        "buy_correct",
        "sell_predictions",
        "sell_correct",
        "hold_predictions",
        "hold_correct",
    )

    def __init__(self, data_dir: Path):
        self._file = _JsonFile(data_dir / "indicator_accuracy.json")
        self._cache: dict[str, IndicatorAccuracyStats] = {
            key: self._dict_to_stats(data) for key, data in self._file.load({}).items()
        }

    def _stats_to_dict(self, stats: IndicatorAccuracyStats) -> dict:
        data = {"indicator": stats.indicator}
        for name in self._COUNTER_FIELDS:
            data[name] = getattr(stats, name)
        data["confidence_sum"] = stats.confidence_sum
        data["average_accuracy"] = stats.average_accuracy
        data["updated_at"] = stats.updated_at.isoformat() if stats.updated_at else None
        return data

    def _dict_to_stats(self, data: dict) -> IndicatorAccuracyStats:
        stats = IndicatorAccuracyStats(
            indicator=data["indicator"],
            confidence_sum=data.get("confidence_sum", 0.0),
            updated_at=_parse_time(data.get("updated_at")),
        )
        for name in self._COUNTER_FIELDS:
            setattr(stats, name, data.get(name, 0))
        return stats

    def _flush(self) -> None:
        self._file.save({key: self._stats_to_dict(s) for key, s in self._cache.items()})

    def get(self, indicator: str) -> IndicatorAccuracyStats | None:
        with self._file.lock:
            stats = self._cache.get(indicator)
            return replace(stats) if stats else None

    def increment(
        self,
        indicator: str,
        action: PredictionAction,
        was_correct: bool,
        confidence: float,
    ) -> IndicatorAccuracyStats:
        with self._file.lock:
            current = self._cache.get(indicator)
            stats = replace(current) if current else IndicatorAccuracyStats(indicator=indicator)
            stats.record(action, was_correct, confidence)
            stats.updated_at = datetime.now()
            self._cache[indicator] = stats
            try:
                self._flush()
            except OSError:
                if current is None:
                    del self._cache[indicator]
                else:
                    self._cache[indicator] = current
                raise
            return replace(stats)

    def list_all(self) -> list[IndicatorAccuracyStats]:
        with self._file.lock:
            return [replace(s) for s in self._cache.values()]


def create_json_repositories(data_dir: Path) -> Repositories:
    """Build JSON-file repositories rooted at ``data_dir``."""
    data_dir.mkdir(parents=True, exist_ok=True)
    return Repositories(
        correlations=JsonCorrelationRepository(data_dir),
        predictions=JsonPredictionRepository(data_dir),
        accuracy=JsonAccuracyRepository(data_dir),
    )
