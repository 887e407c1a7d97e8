"""Symbol/factor correlation storage."""

from .correlation_store import CorrelationStore

__all__ = ["CorrelationStore"]
