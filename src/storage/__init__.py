"""Storage backends for the market factor engine."""
import logging
from pathlib import Path

from src.config.settings import StorageSettings

from .base import AccuracyRepository, CorrelationRepository, PredictionRepository, Repositories
from .json_store import create_json_repositories
from .memory_store import create_memory_repositories

logger = logging.getLogger(__name__)


def create_repositories(settings: StorageSettings) -> Repositories:
    """Build repositories for the configured backend.

    Args:
        settings: Storage configuration.

    Returns:
        Repositories for correlations, predictions and accuracy stats.
    """
    if settings.backend == "json":
        data_dir = Path(settings.data_dir)
        logger.info(f"Using JSON storage in {data_dir}")
        return create_json_repositories(data_dir)

    logger.info("Using in-memory storage")
    return create_memory_repositories()


__all__ = [
    "AccuracyRepository",
    "CorrelationRepository",
    "PredictionRepository",
    "Repositories",
    "create_json_repositories",
    "create_memory_repositories",
    "create_repositories",
]
