"""Orchestrator module wiring the market factor engine together."""

from .market_factors_service import MarketFactorsService

__all__ = [
    "MarketFactorsService",
]
