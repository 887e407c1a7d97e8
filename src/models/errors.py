"""Error types raised by the market factor engine."""


class MarketFactorError(Exception):
    """Base class for all market factor engine errors."""


class ValidationError(MarketFactorError, ValueError):
    """Raised when an input value is malformed or out of range.

    Values are never clamped; the caller gets the error instead.
    """


class NotFoundError(MarketFactorError, LookupError):
    """Raised when a prediction id is unknown."""

    def __init__(self, prediction_id: str):
        self.prediction_id = prediction_id
        super().__init__(f"Prediction {prediction_id} not found")


class AlreadyResolvedError(MarketFactorError):
    """Raised when resolving a prediction that is no longer pending."""

    def __init__(self, prediction_id: str, status: str):
        self.prediction_id = prediction_id
        self.status = status
        super().__init__(f"Prediction {prediction_id} already resolved as {status}")
