"""Input checks shared by the engine components."""
import math

from src.models.errors import ValidationError


def require_name(value: str, field_name: str) -> str:
    """Reject empty or non-string identifiers such as symbols and indicator names."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string, got {value!r}")
    return value


def require_range(value: float, low: float, high: float, field_name: str) -> float:
    """Reject values that are non-numeric, non-finite or outside [low, high]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not math.isfinite(value) or not low <= value <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}, got {value}")
    return float(value)


def require_positive(value: float, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field_name} must be positive, got {value}")
    return float(value)


def require_symbol(value: str, field_name: str) -> str:
    """Reject names that cannot appear in a ``symbol:factor`` matrix key."""
    require_name(value, field_name)
    if ":" in value:
        raise ValidationError(f"{field_name} must not contain ':', got {value!r}")
    return value
