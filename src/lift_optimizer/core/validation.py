"""
Input validation for the optimizer core.

Every bound the formulas depend on is checked here, once, at the API
boundary, so the calculations themselves never produce NaN or Infinity
from bad input.
"""

import math

from .config import MAX_INTENSITY_PCT, MAX_RPE, MIN_RPE, WARMUP_MIN_RPE


class ValidationError(ValueError):
    """Raised when an input is outside the domain of a calculation."""

    pass


def _require_finite(value: float, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def validate_intensity(intensity_pct: float) -> float:
    """
    Validate a %1RM for the Hanley formulas.

    Args:
        intensity_pct: Intensity as percent of 1RM

    Returns:
        The intensity as float

    Raises:
        ValidationError: If intensity is negative or >= 100
    """
    intensity = _require_finite(intensity_pct, "intensity_pct")
    if intensity < 0:
        raise ValidationError(f"intensity_pct must be non-negative, got {intensity_pct}")
    if intensity >= 100:
        raise ValidationError(
            f"intensity_pct must be below 100 (clamp to {MAX_INTENSITY_PCT:g} first), "
            f"got {intensity_pct}"
        )
    return intensity


def validate_load_intensity(intensity_pct: float) -> float:
    """Validate a %1RM used as a load weight (0..100 inclusive)."""
    intensity = _require_finite(intensity_pct, "intensity_pct")
    if not 0 <= intensity <= 100:
        raise ValidationError(f"intensity_pct must be within 0..100, got {intensity_pct}")
    return intensity


def validate_positive_intensity(intensity_pct: float) -> float:
    """Validate a %1RM used as a divisor (0 < intensity <= 100)."""
    intensity = validate_load_intensity(intensity_pct)
    if intensity == 0:
        raise ValidationError("intensity_pct must be positive")
    return intensity


def validate_reps(reps: float, name: str = "reps") -> float:
    """Validate a non-negative rep count (fractional reps allowed)."""
    value = _require_finite(reps, name)
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {reps}")
    return value


def validate_whole_reps(reps: int, name: str = "reps") -> int:
    """Validate a non-negative integral rep count."""
    value = validate_reps(reps, name)
    if value != int(value):
        raise ValidationError(f"{name} must be a whole number, got {reps}")
    return int(value)


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate that a value is non-negative.

    Args:
        value: Value to validate
        name: Name for error message

    Returns:
        The value if valid

    Raises:
        ValidationError: If value is negative
    """
    number = _require_finite(value, name)
    if number < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def clamp_intensity(intensity_pct: float, ceiling: float = MAX_INTENSITY_PCT) -> float:
    """Clamp a user-supplied intensity into [0, ceiling] for the Hanley formulas."""
    intensity = _require_finite(intensity_pct, "intensity_pct")
    return max(0.0, min(intensity, ceiling))


def clamp_rpe(rpe: float, warmup: bool = False) -> float:
    """
    Clamp RPE into the scale.

    Values above 10 become 10; values below 1 become 1, or 0 for warm-up
    sets.
    """
    value = _require_finite(rpe, "rpe")
    floor = WARMUP_MIN_RPE if warmup else MIN_RPE
    return max(floor, min(value, MAX_RPE))
