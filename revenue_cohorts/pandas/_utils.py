"""Shared utilities for pandas conversion operations."""

from decimal import Decimal
import math


def decimal_to_float(value: Decimal | None) -> float:
    """Convert Decimal to float for pandas compatibility (None becomes NaN)."""
    if value is None:
        return math.nan
    return float(value)


def float_to_decimal(value: float) -> Decimal:
    """Convert float to Decimal, avoiding precision issues.

    Warning:
        Floats with >15 significant digits may lose precision due to
        float representation limits. For revenue amounts requiring exact
        precision, use Decimal inputs from the start.

    Args:
        value: Float value to convert

    Returns:
        Decimal representation of the float

    Raises:
        TypeError: If value is not numeric

    Example:
        >>> float_to_decimal(1200.5)
        Decimal('1200.5')
    """
    if not isinstance(value, (int, float)):
        raise TypeError(f"Expected numeric type, got {type(value)}")
    return Decimal(str(value))
