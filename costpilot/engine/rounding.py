"""
Rounding helpers.

Money and scores are rounded half-up (2.5 -> 3), not with Python's
banker's rounding, so the same inputs always print the same figures.
"""

import math
from decimal import ROUND_HALF_UP, Decimal


def round_to(value: float, places: int = 0) -> float:
    """Round half-up to `places` decimals."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_int(value: float) -> int:
    """Round half-up to a whole number."""
    return int(round_to(value, 0))


def format_number(value: float) -> str:
    """Plain number text: 1500.0 -> '1500', 12.5 -> '12.5'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
