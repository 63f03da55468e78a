"""Rounding helpers matching the portal front end's Math.round behaviour."""

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ndigits decimals with halves rounded up (Python's round() rounds half to even)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor
