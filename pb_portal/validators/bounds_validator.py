"""
Domain-specific numeric bounds for form inputs.

The portal's forms constrain inputs in the browser, but records reaching the
calculation core can still carry nonsensical numbers (a score of 7 on a 0-3
matrix, a negative reach figure, a factor of 5). This module provides bounds
checking for those fields.

Usage:
    from pb_portal.validators.bounds_validator import clamp_to_bounds, is_within_bounds

    is_within_bounds("coefficient_factor", 2.5)  # False
    clamp_to_bounds("matrix_score", 4)  # Returns 3

Design:
    - is_within_bounds() is the check used to reject bad reach and factor inputs
    - clamp_to_bounds() pulls out-of-bounds scores back to the nearest edge
    - Bounds are inclusive on both ends
    - Fields not in FIELD_BOUNDS are passed through unchanged
"""

import logging
from typing import TypeVar

from pb_portal.constants import (
    MATRIX_MAX_RAW,
    MAX_COEFFICIENT_FACTOR,
    MIN_COEFFICIENT_FACTOR,
    SLIDER_MAX_RAW,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", int, float)

# =============================================================================
# FIELD BOUNDS CONFIGURATION
# =============================================================================

# Bounds are (min, max) inclusive
FIELD_BOUNDS: dict[str, tuple[float | int, float | int]] = {
    # Committee scoring
    "matrix_score": (0, MATRIX_MAX_RAW),
    "slider_score": (0, SLIDER_MAX_RAW),
    "weighted_total": (0, 100),
    "criterion_weight": (0, 100),
    "scoring_threshold": (0, 100),

    # Reach / coefficients
    # Max reach is a county-wide audience; anything above is a typo
    "reach_figure": (0, 10_000_000),
    "max_reach": (0, 10_000_000),
    "coefficient_factor": (MIN_COEFFICIENT_FACTOR, MAX_COEFFICIENT_FACTOR),

    # Money (GBP)
    "amount_requested": (0, 1_000_000),
    "total_cost": (0, 10_000_000),
    "area_budget": (0, 10_000_000),
    "area_spend": (0, 10_000_000),
}

# Aliases: map document-store field names to canonical bounds
FIELD_ALIASES: dict[str, str] = {
    "reachFigure": "reach_figure",
    "maxReach": "max_reach",
    "factor": "coefficient_factor",
    "coefficientFactor": "coefficient_factor",
    "amountRequested": "amount_requested",
    "totalCost": "total_cost",
    "weightedTotal": "weighted_total",
    "scoringThreshold": "scoring_threshold",
}


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================


def get_bounds(field_name: str) -> tuple[float | int, float | int] | None:
    """
    Get bounds for a field, resolving aliases.

    Returns:
        (min, max) tuple if field has bounds defined, None otherwise
    """
    if field_name in FIELD_BOUNDS:
        return FIELD_BOUNDS[field_name]

    canonical = FIELD_ALIASES.get(field_name)
    if canonical:
        return FIELD_BOUNDS.get(canonical)

    return None


def is_within_bounds(field_name: str, value: float) -> bool:
    """True when value is inside the field's bounds (or the field has none)."""
    bounds = get_bounds(field_name)
    if bounds is None:
        return True
    min_val, max_val = bounds
    return min_val <= value <= max_val


def clamp_to_bounds(
    field_name: str,
    value: T,
    context: str | None = None,
    log_warning: bool = True,
) -> T:
    """
    Clamp a value into its field's bounds.

    Returns:
        The value itself when in range or unbounded, otherwise the nearest bound
    """
    bounds = get_bounds(field_name)
    if bounds is None:
        return value

    min_val, max_val = bounds
    clamped = min(max(value, min_val), max_val)
    if clamped != value and log_warning:
        where = f" for {context}" if context else ""
        logger.warning(
            f"Clamped out-of-bounds value{where}: {field_name}={value} -> {clamped} "
            f"(valid range: {min_val}-{max_val})"
        )
    return clamped
