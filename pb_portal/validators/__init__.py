"""Input validation helpers."""

from pb_portal.validators.bounds_validator import (
    FIELD_BOUNDS,
    clamp_to_bounds,
    get_bounds,
    is_within_bounds,
)

__all__ = [
    "FIELD_BOUNDS",
    "clamp_to_bounds",
    "get_bounds",
    "is_within_bounds",
]
