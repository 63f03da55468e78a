"""
Weighted committee scoring.

Converts per-criterion raw scores into a weighted percentage:

    weighted_total = round( sum_i (raw_i / max_raw) * weight_i / sum_i weight_i * 100 )

Two input scales are in use:
- Scoring matrix: 0-3 per criterion (ScoreScale.MATRIX)
- Slider form: 0-100 per criterion (ScoreScale.SLIDER)

Scoring is lenient by default: missing or non-numeric criterion scores count
as 0 and out-of-range scores are clamped. Pass strict=True to raise
ScoreOutOfRangeError instead of clamping.

All functions are pure; persisting the resulting Score is the caller's job.
"""

import logging
import math
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from pb_portal.constants import MATRIX_MAX_RAW, SLIDER_MAX_RAW
from pb_portal.errors import ScoreOutOfRangeError
from pb_portal.scorers.criteria_registry import ScoreCriterion, get_scoring_criteria
from pb_portal.utils.rounding import round_half_up
from pb_portal.validators.bounds_validator import clamp_to_bounds, is_within_bounds

logger = logging.getLogger(__name__)


class ScoreScale(IntEnum):
    """Maximum raw score per criterion for each scoring form."""

    MATRIX = MATRIX_MAX_RAW
    SLIDER = SLIDER_MAX_RAW


_SCALE_FIELDS = {
    ScoreScale.MATRIX: "matrix_score",
    ScoreScale.SLIDER: "slider_score",
}


def _coerce_raw(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result):
        return 0.0
    return result


def _bounds_field(max_raw: int) -> str:
    field_name = _SCALE_FIELDS.get(max_raw)
    if field_name is None:
        raise ValueError(f"Unsupported score scale 0-{max_raw}, expected one of {[int(s) for s in ScoreScale]}")
    return field_name


def normalize_raw_score(
    criterion_id: str,
    value: Any,
    max_raw: int = ScoreScale.MATRIX,
    strict: bool = False,
) -> float:
    """
    Turn one raw criterion score into a usable number in [0, max_raw].

    Args:
        criterion_id: Criterion the score belongs to (for logging / errors)
        value: Raw value from the form; None, NaN or non-numeric count as 0
        max_raw: Top of the scale (3 for the matrix, 100 for the slider)
        strict: Raise ScoreOutOfRangeError instead of clamping

    Returns:
        The score, clamped into range
    """
    field_name = _bounds_field(max_raw)
    score = _coerce_raw(value)
    if is_within_bounds(field_name, score):
        return score
    if strict:
        raise ScoreOutOfRangeError(criterion_id, score, int(max_raw))
    return float(clamp_to_bounds(field_name, score, context=criterion_id))


def calculate_weighted_total(
    breakdown: dict[str, Any],
    criteria: Optional[list[ScoreCriterion]] = None,
    max_raw: int = ScoreScale.MATRIX,
    strict: bool = False,
) -> int:
    """
    Calculate the weighted percentage total for one scorer's breakdown.

    Args:
        breakdown: criterion id -> raw score
        criteria: Criteria with weights (defaults to the configured list)
        max_raw: Top of the raw scale
        strict: Raise on out-of-range scores instead of clamping

    Returns:
        Integer percentage in [0, 100]. Returns 0 when the weights sum to 0.
    """
    if criteria is None:
        criteria = get_scoring_criteria()

    weight_sum = sum(c.weight for c in criteria)
    if weight_sum <= 0:
        logger.debug("Criteria weights sum to 0, weighted total is 0")
        return 0

    weighted = 0.0
    for criterion in criteria:
        raw = normalize_raw_score(criterion.id, breakdown.get(criterion.id), max_raw, strict)
        weighted += (raw / max_raw) * criterion.weight

    return int(round_half_up(weighted / weight_sum * 100))


def calculate_raw_total(
    breakdown: dict[str, Any],
    criteria: Optional[list[ScoreCriterion]] = None,
    max_raw: int = ScoreScale.MATRIX,
    strict: bool = False,
) -> float:
    """Sum of (clamped) raw scores, e.g. the matrix's "raw total /30"."""
    if criteria is None:
        criteria = get_scoring_criteria()
    return sum(normalize_raw_score(c.id, breakdown.get(c.id), max_raw, strict) for c in criteria)


def max_raw_total(criteria: Optional[list[ScoreCriterion]] = None, max_raw: int = ScoreScale.MATRIX) -> float:
    """Highest possible raw total for the criteria on the given scale."""
    if criteria is None:
        criteria = get_scoring_criteria()
    return len(criteria) * max_raw


class Score(BaseModel):
    """One committee member's score for one application.

    A score is created on submission and never updated once final, so the
    model is frozen. Field aliases are the document store's camelCase names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="'{appId}_{scorerId}', one score per (application, scorer)")
    app_id: str = Field(alias="appId")
    scorer_id: str = Field(alias="scorerId")
    scorer_name: str = Field(default="", alias="scorerName")
    breakdown: dict[str, float] = Field(default_factory=dict, description="criterion id -> raw score")
    weighted_total: int = Field(alias="weightedTotal", ge=0, le=100)
    notes: dict[str, str] = Field(default_factory=dict, description="criterion id -> scorer note")
    is_final: bool = Field(default=True, alias="isFinal")
    created_at: str = Field(alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    def to_document(self) -> dict:
        """Serialise for the document store (camelCase keys)."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: dict) -> "Score":
        return cls.model_validate(doc)


def score_id(app_id: str, scorer_id: str) -> str:
    """Deterministic score document id."""
    return f"{app_id}_{scorer_id}"


def build_score(
    app_id: str,
    scorer_id: str,
    breakdown: dict[str, Any],
    criteria: Optional[list[ScoreCriterion]] = None,
    max_raw: int = ScoreScale.MATRIX,
    scorer_name: str = "",
    notes: Optional[dict[str, str]] = None,
    strict: bool = False,
    now: Optional[datetime] = None,
    created_at: Optional[str] = None,
) -> Score:
    """
    Build a final Score record from a scorer's breakdown.

    The stored breakdown only holds the configured criteria, with raw values
    normalised the same way the weighted total saw them.

    Args:
        created_at: Keep the original creation time when re-submitting a draft
        now: Clock override (defaults to the current UTC time)
    """
    if criteria is None:
        criteria = get_scoring_criteria()
    timestamp = (now or datetime.now(timezone.utc)).isoformat()

    clean_breakdown = {
        c.id: normalize_raw_score(c.id, breakdown.get(c.id), max_raw, strict) for c in criteria
    }
    unknown = set(breakdown) - set(clean_breakdown)
    if unknown:
        logger.warning(f"Ignoring scores for unknown criteria: {sorted(unknown)} [app_id={app_id}]")

    weighted_total = calculate_weighted_total(clean_breakdown, criteria, max_raw)
    logger.debug(f"Built score [app_id={app_id} scorer_id={scorer_id} weighted_total={weighted_total}]")

    return Score(
        id=score_id(app_id, scorer_id),
        app_id=app_id,
        scorer_id=scorer_id,
        scorer_name=scorer_name,
        breakdown=clean_breakdown,
        weighted_total=weighted_total,
        notes=dict(notes or {}),
        is_final=True,
        created_at=created_at or timestamp,
        updated_at=timestamp,
    )
