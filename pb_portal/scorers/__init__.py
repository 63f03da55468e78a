"""Deterministic scoring modules: committee scoring and public-vote coefficients."""

from pb_portal.scorers.coefficient_engine import (
    DEFAULT_COEFFICIENT_SETTINGS,
    CoefficientSettings,
    CoefficientTier,
    ReachData,
    TierBand,
    VoteTally,
    build_reach_data,
    calculate_adjusted_votes,
    calculate_coefficient_tier,
    format_coefficient_factor,
    get_coefficient_factor,
    get_default_coefficient_settings,
    get_tier_label,
    rank_tallies,
    tally_public_votes,
)
from pb_portal.scorers.criteria_registry import (
    ScoreCriterion,
    get_criterion,
    get_scoring_criteria,
    total_weight,
)
from pb_portal.scorers.scoring_monitor import (
    ScoringProgress,
    build_scoring_report,
    calculate_progress,
)
from pb_portal.scorers.weighted_scoring import (
    Score,
    ScoreScale,
    build_score,
    calculate_raw_total,
    calculate_weighted_total,
)

__all__ = [
    # Weighted scoring
    "Score",
    "ScoreScale",
    "build_score",
    "calculate_raw_total",
    "calculate_weighted_total",
    # Criteria
    "ScoreCriterion",
    "get_criterion",
    "get_scoring_criteria",
    "total_weight",
    # Scoring progress
    "ScoringProgress",
    "build_scoring_report",
    "calculate_progress",
    # Coefficients
    "DEFAULT_COEFFICIENT_SETTINGS",
    "CoefficientSettings",
    "CoefficientTier",
    "ReachData",
    "TierBand",
    "VoteTally",
    "build_reach_data",
    "calculate_adjusted_votes",
    "calculate_coefficient_tier",
    "format_coefficient_factor",
    "get_coefficient_factor",
    "get_default_coefficient_settings",
    "get_tier_label",
    "rank_tallies",
    "tally_public_votes",
]
