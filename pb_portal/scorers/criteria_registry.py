"""Criteria Registry - the committee scoring criteria and their weights.

Loads the fixed, admin-configured criteria list from
``pb_portal/data/scoring_criteria.yaml``. When the file is missing the built-in list
(same ids and weights) is used.

Usage:
    from pb_portal.scorers.criteria_registry import get_scoring_criteria, get_criterion

    criteria = get_scoring_criteria()
    get_criterion("local_priorities").weight  # 15
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from pb_portal.config import get_config_dir
from pb_portal.errors import CriteriaConfigError

logger = logging.getLogger(__name__)

CRITERIA_FILENAME = "scoring_criteria.yaml"

# (id, name, weight), mirrors pb_portal/data/scoring_criteria.yaml
DEFAULT_CRITERIA = [
    ("overview_objectives", "Project Overview & SMART Objectives", 15),
    ("local_priorities", "Alignment with Local Priorities", 15),
    ("community_benefit", "Community Benefit & Outcomes", 10),
    ("activities_milestones", "Activities, Milestones & Delivery Responsibilities", 5),
    ("timeline_realism", "Timeline & Scheduling Realism", 10),
    ("collaborations_partnerships", "Collaborations & Partnerships", 10),
    ("risk_management", "Risk Management & Feasibility", 5),
    ("budget_value", "Budget Transparency & Value for Money", 10),
    ("cross_area_specificity", "Cross-Area Specificity & Venues (if applicable)", 10),
    ("marmot_wfg", "Alignment with Marmot Principles & WFG Goals", 10),
]


@dataclass(frozen=True)
class ScoreCriterion:
    """A single scoring criterion."""

    id: str
    name: str
    weight: float
    guidance: str = ""
    details: str = ""

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "weight": self.weight,
            "guidance": self.guidance,
            "details": self.details,
        }


# Module-level cache
_criteria_cache: Optional[list[ScoreCriterion]] = None


def _get_config_path() -> Path:
    return get_config_dir() / CRITERIA_FILENAME


def _build_default_criteria() -> list[ScoreCriterion]:
    return [ScoreCriterion(id=cid, name=name, weight=weight) for cid, name, weight in DEFAULT_CRITERIA]


def parse_criteria(raw: list[dict]) -> list[ScoreCriterion]:
    """Build and validate criteria from a list of plain dicts (YAML or document store)."""
    criteria = []
    for entry in raw:
        if "id" not in entry:
            raise CriteriaConfigError(f"Criterion missing 'id': {entry}")
        criteria.append(
            ScoreCriterion(
                id=str(entry["id"]),
                name=str(entry.get("name", entry["id"])),
                weight=entry.get("weight", 0),
                guidance=entry.get("guidance", "") or "",
                details=(entry.get("details", "") or "").strip(),
            )
        )
    validate_criteria(criteria)
    return criteria


def validate_criteria(criteria: list[ScoreCriterion]) -> None:
    """Validate ids are unique and weights are non-negative numbers."""
    seen = set()
    for criterion in criteria:
        if criterion.id in seen:
            raise CriteriaConfigError(f"Duplicate criterion id: {criterion.id}")
        seen.add(criterion.id)
        if isinstance(criterion.weight, bool) or not isinstance(criterion.weight, (int, float)):
            raise CriteriaConfigError(f"Criterion {criterion.id} has non-numeric weight: {criterion.weight!r}")
        if criterion.weight < 0:
            raise CriteriaConfigError(f"Criterion {criterion.id} has negative weight: {criterion.weight}")


def _load_criteria() -> list[ScoreCriterion]:
    """Load and cache criteria from YAML."""
    global _criteria_cache
    if _criteria_cache is not None:
        return _criteria_cache

    config_path = _get_config_path()
    if not config_path.exists():
        logger.warning(f"Scoring criteria config not found at {config_path}, using defaults")
        _criteria_cache = _build_default_criteria()
        return _criteria_cache

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    _criteria_cache = parse_criteria(raw.get("criteria", []))
    logger.info(f"Loaded {len(_criteria_cache)} scoring criteria (total weight {total_weight(_criteria_cache)})")
    return _criteria_cache


def get_scoring_criteria() -> list[ScoreCriterion]:
    """Get the configured scoring criteria, in display order."""
    return list(_load_criteria())


def get_criterion(criterion_id: str) -> Optional[ScoreCriterion]:
    """Look up a criterion by id. Returns None for unknown ids."""
    for criterion in _load_criteria():
        if criterion.id == criterion_id:
            return criterion
    return None


def total_weight(criteria: Optional[list[ScoreCriterion]] = None) -> float:
    """Sum of criterion weights (defaults to the configured criteria)."""
    if criteria is None:
        criteria = _load_criteria()
    return sum(c.weight for c in criteria)


def clear_cache():
    """Clear the criteria cache (useful for testing)."""
    global _criteria_cache
    _criteria_cache = None
