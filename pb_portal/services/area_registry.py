"""Area Registry - participatory budgeting areas, budgets and postcode eligibility.

Loads ``pb_portal/data/areas.yaml`` once per process. Without the file, the three
built-in areas and their default budgets are used with empty postcode lists,
so postcode lookups find nothing.

Usage:
    from pb_portal.services.area_registry import find_area_for_postcode, get_area_budgets

    find_area_for_postcode("np4 9aa")  # 'Blaenavon'
    get_area_budgets()  # {'Blaenavon': 25000.0, ...}
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from pb_portal.config import get_config_dir
from pb_portal.constants import CROSS_AREA, DEFAULT_PRIORITY

logger = logging.getLogger(__name__)

AREAS_FILENAME = "areas.yaml"

DEFAULT_AREA_BUDGETS = {
    "Blaenavon": 25000.0,
    "Thornhill & Upper Cwmbran": 25000.0,
    "Trevethin, Penygarn & St. Cadocs": 25000.0,
}

DEFAULT_PRIORITY_CATEGORIES = [
    "Youth Services",
    "Transport",
    "Antisocial Behaviour",
    "Health & Wellbeing",
    "Environment",
    "Sustainability",
    "Community",
    "Community Safety",
    "Heritage & Tourism",
    "Older People",
    "Crime",
    DEFAULT_PRIORITY,
]

__all__ = [
    "CROSS_AREA",
    "AreaDefinition",
    "normalize_postcode",
    "find_area_for_postcode",
    "get_area_budgets",
    "list_areas",
    "get_priority_categories",
    "clear_cache",
]


@dataclass(frozen=True)
class AreaDefinition:
    """One budgeting area."""

    name: str
    budget: float
    postcodes: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class _AreaConfig:
    areas: list[AreaDefinition]
    priority_categories: list[str]
    postcode_index: dict[str, str]


# Module-level cache
_area_cache: Optional[_AreaConfig] = None

_WHITESPACE = re.compile(r"\s+")


def normalize_postcode(postcode: Optional[str]) -> str:
    """Upper-case and strip all whitespace: ' np4 9aa ' -> 'NP49AA'."""
    if not postcode:
        return ""
    return _WHITESPACE.sub("", postcode).upper()


def _get_config_path() -> Path:
    return get_config_dir() / AREAS_FILENAME


def _build_config(areas: list[AreaDefinition], categories: list[str]) -> _AreaConfig:
    index: dict[str, str] = {}
    for area in areas:
        for postcode in area.postcodes:
            if postcode in index and index[postcode] != area.name:
                logger.warning(f"Postcode {postcode} listed in both {index[postcode]} and {area.name}")
                continue
            index[postcode] = area.name
    if DEFAULT_PRIORITY not in categories:
        categories = [*categories, DEFAULT_PRIORITY]
    return _AreaConfig(areas=areas, priority_categories=categories, postcode_index=index)


def _load_config() -> _AreaConfig:
    config_path = _get_config_path()

    if not config_path.exists():
        logger.warning(f"Area config not found at {config_path}, using defaults")
        areas = [AreaDefinition(name=name, budget=budget) for name, budget in DEFAULT_AREA_BUDGETS.items()]
        return _build_config(areas, list(DEFAULT_PRIORITY_CATEGORIES))

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    areas = []
    for entry in raw.get("areas", []):
        postcodes = frozenset(normalize_postcode(str(pc)) for pc in entry.get("postcodes") or [])
        areas.append(
            AreaDefinition(
                name=entry["name"],
                budget=float(entry.get("budget", DEFAULT_AREA_BUDGETS.get(entry["name"], 0.0))),
                postcodes=postcodes,
            )
        )
    categories = [str(c) for c in raw.get("priority_categories") or DEFAULT_PRIORITY_CATEGORIES]

    config = _build_config(areas, categories)
    logger.info(f"Loaded {len(areas)} areas with {len(config.postcode_index)} postcodes from {config_path}")
    return config


def _get_config() -> _AreaConfig:
    global _area_cache
    if _area_cache is None:
        _area_cache = _load_config()
    return _area_cache


def find_area_for_postcode(postcode: Optional[str]) -> Optional[str]:
    """Area containing the postcode, or None if it is not eligible."""
    return _get_config().postcode_index.get(normalize_postcode(postcode))


def list_areas() -> list[str]:
    """Area names in configured order (Cross-Area is not an area)."""
    return [area.name for area in _get_config().areas]


def get_area_budgets() -> dict[str, float]:
    """Default budget per area."""
    return {area.name: area.budget for area in _get_config().areas}


def get_priority_categories() -> list[str]:
    """Priority categories for spend reporting, always including 'Other'."""
    return list(_get_config().priority_categories)


def clear_cache():
    """Clear the area cache (useful for testing)."""
    global _area_cache
    _area_cache = None
