"""
Coefficient Engine - reach-based vote weighting for public digital voting.

Smaller organisations receive a modest boost to their vote counts so that
organisations with big audiences cannot win purely on mobilisation.

    reach <= small.maxReach                    -> small
    small.maxReach < reach <= medium.maxReach  -> medium
    otherwise                                  -> large

    adjusted_votes = round(raw_votes * tier_factor, 1)

When coefficients are disabled every tier's factor is treated as 1.0,
whatever is stored. applyToInPerson decides whether votes cast at physical
events are adjusted too; that policy is applied by tally_public_votes(), not
by the tier/factor functions.

Usage:
    from pb_portal.scorers.coefficient_engine import (
        calculate_coefficient_tier, calculate_adjusted_votes, get_default_coefficient_settings,
    )

    settings = get_default_coefficient_settings()
    tier = calculate_coefficient_tier(50, settings)  # CoefficientTier.SMALL
    calculate_adjusted_votes(100, tier, settings)  # 150.0
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from pb_portal.config import get_config_dir
from pb_portal.constants import MAX_COEFFICIENT_FACTOR, MIN_COEFFICIENT_FACTOR
from pb_portal.errors import CoefficientConfigError, InvalidReachError
from pb_portal.models.vote import PublicVote
from pb_portal.utils.rounding import round_half_up
from pb_portal.validators.bounds_validator import is_within_bounds

logger = logging.getLogger(__name__)

COEFFICIENTS_FILENAME = "coefficients.yaml"


class CoefficientTier(str, Enum):
    """Reach tier. Compares equal to its lowercase string value."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass(frozen=True)
class TierBand:
    """One tier's upper reach bound (None for the open-ended large tier) and vote factor."""

    factor: float
    max_reach: Optional[float] = None


@dataclass(frozen=True)
class CoefficientSettings:
    """Per-round coefficient configuration.

    Validated on construction: small.maxReach < medium.maxReach, reach bounds
    non-negative, every factor in [1, 2].
    """

    small: TierBand
    medium: TierBand
    large: TierBand
    enabled: bool = True
    apply_to_in_person: bool = False

    def __post_init__(self):
        validate_coefficient_settings(self)

    def band(self, tier: Union[CoefficientTier, str]) -> TierBand:
        return {
            CoefficientTier.SMALL: self.small,
            CoefficientTier.MEDIUM: self.medium,
            CoefficientTier.LARGE: self.large,
        }[CoefficientTier(tier)]

    def to_document(self) -> dict:
        """Serialise to the stored settings shape."""
        return {
            "enabled": self.enabled,
            "applyToInPerson": self.apply_to_in_person,
            "tiers": {
                "small": {"maxReach": self.small.max_reach, "factor": self.small.factor},
                "medium": {"maxReach": self.medium.max_reach, "factor": self.medium.factor},
                "large": {"factor": self.large.factor},
            },
        }

    @classmethod
    def from_document(cls, doc: dict) -> "CoefficientSettings":
        """Build settings from the stored shape (also the YAML shape)."""
        tiers = doc.get("tiers") or {}
        try:
            small = tiers["small"]
            medium = tiers["medium"]
            large = tiers.get("large") or {}
            return cls(
                small=TierBand(factor=float(small["factor"]), max_reach=float(small["maxReach"])),
                medium=TierBand(factor=float(medium["factor"]), max_reach=float(medium["maxReach"])),
                large=TierBand(factor=float(large.get("factor", 1.0))),
                enabled=bool(doc.get("enabled", True)),
                apply_to_in_person=bool(doc.get("applyToInPerson", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            if isinstance(e, CoefficientConfigError):
                raise
            raise CoefficientConfigError(f"Malformed coefficient settings: {e}") from e


def validate_coefficient_settings(settings: CoefficientSettings) -> None:
    """Raise CoefficientConfigError if the tiers do not partition reach or a factor is out of range."""
    for name in ("small", "medium"):
        band = getattr(settings, name)
        if band.max_reach is None or math.isnan(band.max_reach):
            raise CoefficientConfigError(f"{name} tier needs a maxReach")
        if band.max_reach < 0:
            raise CoefficientConfigError(f"{name} tier maxReach must be >= 0, got {band.max_reach}")
    if settings.small.max_reach >= settings.medium.max_reach:
        raise CoefficientConfigError(
            f"small.maxReach ({settings.small.max_reach}) must be below medium.maxReach ({settings.medium.max_reach})"
        )
    for name in ("small", "medium", "large"):
        factor = getattr(settings, name).factor
        if not is_within_bounds("coefficient_factor", factor) or math.isnan(factor):
            raise CoefficientConfigError(
                f"{name} tier factor {factor} outside {MIN_COEFFICIENT_FACTOR}-{MAX_COEFFICIENT_FACTOR}"
            )


DEFAULT_COEFFICIENT_SETTINGS = CoefficientSettings(
    small=TierBand(factor=1.5, max_reach=50),
    medium=TierBand(factor=1.2, max_reach=200),
    large=TierBand(factor=1.0),
    enabled=True,
    apply_to_in_person=False,
)

# Module-level cache
_settings_cache: Optional[CoefficientSettings] = None


def _get_config_path() -> Path:
    return get_config_dir() / COEFFICIENTS_FILENAME


def get_default_coefficient_settings() -> CoefficientSettings:
    """Load (and cache) the default settings new rounds start from."""
    global _settings_cache
    if _settings_cache is not None:
        return _settings_cache

    config_path = _get_config_path()
    if not config_path.exists():
        logger.warning(f"Coefficient config not found at {config_path}, using defaults")
        _settings_cache = DEFAULT_COEFFICIENT_SETTINGS
        return _settings_cache

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    _settings_cache = CoefficientSettings.from_document(raw)
    logger.info(
        f"Loaded coefficient settings (enabled={_settings_cache.enabled} "
        f"small<={_settings_cache.small.max_reach} medium<={_settings_cache.medium.max_reach})"
    )
    return _settings_cache


def clear_cache():
    """Clear the settings cache (useful for testing)."""
    global _settings_cache
    _settings_cache = None


# =============================================================================
# Tier / factor calculations
# =============================================================================


def calculate_coefficient_tier(reach: float, settings: CoefficientSettings) -> CoefficientTier:
    """
    Classify an organisation's reach figure into a tier.

    Raises:
        InvalidReachError: reach is negative or not a number
    """
    if not isinstance(reach, (int, float)) or isinstance(reach, bool) or math.isnan(reach):
        raise InvalidReachError(f"Reach must be a number, got {reach!r}")
    if reach < 0:
        raise InvalidReachError(f"Reach must be >= 0, got {reach}")

    if reach <= settings.small.max_reach:
        return CoefficientTier.SMALL
    if reach <= settings.medium.max_reach:
        return CoefficientTier.MEDIUM
    return CoefficientTier.LARGE


def get_coefficient_factor(tier: Union[CoefficientTier, str], settings: CoefficientSettings) -> float:
    """Vote factor for a tier; 1.0 for every tier when coefficients are disabled."""
    if not settings.enabled:
        return 1.0
    return settings.band(tier).factor


def calculate_adjusted_votes(raw_votes: float, tier: Union[CoefficientTier, str], settings: CoefficientSettings) -> float:
    """raw_votes * tier factor, rounded to 1 decimal place."""
    return round_half_up(raw_votes * get_coefficient_factor(tier, settings), 1)


def adjust_votes_for_reach(raw_votes: float, reach: float, settings: CoefficientSettings) -> float:
    """Convenience: reach -> tier -> adjusted votes."""
    return calculate_adjusted_votes(raw_votes, calculate_coefficient_tier(reach, settings), settings)


def _format_reach(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def get_tier_label(tier: Union[CoefficientTier, str], settings: CoefficientSettings) -> str:
    """Human label with the reach range, e.g. 'Medium (51-200)'."""
    tier = CoefficientTier(tier)
    small_max = settings.small.max_reach
    medium_max = settings.medium.max_reach
    if tier == CoefficientTier.SMALL:
        return f"Small (0-{_format_reach(small_max)})"
    if tier == CoefficientTier.MEDIUM:
        return f"Medium ({_format_reach(small_max + 1)}-{_format_reach(medium_max)})"
    return f"Large ({_format_reach(medium_max + 1)}+)"


def format_coefficient_factor(factor: float) -> str:
    """Render a factor for display: 1.5 -> '×1.5', 1 -> '×1.0', 1.25 -> '×1.25'."""
    text = f"{factor:.2f}".rstrip("0")
    if text.endswith("."):
        text += "0"
    return f"×{text}"


# =============================================================================
# Reach submissions
# =============================================================================


class ReachData(BaseModel):
    """Reach figure an applicant submits for the public vote.

    Tier and factor are fixed at submission time for the applicant's display;
    tallies recompute them from reach_figure with the round's settings.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    reach_figure: float = Field(alias="reachFigure", ge=0)
    evidence_url: Optional[str] = Field(default=None, alias="evidenceUrl")
    evidence_file_path: Optional[str] = Field(default=None, alias="evidenceFilePath")
    declaration_confirmed: bool = Field(default=False, alias="declarationConfirmed")
    tier: CoefficientTier
    coefficient_factor: float = Field(alias="coefficientFactor")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def build_reach_data(
    reach: float,
    settings: CoefficientSettings,
    evidence_url: Optional[str] = None,
    evidence_file_path: Optional[str] = None,
    declaration_confirmed: bool = False,
) -> ReachData:
    """
    Validate a reach submission and attach its tier and factor.

    Raises:
        InvalidReachError: reach is not positive, no evidence is given, or the
            declaration is not confirmed
    """
    if not isinstance(reach, (int, float)) or isinstance(reach, bool) or math.isnan(reach) or reach <= 0:
        raise InvalidReachError(f"Reach figure must be greater than 0, got {reach!r}")
    if not is_within_bounds("reach_figure", reach):
        raise InvalidReachError(f"Reach figure {reach} is implausibly large")
    evidence_url = (evidence_url or "").strip() or None
    if evidence_url is None and not evidence_file_path:
        raise InvalidReachError("Reach evidence (a link or an uploaded file) is required")
    if not declaration_confirmed:
        raise InvalidReachError("The reach declaration must be confirmed")

    tier = calculate_coefficient_tier(reach, settings)
    return ReachData(
        reach_figure=reach,
        evidence_url=evidence_url,
        evidence_file_path=evidence_file_path,
        declaration_confirmed=True,
        tier=tier,
        coefficient_factor=get_coefficient_factor(tier, settings),
    )


# =============================================================================
# Vote tallying
# =============================================================================


@dataclass
class VoteTally:
    """Raw and coefficient-adjusted vote counts for one application."""

    application_id: str
    tier: CoefficientTier
    factor: float
    raw_digital: int = 0
    raw_in_person: int = 0
    adjusted_total: float = 0.0
    has_reach_data: bool = True

    @property
    def raw_total(self) -> int:
        return self.raw_digital + self.raw_in_person

    def to_dict(self) -> dict:
        return {
            "applicationId": self.application_id,
            "tier": self.tier.value,
            "factor": self.factor,
            "rawDigital": self.raw_digital,
            "rawInPerson": self.raw_in_person,
            "rawTotal": self.raw_total,
            "adjustedTotal": self.adjusted_total,
            "hasReachData": self.has_reach_data,
        }


def tally_public_votes(
    votes: list[PublicVote],
    reach_by_application: dict[str, float],
    settings: CoefficientSettings,
    application_ids: Optional[list[str]] = None,
) -> dict[str, VoteTally]:
    """
    Count votes per application and apply the reach coefficient.

    Digital votes are always adjusted. In-person votes are adjusted only when
    settings.apply_to_in_person is set. Applications without reach data are
    tallied in the large tier.

    Args:
        votes: Public votes (digital and in-person)
        reach_by_application: application id -> reach figure
        settings: The round's coefficient settings
        application_ids: Applications to include even with zero votes

    Returns:
        application id -> VoteTally
    """
    digital: dict[str, int] = defaultdict(int)
    in_person: dict[str, int] = defaultdict(int)
    for vote in votes:
        if vote.in_person:
            in_person[vote.application_id] += 1
        else:
            digital[vote.application_id] += 1

    ids = list(dict.fromkeys([*(application_ids or []), *digital, *in_person]))

    tallies: dict[str, VoteTally] = {}
    for app_id in ids:
        reach = reach_by_application.get(app_id)
        if reach is None:
            tier = CoefficientTier.LARGE
            logger.debug(f"No reach data for {app_id}, tallying as large tier")
        else:
            tier = calculate_coefficient_tier(reach, settings)
        factor = get_coefficient_factor(tier, settings)

        raw_digital = digital.get(app_id, 0)
        raw_in_person = in_person.get(app_id, 0)
        in_person_weighted = raw_in_person * factor if settings.apply_to_in_person else raw_in_person

        tallies[app_id] = VoteTally(
            application_id=app_id,
            tier=tier,
            factor=factor,
            raw_digital=raw_digital,
            raw_in_person=raw_in_person,
            adjusted_total=round_half_up(raw_digital * factor + in_person_weighted, 1),
            has_reach_data=reach is not None,
        )

    return tallies


def rank_tallies(tallies: dict[str, VoteTally]) -> list[VoteTally]:
    """Tallies ordered by adjusted total (highest first), ties broken by raw total then id."""
    return sorted(tallies.values(), key=lambda t: (-t.adjusted_total, -t.raw_total, t.application_id))
