"""
Central configuration for config and data paths.

This module provides consistent paths across the library and the CLI.
YAML configuration (criteria, coefficients, areas) ships as package data in
``pb_portal/data/`` unless overridden.

Environment variables:
  - PB_CONFIG_DIR (default: the packaged pb_portal/data)
  - PB_DATA_DIR (default: ~/.pb-portal-data)
  - PB_SCORING_THRESHOLD (default: 50)
  - PB_STAGE1_VISIBLE / PB_STAGE2_VISIBLE / PB_VOTING_OPEN (default: true/false/false)
"""

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from pb_portal.constants import DEFAULT_SCORING_THRESHOLD


def get_config_dir() -> Path:
    """
    Get the directory holding the YAML configuration files.

    Uses PB_CONFIG_DIR environment variable if set, otherwise defaults
    to the ``data/`` directory shipped inside the package.

    Returns:
        Path to config directory
    """
    env_path = os.environ.get("PB_CONFIG_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path(str(resources.files("pb_portal").joinpath("data")))


def get_data_dir() -> Path:
    """Get the local data directory (CLI reports, log files)."""
    env_path = os.environ.get("PB_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.home() / ".pb-portal-data"


def get_log_dir() -> Path:
    """Get the log file directory."""
    return get_data_dir() / "logs"


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PortalSettings:
    """Portal-wide settings the calculations are parameterised by.

    Attributes:
        scoring_threshold: Average weighted total an application needs to pass scoring
        stage1_visible: Expression-of-interest form is open
        stage2_visible: Full application form is open
        voting_open: Public voting is open
    """

    scoring_threshold: int = DEFAULT_SCORING_THRESHOLD
    stage1_visible: bool = True
    stage2_visible: bool = False
    voting_open: bool = False

    @classmethod
    def from_env(cls) -> "PortalSettings":
        """Build settings from PB_* environment variables."""
        return cls(
            scoring_threshold=int(os.environ.get("PB_SCORING_THRESHOLD", DEFAULT_SCORING_THRESHOLD)),
            stage1_visible=_env_flag("PB_STAGE1_VISIBLE", True),
            stage2_visible=_env_flag("PB_STAGE2_VISIBLE", False),
            voting_open=_env_flag("PB_VOTING_OPEN", False),
        )

    @classmethod
    def from_document(cls, doc: dict) -> "PortalSettings":
        """Build settings from a stored settings document (camelCase keys)."""
        return cls(
            scoring_threshold=int(doc.get("scoringThreshold", DEFAULT_SCORING_THRESHOLD)),
            stage1_visible=bool(doc.get("stage1Visible", True)),
            stage2_visible=bool(doc.get("stage2Visible", False)),
            voting_open=bool(doc.get("votingOpen", False)),
        )
