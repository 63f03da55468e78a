"""Shared fixtures for pb_portal tests.

Registry caches (criteria, coefficients, areas) are cleared around every test
so tests that point PB_CONFIG_DIR at a temporary directory do not leak.
"""

import sys
from pathlib import Path

import pytest

# Add the repo root to path so tests can import pb_portal without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

BLAENAVON = "Blaenavon"
THORNHILL = "Thornhill & Upper Cwmbran"
TREVETHIN = "Trevethin, Penygarn & St. Cadocs"


def _clear_registry_caches():
    from pb_portal.scorers import coefficient_engine, criteria_registry
    from pb_portal.services import area_registry

    criteria_registry.clear_cache()
    coefficient_engine.clear_cache()
    area_registry.clear_cache()


@pytest.fixture(autouse=True)
def clear_registry_caches():
    """Start and finish every test with empty registry caches."""
    _clear_registry_caches()
    yield
    _clear_registry_caches()


@pytest.fixture
def empty_config_dir(tmp_path, monkeypatch):
    """Point PB_CONFIG_DIR at an empty directory so built-in defaults are used."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("PB_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def default_settings():
    """Coefficient settings: small <= 50 x1.5, medium <= 200 x1.2, large x1.0."""
    from pb_portal.scorers.coefficient_engine import DEFAULT_COEFFICIENT_SETTINGS

    return DEFAULT_COEFFICIENT_SETTINGS


@pytest.fixture
def simple_criteria():
    """Three criteria weighted 50/30/20."""
    from pb_portal.scorers.criteria_registry import ScoreCriterion

    return [
        ScoreCriterion(id="a", name="A", weight=50),
        ScoreCriterion(id="b", name="B", weight=30),
        ScoreCriterion(id="c", name="C", weight=20),
    ]


@pytest.fixture
def sample_applications():
    """A small round: two funded, two pending Stage 2, one draft, one cross-area."""
    from pb_portal.models.application import Application

    return [
        Application(
            id="app_PBBLN001",
            ref="PBBLN001",
            area=BLAENAVON,
            project_title="Community Garden",
            amount_requested=4000,
            total_cost=5000,
            status="Funded",
            priority="Health & Wellbeing",
        ),
        Application(
            id="app_PBBLN002",
            ref="PBBLN002",
            area=BLAENAVON,
            project_title="Heritage Trail",
            amount_requested=2500,
            status="Submitted-Stage2",
            priority="Heritage & Tourism",
        ),
        Application(
            id="app_PBTHN001",
            ref="PBTHN001",
            area=THORNHILL,
            project_title="Youth Club",
            amount_requested=3000,
            status="Funded",
        ),
        Application(
            id="app_PBTHN002",
            ref="PBTHN002",
            area=THORNHILL,
            amount_requested=1500,
            status="Invited-Stage2",
            priority="Youth Services",
        ),
        Application(
            id="app_PBTRE001",
            ref="PBTRE001",
            area=TREVETHIN,
            amount_requested=9999,
            status="Draft",
        ),
        Application(
            id="app_PBCRS001",
            ref="PBCRS001",
            area="Cross-Area",
            amount_requested=1200,
            status="Submitted-Stage2",
            priority="Community Safety",
        ),
    ]


@pytest.fixture
def committee():
    """Two Blaenavon members, one Thornhill member, and an admin."""
    from pb_portal.models.user import PortalUser

    return [
        PortalUser(uid="comm_bln_01", display_name="Member One", role="committee", area=BLAENAVON),
        PortalUser(uid="comm_bln_02", display_name="Member Two", role="COMMITTEE", area=BLAENAVON),
        PortalUser(uid="comm_thn_01", display_name="Member Three", role="committee", area=THORNHILL),
        PortalUser(uid="admin_01", display_name="Admin", role="admin"),
    ]
