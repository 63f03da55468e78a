"""Tests for role normalisation and permissions."""

import pytest

from pb_portal.models.user import PortalUser
from pb_portal.roles import (
    ROLE_PERMISSIONS,
    UserRole,
    can_view_area,
    get_dashboard_for_role,
    get_permissions,
    normalize_role,
)


class TestNormalizeRole:
    """Every spelling maps to one enum member."""

    @pytest.mark.parametrize("value", ["admin", "ADMIN", " Admin ", UserRole.ADMIN])
    def test_admin_spellings(self, value):
        assert normalize_role(value) is UserRole.ADMIN

    def test_committee(self):
        assert normalize_role("committee") is UserRole.COMMITTEE

    def test_guest_is_public(self):
        assert normalize_role("guest") is UserRole.PUBLIC

    def test_empty_is_public(self):
        assert normalize_role("") is UserRole.PUBLIC
        assert normalize_role(None) is UserRole.PUBLIC

    def test_unknown_is_public(self, caplog):
        assert normalize_role("superuser") is UserRole.PUBLIC
        assert "Unknown role" in caplog.text

    def test_enum_compares_to_string(self):
        assert UserRole.APPLICANT == "APPLICANT"


class TestPermissions:
    """Permission table."""

    def test_every_role_has_permissions(self):
        assert set(ROLE_PERMISSIONS) == set(UserRole)

    def test_public(self):
        perms = get_permissions("guest")
        assert perms.can_vote is True
        assert perms.can_submit is False
        assert perms.can_score is False

    def test_applicant(self):
        perms = get_permissions("applicant")
        assert perms.can_submit is True
        assert perms.can_score is False
        assert perms.view_restricted is False

    def test_committee(self):
        perms = get_permissions(" committee ")
        assert perms.can_score is True
        assert perms.can_vote is False
        assert perms.can_manage is False
        assert perms.view_restricted is True

    def test_admin_can_do_everything(self):
        perms = get_permissions(UserRole.ADMIN)
        assert all(
            [perms.can_submit, perms.can_score, perms.can_manage, perms.can_export, perms.can_vote, perms.view_restricted]
        )

    def test_frozen(self):
        with pytest.raises(AttributeError):
            get_permissions("admin").can_manage = False


class TestDashboards:
    """Landing dashboard per role."""

    @pytest.mark.parametrize(
        "role,expected",
        [("ADMIN", "admin"), ("committee", "committee"), ("applicant", "applicant"), ("guest", "applicant")],
    )
    def test_dashboard(self, role, expected):
        assert get_dashboard_for_role(role) == expected


class TestAreaVisibility:
    """Committee members see their own area and Cross-Area."""

    def test_admin_sees_all(self):
        assert can_view_area("admin", None, "Blaenavon") is True

    def test_committee_own_area(self):
        assert can_view_area("committee", "Blaenavon", "Blaenavon") is True
        assert can_view_area("committee", "Blaenavon", "Thornhill & Upper Cwmbran") is False

    def test_committee_cross_area(self):
        assert can_view_area("committee", "Blaenavon", "Cross-Area") is True

    def test_applicant_sees_none(self):
        assert can_view_area("applicant", "Blaenavon", "Blaenavon") is False


class TestPortalUser:
    """Role normalisation at the model boundary."""

    def test_role_normalised_on_load(self):
        user = PortalUser.from_document({"uid": "u1", "displayName": "Jo", "role": "committee", "area": "Blaenavon"})
        assert user.role is UserRole.COMMITTEE
        assert user.is_committee is True
        assert user.display_name == "Jo"

    def test_missing_role_is_public(self):
        assert PortalUser(uid="u2").role is UserRole.PUBLIC
