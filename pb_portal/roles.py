"""
User roles and what each role may do.

Role strings arrive in several spellings ('admin', 'ADMIN', ' Admin ') from
the auth provider's custom claims and from user documents. normalize_role()
is the one place they are turned into a UserRole; everything downstream
compares enum members.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union

from pb_portal.constants import CROSS_AREA

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    """Closed set of portal roles. PUBLIC is an anonymous / guest visitor."""

    PUBLIC = "PUBLIC"
    APPLICANT = "APPLICANT"
    COMMITTEE = "COMMITTEE"
    ADMIN = "ADMIN"


# Legacy spellings seen in stored user documents
_ROLE_ALIASES = {
    "GUEST": UserRole.PUBLIC,
    "": UserRole.PUBLIC,
}


def normalize_role(value: Union[str, UserRole, None]) -> UserRole:
    """
    Normalize any role representation to a UserRole.

    Case and surrounding whitespace are ignored. Unknown values fall back to
    PUBLIC, the least-privileged role.
    """
    if isinstance(value, UserRole):
        return value
    if value is None:
        return UserRole.PUBLIC

    key = str(value).strip().upper()
    if key in _ROLE_ALIASES:
        return _ROLE_ALIASES[key]
    try:
        return UserRole(key)
    except ValueError:
        logger.warning(f"Unknown role '{value}', treating as {UserRole.PUBLIC.value}")
        return UserRole.PUBLIC


@dataclass(frozen=True)
class RolePermissions:
    """Capabilities granted to a role."""

    can_submit: bool
    can_score: bool
    can_manage: bool
    can_export: bool
    can_vote: bool
    view_restricted: bool


ROLE_PERMISSIONS: dict[UserRole, RolePermissions] = {
    UserRole.PUBLIC: RolePermissions(
        can_submit=False, can_score=False, can_manage=False, can_export=False, can_vote=True, view_restricted=False
    ),
    UserRole.APPLICANT: RolePermissions(
        can_submit=True, can_score=False, can_manage=False, can_export=False, can_vote=True, view_restricted=False
    ),
    # Committee members abstain from the public vote
    UserRole.COMMITTEE: RolePermissions(
        can_submit=False, can_score=True, can_manage=False, can_export=False, can_vote=False, view_restricted=True
    ),
    UserRole.ADMIN: RolePermissions(
        can_submit=True, can_score=True, can_manage=True, can_export=True, can_vote=True, view_restricted=True
    ),
}


def get_permissions(role: Union[str, UserRole, None]) -> RolePermissions:
    """Permissions for any role representation."""
    return ROLE_PERMISSIONS[normalize_role(role)]


def get_dashboard_for_role(role: Union[str, UserRole, None]) -> Literal["admin", "committee", "applicant"]:
    """Which dashboard a signed-in user lands on."""
    normalized = normalize_role(role)
    if normalized == UserRole.ADMIN:
        return "admin"
    if normalized == UserRole.COMMITTEE:
        return "committee"
    return "applicant"


def can_view_area(role: Union[str, UserRole, None], user_area: Optional[str], area: str) -> bool:
    """Admins see every area; committee members only their own (and Cross-Area)."""
    normalized = normalize_role(role)
    if normalized == UserRole.ADMIN:
        return True
    if normalized == UserRole.COMMITTEE:
        return area == user_area or area == CROSS_AREA
    return False
