"""Pydantic model for portal users (the fields calculations need)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pb_portal.roles import UserRole, normalize_role


class PortalUser(BaseModel):
    """A signed-in user. The role is normalized on load."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str
    display_name: str = Field(default="", alias="displayName")
    email: str = ""
    role: UserRole = UserRole.PUBLIC
    area: Optional[str] = Field(default=None, description="Committee member's area")

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, v):
        return normalize_role(v)

    @property
    def is_committee(self) -> bool:
        return self.role == UserRole.COMMITTEE

    @classmethod
    def from_document(cls, doc: dict) -> "PortalUser":
        return cls.model_validate(doc)
