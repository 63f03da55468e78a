"""
Pydantic models for application records.

These models hold only the application fields the calculations read. Stored
application documents carry many more (form answers, contact details,
uploads); those are ignored on load.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pb_portal.constants import (
    APPLICATION_STATUSES,
    CROSS_AREA,
    DEFAULT_PRIORITY,
    STAGE2_STATUSES,
    STATUS_DRAFT,
    STATUS_FUNDED,
)
from pb_portal.validators.bounds_validator import is_within_bounds

logger = logging.getLogger(__name__)


class Application(BaseModel):
    """Calculation view of an application (Stage 1 EOI or Stage 2 full application)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Document id, e.g. 'app_PBBLN001'")
    ref: str = Field(default="", description="Human reference, e.g. 'PBBLN001'")
    area: str = Field(default="", description="Area name, or 'Cross-Area'")
    project_title: str = Field(default="", alias="projectTitle")
    org_name: str = Field(default="", alias="orgName")
    amount_requested: float = Field(default=0.0, alias="amountRequested")
    total_cost: float = Field(default=0.0, alias="totalCost")
    status: str = Field(default=STATUS_DRAFT)
    priority: Optional[str] = Field(default=None, description="Local priority category")

    @field_validator("amount_requested", "total_cost", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def _blank_priority_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("status")
    @classmethod
    def _known_status(cls, v):
        if v not in APPLICATION_STATUSES:
            logger.warning(f"Unknown application status '{v}'")
        return v

    @model_validator(mode="after")
    def _sanity_warnings(self) -> "Application":
        """Warn about implausible figures (never rejects data)."""
        if not is_within_bounds("amount_requested", self.amount_requested):
            logger.warning(f"Implausible amountRequested={self.amount_requested} for {self.ref or self.id}")
        if self.total_cost and self.amount_requested > self.total_cost:
            logger.warning(
                f"amountRequested {self.amount_requested} exceeds totalCost {self.total_cost} for {self.ref or self.id}"
            )
        return self

    @property
    def is_funded(self) -> bool:
        return self.status == STATUS_FUNDED

    @property
    def is_stage2(self) -> bool:
        return self.status in STAGE2_STATUSES

    @property
    def is_cross_area(self) -> bool:
        return self.area == CROSS_AREA

    @property
    def priority_category(self) -> str:
        """Priority used for spend reporting ('Other' when unset)."""
        return self.priority or DEFAULT_PRIORITY

    @classmethod
    def from_document(cls, doc: dict) -> "Application":
        return cls.model_validate(doc)


def load_applications(docs: list[dict]) -> list[Application]:
    """Validate a list of application documents, skipping ones without an id."""
    applications = []
    for doc in docs:
        if not doc.get("id"):
            logger.warning(f"Skipping application document without id: ref={doc.get('ref')}")
            continue
        applications.append(Application.from_document(doc))
    return applications
