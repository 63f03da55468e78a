"""Pydantic model for public votes."""

from pydantic import BaseModel, ConfigDict, Field


class PublicVote(BaseModel):
    """One resident's vote for one funded project.

    Digital votes come from the voting page; in-person votes are keyed in from
    paper ballots at community events.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", description="'{applicationId}_{voterId}'")
    application_id: str = Field(alias="applicationId")
    voter_id: str = Field(default="", alias="voterId")
    area: str = ""
    in_person: bool = Field(default=False, alias="inPerson")
    created_at: str = Field(default="", alias="createdAt")

    @classmethod
    def from_document(cls, doc: dict) -> "PublicVote":
        return cls.model_validate(doc)
