from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from schemas.user_schema import UserSchema


class NominationRequestSchema(BaseModel):
    """Flat nominee uuids, or uuid pairs for duo awards."""
    nominee_ids: Union[List[UUID], List[List[UUID]]] = Field(..., description="Nominees or pairs of nominees")


class FinalVoteRequestSchema(BaseModel):
    nominee_id: Optional[UUID] = Field(None, description="UUID of the finalist to vote for")
    nomination_group_id: Optional[UUID] = Field(None, description="Group id of the finalist pair (duo awards)")

    @model_validator(mode="after")
    def check_single_target(self) -> "FinalVoteRequestSchema":
        if (self.nominee_id is None) == (self.nomination_group_id is None):
            raise ValueError("Provide either nominee_id or nomination_group_id")
        return self


class CandidateSchema(BaseModel):
    """A nominable user, or a finalist pair when ``is_duo`` is set."""
    is_duo: bool = False
    user: Optional[UserSchema] = None
    nomination_group_id: Optional[UUID] = None
    duo_members: List[UserSchema] = Field(default_factory=list)


class AwardResultSchema(BaseModel):
    nominee_id: UUID = Field(..., validation_alias="nominee_uuid")
    full_name: str
    avatar_url: str
    vote_count: int

    model_config = {"from_attributes": True, "populate_by_name": True}


class NominationPairSchema(BaseModel):
    nomination_group_id: UUID
    nominee_ids: List[UUID]


class UserNominationsSchema(BaseModel):
    award_id: UUID
    nominations: List[UUID] = Field(default_factory=list)
    pairs: List[NominationPairSchema] = Field(default_factory=list)


class UserFinalVoteSchema(BaseModel):
    award_id: UUID
    nominee_id: Optional[UUID] = None
    nomination_group_id: Optional[UUID] = None


class AwardNominationSummarySchema(BaseModel):
    nominee: UserSchema
    nomination_count: int
    nominators: str


class SubmissionResponseSchema(BaseModel):
    message: str
    award_id: UUID
    changed: bool = True
