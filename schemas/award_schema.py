from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core.eligibility import dump_criteria, parse_criteria
from core.exceptions import ValidationError
from core.phases import Phase


def _validate_criteria(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    try:
        return dump_criteria(parse_criteria(value))
    except ValidationError as e:
        raise ValueError(e.detail) from None


class AwardSchema(BaseModel):
    uuid: UUID
    name: str
    description: str
    phase: Phase
    max_nominations: int
    finalist_count: int
    is_duo: bool
    nomination_criteria: Optional[Dict[str, Any]] = None
    voting_criteria: Optional[Dict[str, Any]] = None
    active: bool
    display_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class AwardWithStatusSchema(AwardSchema):
    has_nominated: bool = False
    has_voted: bool = False


class CreateAwardRequestSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    max_nominations: int = Field(1, ge=1)
    finalist_count: Optional[int] = Field(None, ge=1)
    nomination_criteria: Optional[Dict[str, Any]] = None
    voting_criteria: Optional[Dict[str, Any]] = None
    active: bool = True
    display_order: int = 0

    @field_validator("nomination_criteria", "voting_criteria")
    @classmethod
    def check_criteria(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return _validate_criteria(value)


class UpdateAwardRequestSchema(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    max_nominations: Optional[int] = Field(None, ge=1)
    finalist_count: Optional[int] = Field(None, ge=1)
    nomination_criteria: Optional[Dict[str, Any]] = None
    voting_criteria: Optional[Dict[str, Any]] = None
    display_order: Optional[int] = None

    @field_validator("nomination_criteria", "voting_criteria")
    @classmethod
    def check_criteria(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return _validate_criteria(value)


class ToggleActiveRequestSchema(BaseModel):
    active: bool


class BulkPhaseRequestSchema(BaseModel):
    from_phase: Phase
    to_phase: Phase


class MessageResponseSchema(BaseModel):
    message: str
