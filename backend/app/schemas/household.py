from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from app.models.user_household import HouseholdRole
from app.schemas.auth import UserResponse
from app.schemas.base import ApiModel, collapse_whitespace


class HouseholdCreateRequest(ApiModel):
    name: str = Field(min_length=1, max_length=120)

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> object:
        return collapse_whitespace(value)


class HouseholdResponse(ApiModel):
    id: UUID
    name: str
    invite_code: str
    created_at: datetime
    updated_at: datetime


class HouseholdMemberResponse(UserResponse):
    role: HouseholdRole
    joined_at: datetime


class InviteResponse(ApiModel):
    invite_code: str
    message: str


class JoinHouseholdRequest(ApiModel):
    invite_code: str = Field(min_length=6, max_length=32)
