from datetime import datetime
from uuid import UUID

from app.schemas.base import ApiModel


class UserResponse(ApiModel):
    id: UUID
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str
    profile_image_url: str | None = None
    created_at: datetime


class TokenResponse(ApiModel):
    access_token: str
    token_type: str = "bearer"


class SessionResponse(ApiModel):
    token: TokenResponse
    user: UserResponse
