from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_bearer_token, get_current_user
from app.core.db import get_session
from app.core.errors import UnauthorizedError
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.auth import SessionResponse, TokenResponse, UserResponse
from app.schemas.converters import to_user_response
from app.services.auth.identity import (
    IdentityConfigError,
    IdentityTokenError,
    verify_identity_token,
)
from app.services.user_service import upsert_user_from_identity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/session", response_model=SessionResponse)
async def create_session(
    identity_token: str = Depends(get_bearer_token),
    session: AsyncSession = Depends(get_session),
) -> SessionResponse:
    try:
        identity = await verify_identity_token(identity_token)
    except IdentityConfigError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    except IdentityTokenError as exc:
        raise UnauthorizedError(str(exc)) from exc

    user = await upsert_user_from_identity(session, identity)
    return SessionResponse(
        token=TokenResponse(access_token=create_access_token(str(user.id))),
        user=to_user_response(user),
    )


@router.get("/user", response_model=UserResponse)
async def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    return to_user_response(user)
