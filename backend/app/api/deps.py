from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.db import get_session
from app.core.errors import UnauthorizedError
from app.core.security import decode_access_token
from app.models.user import User
from app.models.user_household import UserHousehold
from app.services.household_service import require_admin, require_household_membership

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/session", auto_error=False)


async def get_bearer_token(token: str | None = Depends(oauth2_scheme)) -> str:
    if not token:
        raise UnauthorizedError("Not authenticated")
    return token


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    token: str = Depends(get_bearer_token),
) -> User:
    try:
        payload = decode_access_token(token)
        user_id = UUID(str(payload.get("sub")))
    except (ValueError, TypeError):
        raise UnauthorizedError()

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError()
    return user


async def get_household_membership(
    household_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserHousehold:
    return await require_household_membership(session, user=user, household_id=household_id)


async def get_household_admin(
    membership: UserHousehold = Depends(get_household_membership),
) -> UserHousehold:
    require_admin(membership)
    return membership
