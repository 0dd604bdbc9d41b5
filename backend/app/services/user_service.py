from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
import structlog

from app.core.errors import ConflictError
from app.models.user import User
from app.services.auth.identity import ExternalIdentity

logger = structlog.get_logger(__name__)


async def upsert_user_from_identity(
    session: AsyncSession,
    identity: ExternalIdentity,
) -> User:
    """Create or refresh the local profile mirrored from the identity provider."""
    result = await session.execute(select(User).where(User.external_id == identity.subject))
    user = result.scalar_one_or_none()
    now = datetime.now(UTC).replace(tzinfo=None)

    if identity.email:
        email_owner_result = await session.execute(
            select(User).where(User.email == identity.email)
        )
        email_owner = email_owner_result.scalar_one_or_none()
        if email_owner and (user is None or email_owner.id != user.id):
            raise ConflictError("Email is already linked to another account.")

    if user is None:
        user = User(
            external_id=identity.subject,
            email=identity.email,
            first_name=identity.first_name,
            last_name=identity.last_name,
            profile_image_url=identity.profile_image_url,
            created_at=now,
            updated_at=now,
        )
        logger.info("user_created", external_id=identity.subject)
    else:
        user.email = identity.email or user.email
        user.first_name = identity.first_name or user.first_name
        user.last_name = identity.last_name or user.last_name
        user.profile_image_url = identity.profile_image_url or user.profile_image_url
        user.updated_at = now

    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user
