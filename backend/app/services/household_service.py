from __future__ import annotations

import secrets
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
import structlog

from app.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models.household import Household
from app.models.user import User
from app.models.user_household import HouseholdRole, UserHousehold
from app.services.category_seeder import seed_default_categories

logger = structlog.get_logger(__name__)


def new_invite_code() -> str:
    return secrets.token_urlsafe(9).replace("-", "").replace("_", "").upper()


async def generate_unique_invite_code(session: AsyncSession) -> str:
    for _ in range(10):
        candidate = new_invite_code()
        result = await session.execute(
            select(Household).where(Household.invite_code == candidate)
        )
        if result.scalar_one_or_none() is None:
            return candidate
    raise PersistenceError("Unable to generate invite code. Try again.")


async def get_user_membership(session: AsyncSession, *, user_id: UUID) -> UserHousehold | None:
    result = await session.execute(
        select(UserHousehold).where(UserHousehold.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_household(session: AsyncSession, *, user_id: UUID) -> Household | None:
    result = await session.execute(
        select(Household)
        .join(UserHousehold, UserHousehold.household_id == Household.id)
        .where(UserHousehold.user_id == user_id)
    )
    return result.scalars().first()


async def require_household_membership(
    session: AsyncSession,
    *,
    user: User,
    household_id: UUID,
) -> UserHousehold:
    """Resolve the caller's membership, hiding other tenants' households."""
    result = await session.execute(
        select(UserHousehold).where(
            UserHousehold.user_id == user.id,
            UserHousehold.household_id == household_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise NotFoundError("Household not found")
    return membership


def require_admin(membership: UserHousehold) -> None:
    if membership.role != HouseholdRole.ADMIN:
        raise ForbiddenError("Only household admin can perform this action")


async def get_household(session: AsyncSession, *, household_id: UUID) -> Household:
    result = await session.execute(select(Household).where(Household.id == household_id))
    household = result.scalar_one_or_none()
    if not household:
        raise NotFoundError("Household not found")
    return household


async def lock_household(
    session: AsyncSession,
    *,
    household_id: UUID,
    shared: bool = False,
) -> Household:
    """Row-lock the household for the rest of the current transaction.

    ``shared`` takes FOR SHARE (content inserts), otherwise FOR UPDATE
    (reset). Dialects without row locks ignore the clause.
    """
    result = await session.execute(
        select(Household)
        .where(Household.id == household_id)
        .with_for_update(read=shared)
    )
    household = result.scalar_one_or_none()
    if not household:
        raise NotFoundError("Household not found")
    return household


async def list_household_members(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[tuple[User, UserHousehold]]:
    result = await session.execute(
        select(User, UserHousehold)
        .join(UserHousehold, UserHousehold.user_id == User.id)
        .where(UserHousehold.household_id == household_id)
        .order_by(UserHousehold.created_at.asc())
    )
    return [(user, membership) for user, membership in result.all()]


async def create_household(session: AsyncSession, *, user: User, name: str) -> Household:
    if await get_user_membership(session, user_id=user.id):
        raise ConflictError("You already belong to a household.")

    cleaned = " ".join(name.strip().split())
    if not cleaned:
        raise ValidationError("Household name cannot be empty", field="name")

    household = Household(
        name=cleaned,
        invite_code=await generate_unique_invite_code(session),
    )
    try:
        session.add(household)
        await session.flush()
        session.add(
            UserHousehold(
                user_id=user.id,
                household_id=household.id,
                role=HouseholdRole.ADMIN,
            )
        )
        await seed_default_categories(session, household_id=household.id)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("You already belong to a household.") from exc
    await session.refresh(household)

    logger.info("household_created", household_id=str(household.id), user_id=str(user.id))
    return household


async def join_household(session: AsyncSession, *, user: User, invite_code: str) -> Household:
    if await get_user_membership(session, user_id=user.id):
        raise ConflictError("You already belong to a household.")

    result = await session.execute(
        select(Household).where(Household.invite_code == invite_code.upper().strip())
    )
    household = result.scalar_one_or_none()
    if not household:
        raise NotFoundError("Invalid invite code")

    session.add(
        UserHousehold(
            user_id=user.id,
            household_id=household.id,
            role=HouseholdRole.MEMBER,
        )
    )
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("You already belong to a household.") from exc
    await session.refresh(household)

    logger.info("household_joined", household_id=str(household.id), user_id=str(user.id))
    return household


async def rotate_invite_code(session: AsyncSession, *, household_id: UUID) -> Household:
    household = await get_household(session, household_id=household_id)
    household.invite_code = await generate_unique_invite_code(session)
    household.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(household)
    await session.commit()
    await session.refresh(household)
    return household
