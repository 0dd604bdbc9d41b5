from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFoundError, ValidationError
from app.models.shopping_item import ShoppingItem
from app.models.user import User
from app.schemas.shopping import ShoppingItemCreateRequest, ShoppingItemUpdateRequest
from app.services.ledger_service import to_naive_utc


async def list_shopping_items(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[tuple[ShoppingItem, User]]:
    result = await session.execute(
        select(ShoppingItem, User)
        .join(User, ShoppingItem.user_id == User.id)
        .where(ShoppingItem.household_id == household_id)
        .order_by(ShoppingItem.created_at.desc())
    )
    return [(item, user) for item, user in result.all()]


async def get_shopping_item(session: AsyncSession, *, item_id: UUID) -> ShoppingItem:
    result = await session.execute(select(ShoppingItem).where(ShoppingItem.id == item_id))
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundError("Shopping item not found.")
    return item


async def create_shopping_item(
    session: AsyncSession,
    *,
    user: User,
    payload: ShoppingItemCreateRequest,
) -> ShoppingItem:
    item = ShoppingItem(
        name=payload.name,
        estimated_price_min=payload.estimated_price_min,
        estimated_price_max=payload.estimated_price_max,
        priority=payload.priority,
        url=payload.url,
        household_id=payload.household_id,
        user_id=user.id,
    )
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


async def update_shopping_item(
    session: AsyncSession,
    *,
    item: ShoppingItem,
    payload: ShoppingItemUpdateRequest,
) -> ShoppingItem:
    updates = payload.model_dump(exclude_unset=True)

    if "name" in updates and payload.name is not None:
        item.name = payload.name
    if "estimated_price_min" in updates:
        item.estimated_price_min = payload.estimated_price_min
    if "estimated_price_max" in updates:
        item.estimated_price_max = payload.estimated_price_max
    if "priority" in updates and payload.priority is not None:
        item.priority = payload.priority
    if "url" in updates:
        item.url = payload.url
    if "purchased_price" in updates:
        item.purchased_price = payload.purchased_price
    if "purchased_date" in updates:
        item.purchased_date = (
            to_naive_utc(payload.purchased_date) if payload.purchased_date else None
        )
    if "purchased" in updates and payload.purchased is not None:
        item.purchased = payload.purchased
        if payload.purchased and item.purchased_date is None:
            item.purchased_date = datetime.now(UTC).replace(tzinfo=None)
        if not payload.purchased:
            item.purchased_date = None
            item.purchased_price = None

    low, high = item.estimated_price_min, item.estimated_price_max
    if low is not None and high is not None and low > high:
        await session.rollback()
        raise ValidationError(
            "estimatedPriceMin cannot exceed estimatedPriceMax",
            field="estimatedPriceMin",
        )

    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item
