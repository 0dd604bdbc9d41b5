from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_household_membership
from app.core.db import get_session
from app.models.user import User
from app.models.user_household import UserHousehold
from app.schemas.converters import to_shopping_detail
from app.schemas.shopping import (
    ShoppingItemCreateRequest,
    ShoppingItemDetailResponse,
    ShoppingItemResponse,
    ShoppingItemUpdateRequest,
)
from app.services.household_service import require_household_membership
from app.services.shopping_service import (
    create_shopping_item,
    get_shopping_item,
    list_shopping_items,
    update_shopping_item,
)

router = APIRouter(prefix="/api", tags=["shopping"])


@router.get(
    "/households/{household_id}/shopping",
    response_model=list[ShoppingItemDetailResponse],
)
async def list_shopping(
    household_id: UUID,
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> list[ShoppingItemDetailResponse]:
    rows = await list_shopping_items(session, household_id=membership.household_id)
    return [to_shopping_detail(item, user) for item, user in rows]


@router.post(
    "/shopping",
    response_model=ShoppingItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_shopping_route(
    payload: ShoppingItemCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShoppingItemResponse:
    await require_household_membership(session, user=user, household_id=payload.household_id)
    item = await create_shopping_item(session, user=user, payload=payload)
    return ShoppingItemResponse.model_validate(item)


@router.patch("/shopping/{item_id}", response_model=ShoppingItemResponse)
async def update_shopping_route(
    item_id: UUID,
    payload: ShoppingItemUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShoppingItemResponse:
    item = await get_shopping_item(session, item_id=item_id)
    await require_household_membership(session, user=user, household_id=item.household_id)
    item = await update_shopping_item(session, item=item, payload=payload)
    return ShoppingItemResponse.model_validate(item)
