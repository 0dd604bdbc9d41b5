from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_household_membership
from app.core.config import get_settings
from app.core.db import get_session
from app.models.user import User
from app.models.user_household import UserHousehold
from app.schemas.converters import to_transaction_detail
from app.schemas.transaction import TransactionCreateRequest, TransactionDetailResponse
from app.services.household_service import require_household_membership
from app.services.ledger_service import create_transaction, list_transactions_detailed

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get(
    "/households/{household_id}/transactions",
    response_model=list[TransactionDetailResponse],
)
async def list_transactions(
    household_id: UUID,
    limit: int | None = Query(default=None, ge=1, le=1000),
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> list[TransactionDetailResponse]:
    rows = await list_transactions_detailed(
        session,
        household_id=membership.household_id,
        limit=limit or get_settings().default_transaction_limit,
    )
    return [
        to_transaction_detail(transaction, user, category)
        for transaction, user, category in rows
    ]


@router.post(
    "/transactions",
    response_model=TransactionDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction_route(
    payload: TransactionCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TransactionDetailResponse:
    await require_household_membership(session, user=user, household_id=payload.household_id)
    transaction, category = await create_transaction(session, user=user, payload=payload)
    return to_transaction_detail(transaction, user, category)
