from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_household_membership
from app.core.config import get_settings
from app.core.db import get_session
from app.models.user import User
from app.models.user_household import UserHousehold
from app.schemas.budget import (
    BudgetGoalCreateRequest,
    BudgetGoalResponse,
    BudgetGoalWithSpendResponse,
)
from app.schemas.converters import to_budget_with_spend
from app.services.aggregation import compute_budget_view, current_period
from app.services.household_service import require_household_membership
from app.services.ledger_service import create_budget_goal

router = APIRouter(prefix="/api", tags=["budgets"])


@router.get(
    "/households/{household_id}/budgets",
    response_model=list[BudgetGoalWithSpendResponse],
)
async def list_budgets(
    household_id: UUID,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> list[BudgetGoalWithSpendResponse]:
    settings = get_settings()
    current_month, current_year = current_period(settings.ledger_timezone)
    view = await compute_budget_view(
        session,
        household_id=membership.household_id,
        month=month or current_month,
        year=year or current_year,
        timezone_name=settings.ledger_timezone,
    )
    return [to_budget_with_spend(entry) for entry in view]


@router.post(
    "/budgets",
    response_model=BudgetGoalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_budget_route(
    payload: BudgetGoalCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> BudgetGoalResponse:
    await require_household_membership(session, user=user, household_id=payload.household_id)
    goal = await create_budget_goal(session, payload=payload)
    return BudgetGoalResponse.model_validate(goal)
