from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_household_membership
from app.core.config import get_settings
from app.core.db import get_session
from app.models.user_household import UserHousehold
from app.schemas.analytics import AnalyticsResponse
from app.schemas.converters import to_analytics_response
from app.services.aggregation import compute_analytics, current_period

router = APIRouter(prefix="/api/households", tags=["analytics"])


@router.get("/{household_id}/analytics", response_model=AnalyticsResponse)
async def household_analytics(
    household_id: UUID,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    limit: int | None = Query(default=None, ge=1),
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> AnalyticsResponse:
    """Totals cover the transaction window; category rows cover the month only."""
    settings = get_settings()
    current_month, current_year = current_period(settings.ledger_timezone)
    summary = await compute_analytics(
        session,
        household_id=membership.household_id,
        month=month or current_month,
        year=year or current_year,
        timezone_name=settings.ledger_timezone,
        limit=limit or settings.analytics_transaction_window,
    )
    return to_analytics_response(summary)
