from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_household_admin, get_household_membership
from app.core.db import get_session
from app.models.user import User
from app.models.user_household import UserHousehold
from app.schemas.category import CategoryResponse
from app.schemas.converters import to_category_response, to_member_response
from app.schemas.export import HouseholdExportResponse
from app.schemas.household import (
    HouseholdCreateRequest,
    HouseholdMemberResponse,
    HouseholdResponse,
    InviteResponse,
    JoinHouseholdRequest,
)
from app.services.category_seeder import list_household_categories
from app.services.household_data import export_household_data, reset_household_data
from app.services.household_service import (
    create_household,
    get_user_household,
    join_household,
    list_household_members,
    rotate_invite_code,
)

router = APIRouter(prefix="/api/households", tags=["households"])


@router.post("", response_model=HouseholdResponse, status_code=status.HTTP_201_CREATED)
async def create_household_route(
    payload: HouseholdCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdResponse:
    household = await create_household(session, user=user, name=payload.name)
    return HouseholdResponse.model_validate(household)


@router.get("/current", response_model=HouseholdResponse | None)
async def current_household(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdResponse | None:
    household = await get_user_household(session, user_id=user.id)
    if household is None:
        return None
    return HouseholdResponse.model_validate(household)


@router.post("/join", response_model=HouseholdResponse)
async def join_household_route(
    payload: JoinHouseholdRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdResponse:
    household = await join_household(session, user=user, invite_code=payload.invite_code)
    return HouseholdResponse.model_validate(household)


@router.get("/{household_id}/members", response_model=list[HouseholdMemberResponse])
async def list_members(
    household_id: UUID,
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> list[HouseholdMemberResponse]:
    members = await list_household_members(session, household_id=membership.household_id)
    return [to_member_response(user, member) for user, member in members]


@router.post("/{household_id}/invite", response_model=InviteResponse)
async def create_invite_code(
    household_id: UUID,
    membership: UserHousehold = Depends(get_household_admin),
    session: AsyncSession = Depends(get_session),
) -> InviteResponse:
    household = await rotate_invite_code(session, household_id=membership.household_id)
    return InviteResponse(
        invite_code=household.invite_code,
        message="Share this code with your partner to join your household.",
    )


@router.get("/{household_id}/categories", response_model=list[CategoryResponse])
async def list_categories(
    household_id: UUID,
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> list[CategoryResponse]:
    categories = await list_household_categories(session, household_id=membership.household_id)
    return [to_category_response(category) for category in categories]


@router.get("/{household_id}/export", response_model=HouseholdExportResponse)
async def export_household(
    household_id: UUID,
    response: Response,
    membership: UserHousehold = Depends(get_household_membership),
    session: AsyncSession = Depends(get_session),
) -> HouseholdExportResponse:
    document = await export_household_data(session, household_id=membership.household_id)
    filename = f"household_{membership.household_id}_{datetime.now(UTC).date().isoformat()}.json"
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return document


@router.delete("/{household_id}/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset_household(
    household_id: UUID,
    membership: UserHousehold = Depends(get_household_admin),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await reset_household_data(session, household_id=membership.household_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
