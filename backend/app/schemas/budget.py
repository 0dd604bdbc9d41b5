from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import Field

from app.schemas.base import ApiModel
from app.schemas.category import CategoryResponse

BudgetStatus = Literal["on_track", "warning", "exceeded", "invalid_limit"]


class BudgetGoalCreateRequest(ApiModel):
    category_id: UUID
    household_id: UUID
    monthly_limit: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)


class BudgetGoalResponse(ApiModel):
    id: UUID
    category_id: UUID
    household_id: UUID
    monthly_limit: Decimal
    month: int
    year: int
    created_at: datetime


class BudgetGoalWithSpendResponse(BudgetGoalResponse):
    category: CategoryResponse
    spent: Decimal
    transaction_count: int
    percentage_used: float | None = None
    remaining: Decimal
    status: BudgetStatus
