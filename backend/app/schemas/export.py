from datetime import datetime

from app.schemas.base import ApiModel
from app.schemas.budget import BudgetGoalWithSpendResponse
from app.schemas.category import CategoryResponse
from app.schemas.household import HouseholdMemberResponse, HouseholdResponse
from app.schemas.shopping import ShoppingItemDetailResponse
from app.schemas.transaction import TransactionDetailResponse


class HouseholdExportResponse(ApiModel):
    export_date: datetime
    app_version: str
    household: HouseholdResponse
    members: list[HouseholdMemberResponse]
    categories: list[CategoryResponse]
    transactions: list[TransactionDetailResponse]
    budget_goals: list[BudgetGoalWithSpendResponse]
    shopping_items: list[ShoppingItemDetailResponse]
