from decimal import Decimal
from uuid import UUID

from app.schemas.base import ApiModel
from app.schemas.category import CategoryResponse


class CategorySpendingItem(ApiModel):
    category_id: UUID
    category: CategoryResponse
    total: Decimal
    transaction_count: int


class AnalyticsResponse(ApiModel):
    month: int
    year: int
    timezone: str
    current_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    category_spending: list[CategorySpendingItem]
