from datetime import datetime
from uuid import UUID

from app.models.category import TransactionType
from app.schemas.base import ApiModel


class CategoryResponse(ApiModel):
    id: UUID
    household_id: UUID
    name: str
    icon: str
    color: str
    type: TransactionType
    sort_order: int
    created_at: datetime
