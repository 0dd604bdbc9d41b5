from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.models.category import TransactionType
from app.models.transaction import IncomeSubtype
from app.schemas.auth import UserResponse
from app.schemas.base import ApiModel, collapse_whitespace
from app.schemas.category import CategoryResponse


class TransactionCreateRequest(ApiModel):
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    type: TransactionType
    income_subtype: IncomeSubtype | None = None
    category_id: UUID
    household_id: UUID
    date: datetime | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, value: object) -> object:
        return collapse_whitespace(value)

    @model_validator(mode="after")
    def _income_subtype_requires_income(self) -> "TransactionCreateRequest":
        if self.income_subtype is not None and self.type != TransactionType.INCOME:
            raise ValueError("incomeSubtype is only allowed for income transactions")
        return self


class TransactionResponse(ApiModel):
    id: UUID
    description: str
    amount: Decimal
    type: TransactionType
    income_subtype: IncomeSubtype | None = None
    category_id: UUID
    household_id: UUID
    user_id: UUID
    date: datetime
    created_at: datetime


class TransactionDetailResponse(TransactionResponse):
    user: UserResponse
    category: CategoryResponse
