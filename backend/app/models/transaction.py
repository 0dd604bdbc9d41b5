from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, Numeric, String
from sqlmodel import Field, SQLModel

from app.models.category import TransactionType


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class IncomeSubtype(str, Enum):
    CONTRA_CHEQUE = "contra_cheque"
    FGTS = "fgts"
    DESCONTOS = "descontos"
    EXTRA = "extra"


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    description: str = Field(sa_column=Column(String(255), nullable=False))
    amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    type: TransactionType = Field(nullable=False, index=True)
    income_subtype: IncomeSubtype | None = Field(default=None)
    category_id: UUID = Field(foreign_key="categories.id", nullable=False, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    date: datetime = Field(default_factory=utc_now_naive, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
