from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Column, Numeric
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class BudgetGoal(SQLModel, table=True):
    __tablename__ = "budget_goals"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    category_id: UUID = Field(foreign_key="categories.id", nullable=False, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    monthly_limit: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    month: int = Field(nullable=False, index=True)
    year: int = Field(nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
