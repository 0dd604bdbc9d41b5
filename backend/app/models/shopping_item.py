from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, Numeric, String
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class ShoppingPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ShoppingItem(SQLModel, table=True):
    __tablename__ = "shopping_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    estimated_price_min: Decimal | None = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    estimated_price_max: Decimal | None = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    priority: ShoppingPriority = Field(default=ShoppingPriority.MEDIUM, nullable=False)
    url: str | None = Field(default=None, sa_column=Column(String(2048), nullable=True))
    purchased: bool = Field(default=False, nullable=False, index=True)
    purchased_price: Decimal | None = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    purchased_date: datetime | None = Field(default=None)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False, index=True)
