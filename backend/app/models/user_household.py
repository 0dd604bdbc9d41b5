from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class HouseholdRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class UserHousehold(SQLModel, table=True):
    __tablename__ = "user_households"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_user_households_user_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    role: HouseholdRole = Field(default=HouseholdRole.MEMBER, nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
