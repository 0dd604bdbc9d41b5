from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
import structlog

from app.core.errors import NotFoundError, ValidationError
from app.models.budget_goal import BudgetGoal
from app.models.category import Category, TransactionType
from app.models.transaction import Transaction
from app.models.user import User
from app.schemas.budget import BudgetGoalCreateRequest
from app.schemas.transaction import TransactionCreateRequest
from app.services.household_service import lock_household

logger = structlog.get_logger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


async def get_household_category(
    session: AsyncSession,
    *,
    household_id: UUID,
    category_id: UUID,
) -> Category:
    result = await session.execute(
        select(Category).where(
            Category.id == category_id,
            Category.household_id == household_id,
        )
    )
    category = result.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category not found for this household.")
    return category


async def list_transactions_detailed(
    session: AsyncSession,
    *,
    household_id: UUID,
    limit: int | None = None,
) -> list[tuple[Transaction, User, Category]]:
    stmt = (
        select(Transaction, User, Category)
        .join(User, Transaction.user_id == User.id)
        .join(Category, Transaction.category_id == Category.id)
        .where(Transaction.household_id == household_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [(transaction, user, category) for transaction, user, category in result.all()]


async def create_transaction(
    session: AsyncSession,
    *,
    user: User,
    payload: TransactionCreateRequest,
) -> tuple[Transaction, Category]:
    await lock_household(session, household_id=payload.household_id, shared=True)
    category = await get_household_category(
        session,
        household_id=payload.household_id,
        category_id=payload.category_id,
    )
    if category.type != payload.type:
        raise ValidationError(
            f"Category '{category.name}' is a {category.type.value} category.",
            field="categoryId",
        )

    now = datetime.now(UTC).replace(tzinfo=None)
    transaction = Transaction(
        description=payload.description,
        amount=payload.amount,
        type=payload.type,
        income_subtype=payload.income_subtype,
        category_id=category.id,
        household_id=payload.household_id,
        user_id=user.id,
        date=to_naive_utc(payload.date) if payload.date else now,
        created_at=now,
    )
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)

    logger.info(
        "transaction_created",
        household_id=str(transaction.household_id),
        transaction_id=str(transaction.id),
        type=transaction.type.value,
    )
    return transaction, category


async def create_budget_goal(
    session: AsyncSession,
    *,
    payload: BudgetGoalCreateRequest,
) -> BudgetGoal:
    await lock_household(session, household_id=payload.household_id, shared=True)
    category = await get_household_category(
        session,
        household_id=payload.household_id,
        category_id=payload.category_id,
    )
    if category.type != TransactionType.EXPENSE:
        raise ValidationError(
            "Budget goals can only target expense categories.",
            field="categoryId",
        )

    goal = BudgetGoal(
        category_id=category.id,
        household_id=payload.household_id,
        monthly_limit=payload.monthly_limit,
        month=payload.month,
        year=payload.year,
    )
    session.add(goal)
    await session.commit()
    await session.refresh(goal)
    return goal
