"""Monthly analytics and budget-vs-spend rollups.

Amounts are summed as ``Decimal`` and quantized to cents only when a value
leaves this module. Calendar months are resolved in a configurable timezone:
the month's local boundaries are converted to naive UTC (the storage
convention) and applied as a half-open range filter.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
import structlog

from app.models.budget_goal import BudgetGoal
from app.models.category import Category, TransactionType
from app.models.transaction import Transaction

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
WARNING_THRESHOLD = Decimal("80")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_timezone(timezone_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone", timezone=timezone_name, fallback="UTC")
        return ZoneInfo("UTC")


def current_period(timezone_name: str, now: datetime | None = None) -> tuple[int, int]:
    moment = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    local = moment.astimezone(resolve_timezone(timezone_name))
    return local.month, local.year


def month_bounds(month: int, year: int, timezone_name: str) -> tuple[datetime, datetime]:
    """Return the naive-UTC ``[start, end)`` range of a local calendar month."""
    tz = resolve_timezone(timezone_name)
    start_local = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        end_local = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end_local = datetime(year, month + 1, 1, tzinfo=tz)
    return (
        start_local.astimezone(UTC).replace(tzinfo=None),
        end_local.astimezone(UTC).replace(tzinfo=None),
    )


@dataclass(frozen=True)
class LedgerTotals:
    total_income: Decimal
    total_expenses: Decimal

    @property
    def current_balance(self) -> Decimal:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class CategorySpending:
    category: Category
    total: Decimal
    transaction_count: int


@dataclass(frozen=True)
class AnalyticsSummary:
    month: int
    year: int
    timezone: str
    totals: LedgerTotals
    monthly_totals: LedgerTotals
    category_spending: list[CategorySpending]


@dataclass(frozen=True)
class BudgetUsage:
    percentage_used: float | None
    remaining: Decimal
    status: str


@dataclass(frozen=True)
class BudgetGoalSpend:
    goal: BudgetGoal
    category: Category
    spent: Decimal
    transaction_count: int
    usage: BudgetUsage


def compute_totals(rows: list[tuple[Transaction, Category]]) -> LedgerTotals:
    """Partition by the category's type, not the transaction's own flag."""
    income = ZERO
    expenses = ZERO
    for transaction, category in rows:
        amount = Decimal(transaction.amount)
        if category.type == TransactionType.INCOME:
            income += amount
        elif category.type == TransactionType.EXPENSE:
            expenses += amount
    return LedgerTotals(total_income=income, total_expenses=expenses)


def budget_usage(monthly_limit: Decimal, spent: Decimal) -> BudgetUsage:
    limit = Decimal(monthly_limit)
    remaining = quantize_money(max(limit - spent, ZERO))
    if limit == ZERO:
        return BudgetUsage(percentage_used=None, remaining=remaining, status="invalid_limit")

    percentage = quantize_money(spent / limit * 100)
    if spent > limit:
        status = "exceeded"
    elif percentage > WARNING_THRESHOLD:
        status = "warning"
    else:
        status = "on_track"
    return BudgetUsage(percentage_used=float(percentage), remaining=remaining, status=status)


async def fetch_household_transactions(
    session: AsyncSession,
    *,
    household_id: UUID,
    limit: int | None = None,
) -> list[tuple[Transaction, Category]]:
    stmt = (
        select(Transaction, Category)
        .join(Category, Transaction.category_id == Category.id)
        .where(Transaction.household_id == household_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [(transaction, category) for transaction, category in result.all()]


async def group_monthly_spending(
    session: AsyncSession,
    *,
    household_id: UUID,
    month: int,
    year: int,
    timezone_name: str,
) -> list[CategorySpending]:
    period_start, period_end = month_bounds(month, year, timezone_name)
    result = await session.execute(
        select(Transaction, Category)
        .join(Category, Transaction.category_id == Category.id)
        .where(
            Transaction.household_id == household_id,
            Transaction.date >= period_start,
            Transaction.date < period_end,
        )
    )

    categories: dict[UUID, Category] = {}
    totals: dict[UUID, Decimal] = defaultdict(Decimal)
    counts: dict[UUID, int] = defaultdict(int)
    for transaction, category in result.all():
        categories[category.id] = category
        totals[category.id] += Decimal(transaction.amount)
        counts[category.id] += 1

    spending = [
        CategorySpending(
            category=categories[category_id],
            total=quantize_money(total),
            transaction_count=counts[category_id],
        )
        for category_id, total in totals.items()
    ]
    spending.sort(key=lambda item: (-item.total, item.category.name))
    return spending


async def compute_analytics(
    session: AsyncSession,
    *,
    household_id: UUID,
    month: int,
    year: int,
    timezone_name: str,
    limit: int | None = None,
) -> AnalyticsSummary:
    rows = await fetch_household_transactions(session, household_id=household_id, limit=limit)
    totals = compute_totals(rows)
    spending = await group_monthly_spending(
        session,
        household_id=household_id,
        month=month,
        year=year,
        timezone_name=timezone_name,
    )

    monthly_income = ZERO
    monthly_expenses = ZERO
    for item in spending:
        if item.category.type == TransactionType.INCOME:
            monthly_income += item.total
        else:
            monthly_expenses += item.total

    return AnalyticsSummary(
        month=month,
        year=year,
        timezone=timezone_name,
        totals=LedgerTotals(
            total_income=quantize_money(totals.total_income),
            total_expenses=quantize_money(totals.total_expenses),
        ),
        monthly_totals=LedgerTotals(
            total_income=quantize_money(monthly_income),
            total_expenses=quantize_money(monthly_expenses),
        ),
        category_spending=spending,
    )


async def list_budget_goals(
    session: AsyncSession,
    *,
    household_id: UUID,
    month: int,
    year: int,
) -> list[tuple[BudgetGoal, Category]]:
    result = await session.execute(
        select(BudgetGoal, Category)
        .join(Category, BudgetGoal.category_id == Category.id)
        .where(
            BudgetGoal.household_id == household_id,
            BudgetGoal.month == month,
            BudgetGoal.year == year,
        )
        .order_by(BudgetGoal.created_at.asc())
    )
    return [(goal, category) for goal, category in result.all()]


async def compute_budget_view(
    session: AsyncSession,
    *,
    household_id: UUID,
    month: int,
    year: int,
    timezone_name: str,
) -> list[BudgetGoalSpend]:
    """Goals drive the join: categories without a goal never appear."""
    goals = await list_budget_goals(session, household_id=household_id, month=month, year=year)
    if not goals:
        return []

    spending = await group_monthly_spending(
        session,
        household_id=household_id,
        month=month,
        year=year,
        timezone_name=timezone_name,
    )
    spending_by_category = {item.category.id: item for item in spending}

    view: list[BudgetGoalSpend] = []
    for goal, category in goals:
        matched = spending_by_category.get(goal.category_id)
        spent = matched.total if matched else ZERO
        view.append(
            BudgetGoalSpend(
                goal=goal,
                category=category,
                spent=spent,
                transaction_count=matched.transaction_count if matched else 0,
                usage=budget_usage(goal.monthly_limit, spent),
            )
        )
    return view
