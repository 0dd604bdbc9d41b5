from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
import structlog

from app.models.category import Category, TransactionType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CategorySpec:
    name: str
    icon: str
    color: str
    type: TransactionType


DEFAULT_CATEGORIES: tuple[CategorySpec, ...] = (
    CategorySpec("Casa & Moradia", "🏠", "#8B5CF6", TransactionType.EXPENSE),
    CategorySpec("Alimentação", "🛒", "#10B981", TransactionType.EXPENSE),
    CategorySpec("Transporte", "🚗", "#F59E0B", TransactionType.EXPENSE),
    CategorySpec("Contas Básicas", "💡", "#EF4444", TransactionType.EXPENSE),
    CategorySpec("Saúde", "⚕️", "#EC4899", TransactionType.EXPENSE),
    CategorySpec("Educação", "📚", "#3B82F6", TransactionType.EXPENSE),
    CategorySpec("Vestuário", "👕", "#F97316", TransactionType.EXPENSE),
    CategorySpec("Lazer & Entretenimento", "🎬", "#8B5CF6", TransactionType.EXPENSE),
    CategorySpec("Cuidados Pessoais", "💅", "#EC4899", TransactionType.EXPENSE),
    CategorySpec("Outros", "📦", "#6B7280", TransactionType.EXPENSE),
    CategorySpec("Salário", "💰", "#10B981", TransactionType.INCOME),
    CategorySpec("Freelance", "💼", "#3B82F6", TransactionType.INCOME),
    CategorySpec("Investimentos", "📈", "#8B5CF6", TransactionType.INCOME),
    CategorySpec("Vendas", "🛍️", "#F59E0B", TransactionType.INCOME),
    CategorySpec("Outras Receitas", "💎", "#10B981", TransactionType.INCOME),
)


async def list_household_categories(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[Category]:
    result = await session.execute(
        select(Category)
        .where(Category.household_id == household_id)
        .order_by(Category.sort_order.asc(), Category.created_at.asc())
    )
    return list(result.scalars().all())


async def seed_default_categories(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[Category]:
    """Insert the default catalog unless the household already has categories.

    The caller owns the transaction: rows are flushed, never committed here.
    """
    existing = await list_household_categories(session, household_id=household_id)
    if existing:
        logger.info(
            "categories_already_seeded",
            household_id=str(household_id),
            count=len(existing),
        )
        return existing

    now = datetime.now(UTC).replace(tzinfo=None)
    inserted: list[Category] = []
    for order, spec in enumerate(DEFAULT_CATEGORIES):
        category = Category(
            household_id=household_id,
            name=spec.name,
            icon=spec.icon,
            color=spec.color,
            type=spec.type,
            sort_order=order,
            created_at=now,
        )
        session.add(category)
        inserted.append(category)

    await session.flush()
    logger.info(
        "categories_seeded",
        household_id=str(household_id),
        count=len(inserted),
    )
    return inserted
