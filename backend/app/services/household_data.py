"""Household-wide export and reset."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.config import get_settings
from app.core.errors import PersistenceError
from app.models.budget_goal import BudgetGoal
from app.models.category import Category
from app.models.shopping_item import ShoppingItem
from app.models.transaction import Transaction
from app.schemas.converters import (
    to_budget_with_spend,
    to_category_response,
    to_member_response,
    to_shopping_detail,
    to_transaction_detail,
)
from app.schemas.export import HouseholdExportResponse
from app.schemas.household import HouseholdResponse
from app.services.aggregation import compute_budget_view, current_period
from app.services.category_seeder import list_household_categories, seed_default_categories
from app.services.household_service import get_household, list_household_members, lock_household
from app.services.ledger_service import list_transactions_detailed
from app.services.shopping_service import list_shopping_items

logger = structlog.get_logger(__name__)

# Children before parents: every table here references categories or households.
RESET_ORDER = (ShoppingItem, BudgetGoal, Transaction, Category)


async def export_household_data(
    session: AsyncSession,
    *,
    household_id: UUID,
    now: datetime | None = None,
) -> HouseholdExportResponse:
    settings = get_settings()
    exported_at = now or datetime.now(UTC)
    month, year = current_period(settings.ledger_timezone, exported_at)

    household = await get_household(session, household_id=household_id)
    members = await list_household_members(session, household_id=household_id)
    categories = await list_household_categories(session, household_id=household_id)
    transactions = await list_transactions_detailed(session, household_id=household_id)
    budget_view = await compute_budget_view(
        session,
        household_id=household_id,
        month=month,
        year=year,
        timezone_name=settings.ledger_timezone,
    )
    shopping_items = await list_shopping_items(session, household_id=household_id)

    logger.info(
        "household_exported",
        household_id=str(household_id),
        transactions=len(transactions),
        shopping_items=len(shopping_items),
    )
    return HouseholdExportResponse(
        export_date=exported_at,
        app_version=settings.app_version,
        household=HouseholdResponse.model_validate(household),
        members=[to_member_response(user, membership) for user, membership in members],
        categories=[to_category_response(category) for category in categories],
        transactions=[
            to_transaction_detail(transaction, user, category)
            for transaction, user, category in transactions
        ],
        budget_goals=[to_budget_with_spend(entry) for entry in budget_view],
        shopping_items=[to_shopping_detail(item, user) for item, user in shopping_items],
    )


async def reset_household_data(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[Category]:
    """Delete all household content and re-seed default categories.

    Runs as one transaction: either everything is replaced or nothing is.
    Household and membership rows are untouched.
    """
    try:
        await lock_household(session, household_id=household_id)
        deleted: dict[str, int] = {}
        for model in RESET_ORDER:
            result = await session.execute(
                delete(model).where(model.household_id == household_id)
            )
            deleted[model.__tablename__] = result.rowcount or 0

        categories = await seed_default_categories(session, household_id=household_id)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("household_reset_failed", household_id=str(household_id), exc_info=exc)
        raise PersistenceError("Failed to reset household data") from exc
    except Exception:
        await session.rollback()
        raise

    logger.info("household_reset", household_id=str(household_id), deleted=deleted)
    return categories
