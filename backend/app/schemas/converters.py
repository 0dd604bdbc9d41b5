from app.models.category import Category
from app.models.shopping_item import ShoppingItem
from app.models.transaction import Transaction
from app.models.user import User
from app.models.user_household import UserHousehold
from app.schemas.analytics import AnalyticsResponse, CategorySpendingItem
from app.schemas.auth import UserResponse
from app.schemas.budget import BudgetGoalWithSpendResponse
from app.schemas.category import CategoryResponse
from app.schemas.household import HouseholdMemberResponse
from app.schemas.shopping import ShoppingItemDetailResponse
from app.schemas.transaction import TransactionDetailResponse
from app.services.aggregation import AnalyticsSummary, BudgetGoalSpend


def to_user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def to_member_response(user: User, membership: UserHousehold) -> HouseholdMemberResponse:
    return HouseholdMemberResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        profile_image_url=user.profile_image_url,
        created_at=user.created_at,
        role=membership.role,
        joined_at=membership.created_at,
    )


def to_category_response(category: Category) -> CategoryResponse:
    return CategoryResponse.model_validate(category)


def to_transaction_detail(
    transaction: Transaction,
    user: User,
    category: Category,
) -> TransactionDetailResponse:
    return TransactionDetailResponse(
        id=transaction.id,
        description=transaction.description,
        amount=transaction.amount,
        type=transaction.type,
        income_subtype=transaction.income_subtype,
        category_id=transaction.category_id,
        household_id=transaction.household_id,
        user_id=transaction.user_id,
        date=transaction.date,
        created_at=transaction.created_at,
        user=to_user_response(user),
        category=to_category_response(category),
    )


def to_shopping_detail(item: ShoppingItem, user: User) -> ShoppingItemDetailResponse:
    return ShoppingItemDetailResponse(
        id=item.id,
        name=item.name,
        estimated_price_min=item.estimated_price_min,
        estimated_price_max=item.estimated_price_max,
        priority=item.priority,
        url=item.url,
        purchased=item.purchased,
        purchased_price=item.purchased_price,
        purchased_date=item.purchased_date,
        household_id=item.household_id,
        user_id=item.user_id,
        created_at=item.created_at,
        user=to_user_response(user),
    )


def to_budget_with_spend(entry: BudgetGoalSpend) -> BudgetGoalWithSpendResponse:
    goal = entry.goal
    return BudgetGoalWithSpendResponse(
        id=goal.id,
        category_id=goal.category_id,
        household_id=goal.household_id,
        monthly_limit=goal.monthly_limit,
        month=goal.month,
        year=goal.year,
        created_at=goal.created_at,
        category=to_category_response(entry.category),
        spent=entry.spent,
        transaction_count=entry.transaction_count,
        percentage_used=entry.usage.percentage_used,
        remaining=entry.usage.remaining,
        status=entry.usage.status,
    )


def to_analytics_response(summary: AnalyticsSummary) -> AnalyticsResponse:
    return AnalyticsResponse(
        month=summary.month,
        year=summary.year,
        timezone=summary.timezone,
        current_balance=summary.totals.current_balance,
        total_income=summary.totals.total_income,
        total_expenses=summary.totals.total_expenses,
        monthly_income=summary.monthly_totals.total_income,
        monthly_expenses=summary.monthly_totals.total_expenses,
        category_spending=[
            CategorySpendingItem(
                category_id=item.category.id,
                category=to_category_response(item.category),
                total=item.total,
                transaction_count=item.transaction_count,
            )
            for item in summary.category_spending
        ],
    )
