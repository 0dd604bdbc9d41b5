from app.models.budget_goal import BudgetGoal
from app.models.category import Category, TransactionType
from app.models.household import Household
from app.models.shopping_item import ShoppingItem, ShoppingPriority
from app.models.transaction import IncomeSubtype, Transaction
from app.models.user import User
from app.models.user_household import HouseholdRole, UserHousehold

__all__ = [
    "BudgetGoal",
    "Category",
    "Household",
    "HouseholdRole",
    "IncomeSubtype",
    "ShoppingItem",
    "ShoppingPriority",
    "Transaction",
    "TransactionType",
    "User",
    "UserHousehold",
]
