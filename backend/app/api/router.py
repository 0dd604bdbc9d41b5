from fastapi import APIRouter

from app.api.analytics import router as analytics_router
from app.api.auth import router as auth_router
from app.api.budgets import router as budgets_router
from app.api.households import router as households_router
from app.api.shopping import router as shopping_router
from app.api.transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(households_router)
api_router.include_router(transactions_router)
api_router.include_router(budgets_router)
api_router.include_router(shopping_router)
api_router.include_router(analytics_router)
