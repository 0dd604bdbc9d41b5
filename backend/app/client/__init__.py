from app.client.api_client import BudgetApiClient
from app.client.cache import INVALIDATIONS, Mutation, Resource, ResourceCache
from app.client.errors import ApiError, UnauthorizedError

__all__ = [
    "INVALIDATIONS",
    "ApiError",
    "BudgetApiClient",
    "Mutation",
    "Resource",
    "ResourceCache",
    "UnauthorizedError",
]
