"""In-process cache of GET results, keyed by resource and query parameters.

Every mutation names the resources it makes stale, so callers never build
cache keys by hand.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any


class Resource(str, Enum):
    CURRENT_USER = "current_user"
    CURRENT_HOUSEHOLD = "current_household"
    MEMBERS = "members"
    CATEGORIES = "categories"
    TRANSACTIONS = "transactions"
    BUDGETS = "budgets"
    SHOPPING = "shopping"
    ANALYTICS = "analytics"


class Mutation(str, Enum):
    CREATE_HOUSEHOLD = "create_household"
    JOIN_HOUSEHOLD = "join_household"
    ROTATE_INVITE = "rotate_invite"
    CREATE_TRANSACTION = "create_transaction"
    CREATE_BUDGET = "create_budget"
    CREATE_SHOPPING_ITEM = "create_shopping_item"
    UPDATE_SHOPPING_ITEM = "update_shopping_item"
    RESET_HOUSEHOLD = "reset_household"


INVALIDATIONS: dict[Mutation, frozenset[Resource]] = {
    Mutation.CREATE_HOUSEHOLD: frozenset(
        {Resource.CURRENT_HOUSEHOLD, Resource.MEMBERS, Resource.CATEGORIES}
    ),
    Mutation.JOIN_HOUSEHOLD: frozenset({Resource.CURRENT_HOUSEHOLD, Resource.MEMBERS}),
    Mutation.ROTATE_INVITE: frozenset({Resource.CURRENT_HOUSEHOLD}),
    Mutation.CREATE_TRANSACTION: frozenset(
        {Resource.TRANSACTIONS, Resource.ANALYTICS, Resource.BUDGETS}
    ),
    Mutation.CREATE_BUDGET: frozenset({Resource.BUDGETS}),
    Mutation.CREATE_SHOPPING_ITEM: frozenset({Resource.SHOPPING}),
    Mutation.UPDATE_SHOPPING_ITEM: frozenset({Resource.SHOPPING}),
    Mutation.RESET_HOUSEHOLD: frozenset(
        {
            Resource.CATEGORIES,
            Resource.TRANSACTIONS,
            Resource.BUDGETS,
            Resource.SHOPPING,
            Resource.ANALYTICS,
        }
    ),
}

CacheKey = tuple[Resource, tuple[tuple[str, str], ...]]

_MISSING = object()


def make_key(resource: Resource, params: Mapping[str, Any] | None = None) -> CacheKey:
    items = tuple(
        sorted((name, str(value)) for name, value in (params or {}).items() if value is not None)
    )
    return resource, items


class ResourceCache:
    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def get(self, key: CacheKey, default: Any = _MISSING) -> Any:
        return self._entries.get(key, default)

    def contains(self, key: CacheKey) -> bool:
        return key in self._entries

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def invalidate_resources(self, resources: Iterable[Resource]) -> int:
        targets = frozenset(resources)
        stale = [key for key in self._entries if key[0] in targets]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def invalidate(self, mutation: Mutation) -> int:
        return self.invalidate_resources(INVALIDATIONS[mutation])

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
