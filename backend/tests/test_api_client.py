from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.client import ApiError, BudgetApiClient, Mutation, Resource, ResourceCache, UnauthorizedError
from app.client.cache import INVALIDATIONS, make_key
from app.main import app
from app.models.category import TransactionType
from app.schemas.shopping import ShoppingItemCreateRequest, ShoppingItemUpdateRequest
from app.schemas.transaction import TransactionCreateRequest


def test_cache_invalidation_map_drops_only_affected_resources() -> None:
    cache = ResourceCache()
    cache.set(make_key(Resource.TRANSACTIONS, {"limit": 10}), ["t"])
    cache.set(make_key(Resource.ANALYTICS, {"month": 3}), {"a": 1})
    cache.set(make_key(Resource.SHOPPING), ["s"])

    removed = cache.invalidate(Mutation.CREATE_TRANSACTION)

    assert removed == 2
    assert cache.contains(make_key(Resource.SHOPPING))
    assert not cache.contains(make_key(Resource.ANALYTICS, {"month": 3}))


def test_every_mutation_has_an_invalidation_entry() -> None:
    assert set(INVALIDATIONS) == set(Mutation)


def test_cache_key_ignores_param_order_and_none() -> None:
    assert make_key(Resource.BUDGETS, {"month": 3, "year": 2024, "x": None}) == make_key(
        Resource.BUDGETS, {"year": 2024, "month": 3}
    )


@pytest.mark.asyncio
async def test_client_round_trip_with_cache_invalidation(client: AsyncClient) -> None:
    # The `client` fixture installs the in-memory database override.
    async with BudgetApiClient(
        "http://testserver",
        transport=ASGITransport(app=app),
    ) as api:
        session = await api.login("idp:carla")
        assert session.user.email == "carla@example.com"
        assert await api.current_household() is None

        household = await api.create_household("Casa Carla")
        current = await api.current_household()
        assert current is not None and current.id == household.id

        categories = await api.categories(household.id)
        salary = next(c for c in categories if c.name == "Salário")

        assert await api.transactions(household.id) == []
        assert len(api.cache) >= 1

        await api.create_transaction(
            TransactionCreateRequest(
                description="Salário",
                amount=Decimal("3000.00"),
                type=TransactionType.INCOME,
                category_id=salary.id,
                household_id=household.id,
            )
        )
        transactions = await api.transactions(household.id)
        assert [t.amount for t in transactions] == [Decimal("3000.00")]

        analytics = await api.analytics(household.id)
        assert analytics.total_income == Decimal("3000.00")

        item = await api.create_shopping_item(
            ShoppingItemCreateRequest(name="Fogão", household_id=household.id)
        )
        updated = await api.update_shopping_item(
            item.id, ShoppingItemUpdateRequest(purchased=True)
        )
        assert updated.purchased is True
        assert updated.purchased_date is not None

        export = await api.export_household(household.id)
        assert len(export.transactions) == 1

        await api.reset_household(household.id)
        assert await api.transactions(household.id) == []
        assert await api.shopping_items(household.id) == []


@pytest.mark.asyncio
async def test_client_raises_api_error_with_detail(client: AsyncClient) -> None:
    async with BudgetApiClient(
        "http://testserver",
        transport=ASGITransport(app=app),
    ) as api:
        await api.login("idp:dora")
        await api.create_household("Casa Dora")
        with pytest.raises(ApiError) as exc_info:
            await api.create_household("Again")
    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == "You already belong to a household."


@pytest.mark.asyncio
async def test_get_retries_server_errors_then_succeeds() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls < 3:
            return httpx.Response(503, json={"detail": "busy"})
        return httpx.Response(200, json=None)

    async with BudgetApiClient(
        "http://testserver",
        token="t",
        retry_wait_seconds=0,
        transport=httpx.MockTransport(handler),
    ) as api:
        assert await api.current_household() is None
    assert calls == 3


@pytest.mark.asyncio
async def test_get_gives_up_after_max_retries() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    async with BudgetApiClient(
        "http://testserver",
        token="t",
        max_get_retries=2,
        retry_wait_seconds=0,
        transport=httpx.MockTransport(handler),
    ) as api:
        with pytest.raises(httpx.ConnectError):
            await api.current_household()
    assert calls == 3


@pytest.mark.asyncio
async def test_unauthorized_is_not_retried_and_carries_login_url() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(401, json={"detail": "Not authenticated"})

    async with BudgetApiClient(
        "http://testserver",
        login_url="/login",
        retry_wait_seconds=0,
        transport=httpx.MockTransport(handler),
    ) as api:
        with pytest.raises(UnauthorizedError) as exc_info:
            await api.current_user()
    assert calls == 1
    assert exc_info.value.login_url == "/login"
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_mutations_are_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500, json={"detail": "Internal server error"})

    async with BudgetApiClient(
        "http://testserver",
        token="t",
        retry_wait_seconds=0,
        transport=httpx.MockTransport(handler),
    ) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.create_household("Casa")
    assert calls == 1
    assert exc_info.value.status_code == 500


def test_invalidate_resources_accepts_any_iterable() -> None:
    cache = ResourceCache()
    cache.set(make_key(Resource.MEMBERS), ["m"])
    cache.set(make_key(Resource.CATEGORIES), ["c"])

    assert cache.invalidate_resources({Resource.MEMBERS}) == 1
    assert cache.invalidate_resources([Resource.CATEGORIES, Resource.SHOPPING]) == 1
    assert len(cache) == 0
