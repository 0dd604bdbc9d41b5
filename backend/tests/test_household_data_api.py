import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

import app.api.households as households_api
from app.services import household_data


async def _populated_household(client: AsyncClient, login, create_household):
    headers = await login("alice")
    household = await create_household(headers)
    household_id = household["id"]
    categories = await client.get(f"/api/households/{household_id}/categories", headers=headers)
    by_name = {c["name"]: c["id"] for c in categories.json()}

    transaction_ids = []
    for index in range(12):
        response = await client.post(
            "/api/transactions",
            json={
                "description": f"Gasto {index}",
                "amount": "7.25",
                "type": "expense",
                "categoryId": by_name["Lazer & Entretenimento"],
                "householdId": household_id,
            },
            headers=headers,
        )
        assert response.status_code == 201
        transaction_ids.append(response.json()["id"])

    budget = await client.post(
        "/api/budgets",
        json={
            "categoryId": by_name["Lazer & Entretenimento"],
            "householdId": household_id,
            "monthlyLimit": "0",
            "month": 1,
            "year": 2024,
        },
        headers=headers,
    )
    assert budget.status_code == 201

    shopping = await client.post(
        "/api/shopping",
        json={"name": "Cadeira", "householdId": household_id},
        headers=headers,
    )
    assert shopping.status_code == 201
    return headers, household_id, transaction_ids


@pytest.mark.asyncio
async def test_export_contains_every_transaction_once(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    headers, household_id, transaction_ids = await _populated_household(
        client, login, create_household
    )

    response = await client.get(f"/api/households/{household_id}/export", headers=headers)
    assert response.status_code == 200
    assert response.headers["content-disposition"].startswith("attachment;")
    assert household_id in response.headers["content-disposition"]

    data = response.json()
    assert data["appVersion"] == "1.0.0"
    assert data["exportDate"]
    assert data["household"]["id"] == household_id
    assert len(data["categories"]) == 15
    assert len(data["members"]) == 1
    assert len(data["shoppingItems"]) == 1

    exported_ids = [t["id"] for t in data["transactions"]]
    assert sorted(exported_ids) == sorted(transaction_ids)
    assert len(set(exported_ids)) == len(exported_ids)


@pytest.mark.asyncio
async def test_reset_replaces_content_with_default_categories(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    headers, household_id, _ = await _populated_household(client, login, create_household)
    before = await client.get(f"/api/households/{household_id}/categories", headers=headers)
    old_ids = {c["id"] for c in before.json()}

    response = await client.delete(f"/api/households/{household_id}/reset", headers=headers)
    assert response.status_code == 204

    categories = await client.get(f"/api/households/{household_id}/categories", headers=headers)
    data = categories.json()
    assert len(data) == 15
    assert not old_ids & {c["id"] for c in data}

    transactions = await client.get(
        f"/api/households/{household_id}/transactions",
        params={"limit": 1000},
        headers=headers,
    )
    assert transactions.json() == []

    shopping = await client.get(f"/api/households/{household_id}/shopping", headers=headers)
    assert shopping.json() == []

    budgets = await client.get(
        f"/api/households/{household_id}/budgets",
        params={"month": 1, "year": 2024},
        headers=headers,
    )
    assert budgets.json() == []

    # Household and membership survive a reset.
    current = await client.get("/api/households/current", headers=headers)
    assert current.json()["id"] == household_id


@pytest.mark.asyncio
async def test_reset_is_admin_only(client: AsyncClient, login, create_household) -> None:
    admin_headers = await login("alice")
    household = await create_household(admin_headers)

    member_headers = await login("bruno")
    joined = await client.post(
        "/api/households/join",
        json={"inviteCode": household["inviteCode"]},
        headers=member_headers,
    )
    assert joined.status_code == 200

    response = await client.delete(
        f"/api/households/{household['id']}/reset",
        headers=member_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_zero_limit_budget_reports_invalid_limit(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    headers, household_id, _ = await _populated_household(client, login, create_household)
    response = await client.get(
        f"/api/households/{household_id}/budgets",
        params={"month": 1, "year": 2024},
        headers=headers,
    )
    [goal] = response.json()
    assert goal["status"] == "invalid_limit"
    assert goal["percentageUsed"] is None
    assert goal["remaining"] == "0.00"


@pytest.mark.asyncio
async def test_failed_reset_keeps_previous_content(
    client: AsyncClient,
    login,
    create_household,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    headers, household_id, transaction_ids = await _populated_household(
        client, login, create_household
    )
    before = await client.get(f"/api/households/{household_id}/categories", headers=headers)
    category_ids = {c["id"] for c in before.json()}

    async def _broken_seed(session, *, household_id):
        raise OperationalError("INSERT INTO categories", {}, Exception("disk I/O error"))

    monkeypatch.setattr(household_data, "seed_default_categories", _broken_seed)

    response = await client.delete(f"/api/households/{household_id}/reset", headers=headers)
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}

    categories = await client.get(f"/api/households/{household_id}/categories", headers=headers)
    assert {c["id"] for c in categories.json()} == category_ids

    transactions = await client.get(
        f"/api/households/{household_id}/transactions",
        params={"limit": 1000},
        headers=headers,
    )
    assert sorted(t["id"] for t in transactions.json()) == sorted(transaction_ids)

    shopping = await client.get(f"/api/households/{household_id}/shopping", headers=headers)
    assert len(shopping.json()) == 1


@pytest.mark.asyncio
async def test_unhandled_database_error_returns_generic_500(
    client: AsyncClient,
    login,
    create_household,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    headers = await login("alice")
    household = await create_household(headers)

    async def _failing_list(session, *, household_id):
        raise OperationalError("SELECT categories", {}, Exception("database is locked"))

    monkeypatch.setattr(households_api, "list_household_categories", _failing_list)

    response = await client.get(f"/api/households/{household['id']}/categories", headers=headers)
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
