import pytest
from httpx import AsyncClient

from app.services import household_service


@pytest.mark.asyncio
async def test_create_household_seeds_default_categories(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    headers = await login("alice")
    household = await create_household(headers, "  Casa   Silva ")
    assert household["name"] == "Casa Silva"
    assert household["inviteCode"]

    categories = await client.get(
        f"/api/households/{household['id']}/categories",
        headers=headers,
    )
    assert categories.status_code == 200
    data = categories.json()
    assert len(data) == 15
    assert [c["type"] for c in data].count("expense") == 10
    assert [c["type"] for c in data].count("income") == 5
    assert data[0]["name"] == "Casa & Moradia"
    assert data[-1]["name"] == "Outras Receitas"
    assert [c["sortOrder"] for c in data] == list(range(15))


@pytest.mark.asyncio
async def test_current_household_is_null_before_onboarding(client: AsyncClient, login) -> None:
    headers = await login("newcomer")
    response = await client.get("/api/households/current", headers=headers)
    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_second_household_for_same_user_conflicts(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    headers = await login("alice")
    await create_household(headers)
    response = await client.post("/api/households", json={"name": "Other"}, headers=headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_invite_join_and_members_flow(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    admin_headers = await login("alice")
    household = await create_household(admin_headers)
    household_id = household["id"]

    invite = await client.post(f"/api/households/{household_id}/invite", headers=admin_headers)
    assert invite.status_code == 200
    invite_code = invite.json()["inviteCode"]
    assert invite_code != household["inviteCode"]

    member_headers = await login("bruno")
    stale = await client.post(
        "/api/households/join",
        json={"inviteCode": household["inviteCode"]},
        headers=member_headers,
    )
    assert stale.status_code == 404

    joined = await client.post(
        "/api/households/join",
        json={"inviteCode": invite_code.lower()},
        headers=member_headers,
    )
    assert joined.status_code == 200
    assert joined.json()["id"] == household_id

    current = await client.get("/api/households/current", headers=member_headers)
    assert current.json()["id"] == household_id

    members = await client.get(f"/api/households/{household_id}/members", headers=member_headers)
    assert members.status_code == 200
    roles = {m["email"]: m["role"] for m in members.json()}
    assert roles == {"alice@example.com": "admin", "bruno@example.com": "member"}

    forbidden = await client.post(
        f"/api/households/{household_id}/invite",
        headers=member_headers,
    )
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_non_member_cannot_see_household(
    client: AsyncClient,
    login,
    create_household,
) -> None:
    owner_headers = await login("alice")
    household = await create_household(owner_headers)

    outsider_headers = await login("mallory")
    for path in ("members", "categories", "transactions", "budgets", "shopping", "analytics", "export"):
        response = await client.get(
            f"/api/households/{household['id']}/{path}",
            headers=outsider_headers,
        )
        assert response.status_code == 404, path
        assert response.json()["detail"] == "Household not found"

    reset = await client.delete(
        f"/api/households/{household['id']}/reset",
        headers=outsider_headers,
    )
    assert reset.status_code == 404


@pytest.mark.asyncio
async def test_blank_household_name_is_rejected(client: AsyncClient, login) -> None:
    headers = await login("alice")
    response = await client.post("/api/households", json={"name": "    "}, headers=headers)
    assert response.status_code == 422

    current = await client.get("/api/households/current", headers=headers)
    assert current.json() is None


@pytest.mark.asyncio
async def test_racing_membership_insert_reports_conflict(
    client: AsyncClient,
    login,
    create_household,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    alice = await login("alice")
    first = await create_household(alice)
    bruno = await login("bruno")
    other = await create_household(bruno, "Casa Bruno")

    # Simulate a concurrent request that passed the membership check first.
    async def _no_membership(session, *, user_id):
        return None

    monkeypatch.setattr(household_service, "get_user_membership", _no_membership)

    duplicate = await client.post("/api/households", json={"name": "Again"}, headers=alice)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "You already belong to a household."

    cross_join = await client.post(
        "/api/households/join",
        json={"inviteCode": other["inviteCode"]},
        headers=alice,
    )
    assert cross_join.status_code == 409

    current = await client.get("/api/households/current", headers=alice)
    assert current.json()["id"] == first["id"]
