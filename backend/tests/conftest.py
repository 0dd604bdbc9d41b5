from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import app.api.auth as auth_api
from app.core.db import get_session
from app.main import app
from app.services.auth.identity import ExternalIdentity, IdentityTokenError

IDENTITY_TOKEN_PREFIX = "idp:"

LoginFn = Callable[[str], Awaitable[dict[str, str]]]


@pytest.fixture
async def session_maker() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture(autouse=True)
def fake_identity_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _verify(token: str) -> ExternalIdentity:
        if not token.startswith(IDENTITY_TOKEN_PREFIX):
            raise IdentityTokenError("Invalid session token")
        subject = token.removeprefix(IDENTITY_TOKEN_PREFIX)
        return ExternalIdentity(
            subject=subject,
            email=f"{subject}@example.com",
            first_name=subject.capitalize(),
            last_name="Tester",
            profile_image_url=None,
        )

    monkeypatch.setattr(auth_api, "verify_identity_token", _verify)


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as db_session:
            yield db_session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def login(client: AsyncClient) -> LoginFn:
    async def _login(subject: str) -> dict[str, str]:
        response = await client.post(
            "/api/auth/session",
            headers={"Authorization": f"Bearer {IDENTITY_TOKEN_PREFIX}{subject}"},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']['accessToken']}"}

    return _login


@pytest.fixture
def create_household(client: AsyncClient) -> Callable[[dict[str, str], str], Awaitable[dict]]:
    async def _create(headers: dict[str, str], name: str = "Casa Silva") -> dict:
        response = await client.post("/api/households", json={"name": name}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
