from typing import Any
from uuid import UUID

import httpx
from pydantic import TypeAdapter
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.client.cache import Mutation, Resource, ResourceCache, make_key
from app.client.errors import ApiError, UnauthorizedError
from app.schemas.analytics import AnalyticsResponse
from app.schemas.auth import SessionResponse, UserResponse
from app.schemas.budget import (
    BudgetGoalCreateRequest,
    BudgetGoalResponse,
    BudgetGoalWithSpendResponse,
)
from app.schemas.category import CategoryResponse
from app.schemas.export import HouseholdExportResponse
from app.schemas.household import (
    HouseholdCreateRequest,
    HouseholdMemberResponse,
    HouseholdResponse,
    InviteResponse,
    JoinHouseholdRequest,
)
from app.schemas.shopping import (
    ShoppingItemCreateRequest,
    ShoppingItemDetailResponse,
    ShoppingItemResponse,
    ShoppingItemUpdateRequest,
)
from app.schemas.transaction import TransactionCreateRequest, TransactionDetailResponse

logger = structlog.get_logger(__name__)

_members = TypeAdapter(list[HouseholdMemberResponse])
_categories = TypeAdapter(list[CategoryResponse])
_transactions = TypeAdapter(list[TransactionDetailResponse])
_budgets = TypeAdapter(list[BudgetGoalWithSpendResponse])
_shopping = TypeAdapter(list[ShoppingItemDetailResponse])
_optional_household = TypeAdapter(HouseholdResponse | None)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, ApiError) and exc.status_code >= 500


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


class BudgetApiClient:
    """Async client for the household budget API.

    GET results are cached per resource until a mutation invalidates them.
    Only GETs are retried; a 401 is raised immediately with the login URL.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        login_url: str = "/api/login",
        max_get_retries: int = 2,
        retry_wait_seconds: float = 0.5,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.login_url = login_url
        self.max_get_retries = max_get_retries
        self.retry_wait_seconds = retry_wait_seconds
        self.cache = ResourceCache()
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            transport=transport,
        )

    async def __aenter__(self) -> "BudgetApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self, token: str | None = None) -> dict[str, str]:
        bearer = token or self.token
        return {"Authorization": f"Bearer {bearer}"} if bearer else {}

    def _check(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            raise UnauthorizedError(_error_detail(response), login_url=self.login_url)
        if response.is_error:
            raise ApiError(response.status_code, _error_detail(response))

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_get_retries + 1),
            wait=wait_exponential(multiplier=self.retry_wait_seconds, max=5),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.warning("api_get_retry", path=path, attempt=number)
                response = await self._http.get(
                    path,
                    params={k: v for k, v in (params or {}).items() if v is not None},
                    headers=self._headers(),
                )
                self._check(response)
        return response.json()

    async def _cached(
        self,
        resource: Resource,
        path: str,
        adapter: TypeAdapter,
        params: dict[str, Any] | None = None,
    ) -> Any:
        key = make_key(resource, {"path": path, **(params or {})})
        if self.cache.contains(key):
            return self.cache.get(key)
        value = adapter.validate_python(await self._get_json(path, params))
        self.cache.set(key, value)
        return value

    async def _send(
        self,
        method: str,
        path: str,
        mutation: Mutation | None = None,
        body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        response = await self._http.request(method, path, json=body, headers=self._headers())
        self._check(response)
        if mutation is not None:
            self.cache.invalidate(mutation)
        return response

    async def login(self, identity_token: str) -> SessionResponse:
        response = await self._http.post(
            "/api/auth/session",
            headers=self._headers(identity_token),
        )
        self._check(response)
        session = SessionResponse.model_validate(response.json())
        self.token = session.token.access_token
        self.cache.clear()
        return session

    async def current_user(self) -> UserResponse:
        return await self._cached(
            Resource.CURRENT_USER, "/api/auth/user", TypeAdapter(UserResponse)
        )

    async def current_household(self) -> HouseholdResponse | None:
        return await self._cached(
            Resource.CURRENT_HOUSEHOLD, "/api/households/current", _optional_household
        )

    async def create_household(self, name: str) -> HouseholdResponse:
        body = HouseholdCreateRequest(name=name).model_dump(mode="json", by_alias=True)
        response = await self._send("POST", "/api/households", Mutation.CREATE_HOUSEHOLD, body)
        return HouseholdResponse.model_validate(response.json())

    async def join_household(self, invite_code: str) -> HouseholdResponse:
        body = JoinHouseholdRequest(invite_code=invite_code).model_dump(mode="json", by_alias=True)
        response = await self._send(
            "POST", "/api/households/join", Mutation.JOIN_HOUSEHOLD, body
        )
        return HouseholdResponse.model_validate(response.json())

    async def members(self, household_id: UUID) -> list[HouseholdMemberResponse]:
        return await self._cached(
            Resource.MEMBERS, f"/api/households/{household_id}/members", _members
        )

    async def rotate_invite_code(self, household_id: UUID) -> InviteResponse:
        response = await self._send(
            "POST", f"/api/households/{household_id}/invite", Mutation.ROTATE_INVITE
        )
        return InviteResponse.model_validate(response.json())

    async def categories(self, household_id: UUID) -> list[CategoryResponse]:
        return await self._cached(
            Resource.CATEGORIES, f"/api/households/{household_id}/categories", _categories
        )

    async def transactions(
        self,
        household_id: UUID,
        *,
        limit: int | None = None,
    ) -> list[TransactionDetailResponse]:
        return await self._cached(
            Resource.TRANSACTIONS,
            f"/api/households/{household_id}/transactions",
            _transactions,
            {"limit": limit},
        )

    async def create_transaction(
        self, payload: TransactionCreateRequest
    ) -> TransactionDetailResponse:
        response = await self._send(
            "POST",
            "/api/transactions",
            Mutation.CREATE_TRANSACTION,
            payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return TransactionDetailResponse.model_validate(response.json())

    async def budgets(
        self,
        household_id: UUID,
        *,
        month: int | None = None,
        year: int | None = None,
    ) -> list[BudgetGoalWithSpendResponse]:
        return await self._cached(
            Resource.BUDGETS,
            f"/api/households/{household_id}/budgets",
            _budgets,
            {"month": month, "year": year},
        )

    async def create_budget(self, payload: BudgetGoalCreateRequest) -> BudgetGoalResponse:
        response = await self._send(
            "POST",
            "/api/budgets",
            Mutation.CREATE_BUDGET,
            payload.model_dump(mode="json", by_alias=True),
        )
        return BudgetGoalResponse.model_validate(response.json())

    async def shopping_items(self, household_id: UUID) -> list[ShoppingItemDetailResponse]:
        return await self._cached(
            Resource.SHOPPING, f"/api/households/{household_id}/shopping", _shopping
        )

    async def create_shopping_item(
        self, payload: ShoppingItemCreateRequest
    ) -> ShoppingItemResponse:
        response = await self._send(
            "POST",
            "/api/shopping",
            Mutation.CREATE_SHOPPING_ITEM,
            payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return ShoppingItemResponse.model_validate(response.json())

    async def update_shopping_item(
        self,
        item_id: UUID,
        payload: ShoppingItemUpdateRequest,
    ) -> ShoppingItemResponse:
        response = await self._send(
            "PATCH",
            f"/api/shopping/{item_id}",
            Mutation.UPDATE_SHOPPING_ITEM,
            payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
        )
        return ShoppingItemResponse.model_validate(response.json())

    async def analytics(
        self,
        household_id: UUID,
        *,
        month: int | None = None,
        year: int | None = None,
        limit: int | None = None,
    ) -> AnalyticsResponse:
        return await self._cached(
            Resource.ANALYTICS,
            f"/api/households/{household_id}/analytics",
            TypeAdapter(AnalyticsResponse),
            {"month": month, "year": year, "limit": limit},
        )

    async def export_household(self, household_id: UUID) -> HouseholdExportResponse:
        data = await self._get_json(f"/api/households/{household_id}/export")
        return HouseholdExportResponse.model_validate(data)

    async def reset_household(self, household_id: UUID) -> None:
        await self._send(
            "DELETE", f"/api/households/{household_id}/reset", Mutation.RESET_HOUSEHOLD
        )
