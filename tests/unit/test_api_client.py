from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import msgspec
import pytest

from gridlab.app import dto
from gridlab.app.contracts import exceptions as exc
from gridlab.app.contracts.types.user import UserStatus
from gridlab.client import CancelToken, GridApiClient, KeysetParams, OffsetParams


pytestmark = pytest.mark.anyio

BASE_URL = "http://grid.test/api"
CREATED_AT = datetime(2025, 1, 1, 12, tzinfo=UTC)

type Handler = Callable[[httpx.Request], Any]

ROW: dict[str, Any] = {
    "id": 7,
    "name": "User 7",
    "email": "user7@example.com",
    "status": "INACTIVE",
    "createdAt": "2025-01-01T11:53:00Z",
}

OFFSET_BODY: dict[str, Any] = {
    "rows": [ROW],
    "totalCount": 1,
    "request": {"page": 1, "pageSize": None, "sort": None, "status": None, "search": None},
    "meta": {
        "queryTimeMs": 1.5,
        "countTimeMs": 0.5,
        "countFromCache": False,
        "countCacheTtlMs": 30000,
        "page": 1,
        "pageSize": 50,
        "sort": "createdAt:desc",
        "status": None,
        "search": None,
    },
}

KEYSET_BODY: dict[str, Any] = {
    "rows": [ROW],
    "nextCursor": {"cursorCreatedAt": "2025-01-01T11:53:00Z", "cursorId": 7},
    "meta": {
        "queryTimeMs": 1.0,
        "pageSize": 1,
        "status": None,
        "search": None,
        "usedCursor": None,
    },
}


def _client(handler: Handler) -> GridApiClient:
    return GridApiClient.from_url(BASE_URL, transport=httpx.MockTransport(handler))


@pytest.fixture
def requests() -> list[httpx.Request]:
    return []


@pytest.fixture
async def offset_api(requests: list[httpx.Request]) -> AsyncIterator[GridApiClient]:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=OFFSET_BODY)

    async with _client(handler) as api:
        yield api


def test_offset_params_skip_blank_values() -> None:
    params = OffsetParams(page=2, page_size=25, search="  ", status=UserStatus.ACTIVE)

    assert params.to_query() == {"page": 2, "pageSize": 25, "status": "ACTIVE"}


def test_keyset_params_encode_cursor_in_utc() -> None:
    params = KeysetParams(
        page_size=10,
        search=" user ",
        cursor=dto.Cursor(cursor_created_at=CREATED_AT, cursor_id=3),
    )

    assert params.to_query() == {
        "pageSize": 10,
        "search": "user",
        "cursorCreatedAt": "2025-01-01T12:00:00Z",
        "cursorId": 3,
    }


def test_keyset_params_next_keeps_filters() -> None:
    params = KeysetParams(page_size=1, status=UserStatus.INACTIVE)
    page = dto.KeysetPage.from_string(msgspec.json.encode(KEYSET_BODY))

    following = params.next(page)

    assert following is not None
    assert following.status is UserStatus.INACTIVE
    assert following.page_size == 1
    assert following.cursor == page.next_cursor
    last = dto.KeysetPage.from_string(msgspec.json.encode({**KEYSET_BODY, "nextCursor": None}))
    assert params.next(last) is None


async def test_get_users_sends_camel_case_query(
    offset_api: GridApiClient,
    requests: list[httpx.Request],
) -> None:
    page = await offset_api.get_users(OffsetParams(page=1, page_size=50, sort="name:asc"))

    (request,) = requests
    assert request.url.path == "/api/v1/users"
    assert dict(request.url.params) == {"page": "1", "pageSize": "50", "sort": "name:asc"}
    assert page.total_count == 1
    assert page.rows[0].status is UserStatus.INACTIVE
    assert page.rows[0].created_at.tzinfo is not None
    assert page.meta.count_cache_ttl_ms == 30000


async def test_get_users_by_cursor_decodes_next_cursor() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=KEYSET_BODY)

    async with _client(handler) as api:
        page = await api.get_users_by_cursor(KeysetParams(page_size=1))

    assert seen[0].url.path == "/api/v1/users-cursor"
    assert page.next_cursor is not None
    assert page.next_cursor.cursor_id == 7
    assert page.next_cursor.cursor_created_at == datetime(2025, 1, 1, 11, 53, tzinfo=UTC)


@pytest.mark.parametrize(
    ("status_code", "body", "error"),
    [
        (400, {"status_code": 400, "detail": "Validation failed", "extra": [{"key": "page"}]}, exc.BadRequestError),
        (408, {"message": "Request Timeout"}, exc.RequestTimeoutError),
        (503, {"message": "Service Unavailable", "detail": "OperationalError"}, exc.ServiceUnavailableError),
        (500, {"message": "boom"}, exc.AppError),
    ],
)
async def test_error_statuses_map_to_app_errors(
    status_code: int,
    body: dict[str, Any],
    error: type[exc.AppError],
) -> None:
    async with _client(lambda _: httpx.Response(status_code, json=body)) as api:
        with pytest.raises(error):
            await api.get_users(OffsetParams())


async def test_validation_detail_is_kept() -> None:
    body = {"status_code": 400, "detail": "Validation failed", "extra": [{"key": "pageSize"}]}

    async with _client(lambda _: httpx.Response(400, json=body)) as api:
        with pytest.raises(exc.BadRequestError) as e:
            await api.get_users(OffsetParams())

    assert e.value.raw_message == "Validation failed"
    assert e.value.content["detail"] == [{"key": "pageSize"}]


async def test_transport_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as api:
        with pytest.raises(exc.ServiceUnavailableError):
            await api.get_users(OffsetParams())


async def test_transport_timeout_is_request_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    async with _client(handler) as api:
        with pytest.raises(exc.RequestTimeoutError):
            await api.get_users(OffsetParams())


async def test_cancel_token_aborts_pending_request() -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.Event().wait()
        return httpx.Response(200, json=OFFSET_BODY)

    token = CancelToken()
    async with _client(handler) as api:
        call = asyncio.create_task(api.get_users(OffsetParams(), token))
        await started.wait()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await call


async def test_already_canceled_token_skips_request(
    offset_api: GridApiClient,
    requests: list[httpx.Request],
) -> None:
    token = CancelToken()
    token.cancel()

    with pytest.raises(asyncio.CancelledError):
        await offset_api.get_users(OffsetParams(), token)

    assert requests == []
