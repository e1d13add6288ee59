from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import Any, Self

import httpx

from gridlab.app import dto
from gridlab.app.contracts import exceptions as exc
from gridlab.app.contracts.types.user import UserStatus

from .sequencer import CancelToken


log = logging.getLogger(__name__)

type QueryParams = dict[str, str | int]


@dataclass(frozen=True, slots=True)
class OffsetParams:
    page: int = 1
    page_size: int | None = None
    sort: str | None = None
    search: str | None = None
    status: UserStatus | None = None

    def to_query(self) -> QueryParams:
        query: QueryParams = {"page": self.page}
        if self.page_size is not None:
            query["pageSize"] = self.page_size
        if self.sort:
            query["sort"] = self.sort
        if self.search and self.search.strip():
            query["search"] = self.search.strip()
        if self.status is not None:
            query["status"] = self.status.value

        return query


@dataclass(frozen=True, slots=True)
class KeysetParams:
    page_size: int | None = None
    search: str | None = None
    status: UserStatus | None = None
    cursor: dto.Cursor | None = None

    def to_query(self) -> QueryParams:
        query: QueryParams = {}
        if self.page_size is not None:
            query["pageSize"] = self.page_size
        if self.search and self.search.strip():
            query["search"] = self.search.strip()
        if self.status is not None:
            query["status"] = self.status.value
        if self.cursor is not None:
            query["cursorCreatedAt"] = _isoformat(self.cursor.cursor_created_at)
            query["cursorId"] = self.cursor.cursor_id

        return query

    def next(self, page: dto.KeysetPage) -> Self | None:
        if page.next_cursor is None:
            return None

        return type(self)(
            page_size=self.page_size,
            search=self.search,
            status=self.status,
            cursor=page.next_cursor,
        )


def _isoformat(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    try:
        content: Any = response.json()
    except ValueError:
        content = {"message": response.text}

    if not isinstance(content, dict):
        content = {"message": str(content)}

    # litestar reports validation failures under `detail`
    message = content.get("message") or content.get("detail")
    detail = content.get("detail") if content.get("message") else content.get("extra")
    match response.status_code:
        case 400:
            raise exc.BadRequestError(message, detail=detail)
        case 408:
            raise exc.RequestTimeoutError(message, detail=detail)
        case 503:
            raise exc.ServiceUnavailableError(message, detail=detail)
        case _:
            raise exc.AppError(message or f"Unexpected status {response.status_code}")


class GridApiClient:
    __slots__ = ("_client",)

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_url(
        cls,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport))

    async def get_users(
        self,
        params: OffsetParams,
        cancel: CancelToken | None = None,
    ) -> dto.OffsetPage:
        response = await self._send("/v1/users", params.to_query(), cancel)

        return dto.OffsetPage.from_string(response.text)

    async def get_users_by_cursor(
        self,
        params: KeysetParams,
        cancel: CancelToken | None = None,
    ) -> dto.KeysetPage:
        response = await self._send("/v1/users-cursor", params.to_query(), cancel)

        return dto.KeysetPage.from_string(response.text)

    async def _send(
        self,
        path: str,
        query: QueryParams,
        cancel: CancelToken | None,
    ) -> httpx.Response:
        if cancel is None:
            return await self._get(path, query)

        if cancel.is_canceled:
            raise asyncio.CancelledError

        request = asyncio.ensure_future(self._get(path, query))
        canceled = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait((request, canceled), return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            canceled.cancel()

        if not request.done():
            request.cancel()
            log.debug("Canceled GET %s", path)
            raise asyncio.CancelledError

        return request.result()

    async def _get(self, path: str, query: QueryParams) -> httpx.Response:
        try:
            response = await self._client.get(path, params=query)
        except httpx.TimeoutException as e:
            raise exc.RequestTimeoutError(f"GET {path} timed out") from e
        except httpx.TransportError as e:
            raise exc.ServiceUnavailableError(f"GET {path} failed", detail=type(e).__name__) from e

        _raise_for_status(response)

        return response

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
