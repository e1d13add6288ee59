from __future__ import annotations

from datetime import datetime
from typing import Self

from gridlab.app.contracts.pagination import CursorToken
from gridlab.app.contracts.types.user import UserStatus

from . import user
from .base import BaseDTO, CamelDTO


__all__ = (
    "BaseDTO",
    "CamelDTO",
    "Cursor",
    "KeysetMeta",
    "KeysetPage",
    "OffsetMeta",
    "OffsetPage",
    "OffsetRequest",
    "Status",
    "user",
)


class Status(BaseDTO):
    status: bool


class Cursor(CamelDTO):
    cursor_created_at: datetime
    cursor_id: int

    @classmethod
    def from_token(cls, token: CursorToken | None) -> Self | None:
        if token is None:
            return None

        return cls(cursor_created_at=token.created_at, cursor_id=token.id)


class OffsetRequest(CamelDTO):
    page: int | None
    page_size: int | None
    sort: str | None
    status: UserStatus | None
    search: str | None


class OffsetMeta(CamelDTO):
    query_time_ms: float
    count_time_ms: float
    count_from_cache: bool
    count_cache_ttl_ms: int
    page: int
    page_size: int
    sort: str
    status: UserStatus | None
    search: str | None


class OffsetPage(CamelDTO):
    rows: list[user.UserRow]
    total_count: int
    request: OffsetRequest
    meta: OffsetMeta

    @property
    def has_next_page(self) -> bool:
        return self.meta.page * self.meta.page_size < self.total_count


class KeysetMeta(CamelDTO):
    query_time_ms: float
    page_size: int
    status: UserStatus | None
    search: str | None
    used_cursor: Cursor | None


class KeysetPage(CamelDTO):
    rows: list[user.UserRow]
    next_cursor: Cursor | None
    meta: KeysetMeta
