from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .pagination import CursorToken, KeysetPaginationResult, OffsetPaginationResult
from .result import AppResult
from .types.user import FilterSpec, SortSpec


if TYPE_CHECKING:
    from gridlab.app import dto


@runtime_checkable
class UserRepository(Protocol):
    async def count(self, filters: FilterSpec) -> AppResult[int]: ...
    async def get_many_by_offset(
        self,
        filters: FilterSpec,
        sort: SortSpec,
        offset: int,
        limit: int,
        total: int,
    ) -> AppResult[OffsetPaginationResult[dto.user.UserRow]]: ...
    async def get_many_by_keyset(
        self,
        filters: FilterSpec,
        cursor: CursorToken | None,
        limit: int,
    ) -> AppResult[KeysetPaginationResult[dto.user.UserRow]]: ...
