from gridlab.app import dto
from gridlab.app.contracts.pagination import (
    CursorToken,
    KeysetPaginationResult,
    OffsetPaginationResult,
)
from gridlab.app.contracts.types.user import FilterSpec, SortSpec
from gridlab.infra.database.alchemy import compiler, entity
from gridlab.infra.shared.result import as_result

from .base import BoundRepository


class UserRepositoryImpl(BoundRepository[entity.User], entity=entity.User):
    @as_result()
    async def count(self, filters: FilterSpec) -> int:
        return await self._dao.count(*compiler.compile_filters(filters))

    @as_result()
    async def get_many_by_offset(
        self,
        filters: FilterSpec,
        sort: SortSpec,
        offset: int,
        limit: int,
        total: int,
    ) -> OffsetPaginationResult[dto.user.UserRow]:
        plan = compiler.compile_plan(filters, sort)
        result = await self._dao.get_many_by_offset(
            *plan.where,
            order_by=plan.order_by,
            offset=offset,
            limit=limit,
        )

        return OffsetPaginationResult(
            items=[dto.user.UserRow.from_attributes(item) for item in result],
            limit=limit,
            offset=offset,
            total=total,
        )

    @as_result()
    async def get_many_by_keyset(
        self,
        filters: FilterSpec,
        cursor: CursorToken | None,
        limit: int,
    ) -> KeysetPaginationResult[dto.user.UserRow]:
        result = await self._dao.get_many_by_keyset(
            *compiler.compile_filters(filters),
            order_by=compiler.keyset_order(),
            boundary=compiler.keyset_boundary(cursor) if cursor is not None else None,
            limit=limit,
        )
        items = [dto.user.UserRow.from_attributes(item) for item in result]
        last = items[-1] if items else None

        return KeysetPaginationResult(
            items=items,
            limit=limit,
            next_cursor=CursorToken(created_at=last.created_at, id=last.id) if last else None,
        )
