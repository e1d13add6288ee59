from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import sqlalchemy as sa

from gridlab.app.contracts.manager import TransactionManager
from gridlab.infra.database.alchemy.entity import Entity

from .queries import base


class DAO[E: Entity]:
    __slots__ = (
        "_entity",
        "_manager",
    )

    def __init__(self, manager: TransactionManager, entity: type[E]) -> None:
        self._manager = manager
        self._entity = entity

    async def batch_create(self, data: Sequence[Mapping[str, Any]]) -> int:
        return await self._manager.send(base.BatchCreate.with_(self._entity)(data))

    async def count(self, *clauses: sa.ColumnExpressionArgument[bool]) -> int:
        return await self._manager.send(base.Count.with_(self._entity)(*clauses))

    async def get_many_by_offset(
        self,
        *clauses: sa.ColumnExpressionArgument[bool],
        order_by: Sequence[sa.ColumnExpressionArgument[Any]],
        offset: int,
        limit: int,
    ) -> Sequence[E]:
        return await self._manager.send(
            base.GetManyByOffset.with_(self._entity)(
                *clauses, order_by=order_by, offset=offset, limit=limit
            )
        )

    async def get_many_by_keyset(
        self,
        *clauses: sa.ColumnExpressionArgument[bool],
        order_by: Sequence[sa.ColumnExpressionArgument[Any]],
        boundary: sa.ColumnExpressionArgument[bool] | None,
        limit: int,
    ) -> Sequence[E]:
        return await self._manager.send(
            base.GetManyByKeyset.with_(self._entity)(
                *clauses, order_by=order_by, boundary=boundary, limit=limit
            )
        )
