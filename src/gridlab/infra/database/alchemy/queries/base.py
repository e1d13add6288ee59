from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import lru_cache
from types import GenericAlias
from typing import Any, Self, override

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from gridlab.app.contracts.query import Query
from gridlab.infra.database.alchemy.entity import Entity


@lru_cache
def _cached_query[E: Entity, T: ExtendedQuery[Any, Any]](cls: type[T], entity: type[E]) -> type[T]:
    return type(
        cls.__name__,
        (cls,),
        {"_entity": entity, "__slots__": cls.__slots__},
    )


class ExtendedQuery[E: Entity, R](Query[AsyncSession, R]):
    _entity: type[E]
    __slots__ = ()

    def __class_getitem__(cls, item: Any) -> Any:
        return cls.with_(item) if not isinstance(item, tuple) else GenericAlias(cls, item)

    @property
    def entity(self) -> type[E]:
        entity: type[E] | None = getattr(self, "_entity", None)
        assert entity is not None, f"{type(self).__name__} is not bound to an entity"

        return entity

    @classmethod
    def with_(cls, entity: type[E]) -> type[Self]:
        return _cached_query(cls, entity)


class ExtendedQueryWithFilters[E: Entity, R](ExtendedQuery[E, R]):
    __slots__ = ("clauses",)

    def __init__(self, *clauses: sa.ColumnExpressionArgument[bool]) -> None:
        self.clauses: list[sa.ColumnExpressionArgument[bool]] = list(clauses)

    def add_clauses(self, *clauses: sa.ColumnExpressionArgument[bool]) -> Self:
        self.clauses.extend(clauses)

        return self


class BatchCreate[E: Entity](ExtendedQuery[E, int]):
    __slots__ = ("_data",)

    def __init__(self, data: Sequence[Mapping[str, Any]]) -> None:
        assert data, "data to create should not be empty"
        self._data = data

    @override
    async def __call__(self, conn: AsyncSession, /, **kw: Any) -> int:
        await conn.execute(sa.insert(self.entity), self._data)

        return len(self._data)


class Count[E: Entity](ExtendedQueryWithFilters[E, int]):
    """`SELECT count(*)` over the filtered set.

    With a LIKE predicate the engine has to visit every candidate row, which makes
    this the most expensive statement of a page request; callers cache its result.
    """

    __slots__ = ()

    @override
    async def __call__(self, conn: AsyncSession, /, **kw: Any) -> int:
        result = await conn.execute(
            sa.select(sa.func.count()).select_from(self.entity).where(*self.clauses),
        )

        return result.scalar() or 0


class GetManyByOffset[E: Entity](ExtendedQueryWithFilters[E, Sequence[E]]):
    """One `LIMIT/OFFSET` window of the filtered, ordered set.

    The engine walks and discards every row before `offset`, so the cost of a page
    grows with its depth. Once the offset outgrows the working set kept in the page
    cache, deep pages get noticeably slower; this is the known ceiling of offset
    paging, accepted in exchange for jumping straight to any page number.
    """

    __slots__ = (
        "limit",
        "offset",
        "order_by",
    )

    def __init__(
        self,
        *clauses: sa.ColumnExpressionArgument[bool],
        order_by: Sequence[sa.ColumnExpressionArgument[Any]],
        offset: int,
        limit: int,
    ) -> None:
        super().__init__(*clauses)
        self.order_by = tuple(order_by)
        self.offset = offset
        self.limit = limit

    @override
    async def __call__(self, conn: AsyncSession, /, **kw: Any) -> Sequence[E]:
        return (await conn.scalars(self.make_stmt())).all()

    def make_stmt(self) -> sa.Select[tuple[E]]:
        return (
            sa.select(self.entity)
            .where(*self.clauses)
            .order_by(*self.order_by)
            .limit(self.limit)
            .offset(self.offset)
        )


class GetManyByKeyset[E: Entity](ExtendedQueryWithFilters[E, Sequence[E]]):
    """Up to `limit` rows after a boundary clause, in a fixed total order.

    The boundary is expressed as a predicate on the ordering key, so with an index on
    that key the engine seeks straight to it and the cost stays bounded by `limit`
    however many pages came before. Pages can only be walked forward from a known
    boundary or restarted from the first one.
    """

    __slots__ = (
        "limit",
        "order_by",
    )

    def __init__(
        self,
        *clauses: sa.ColumnExpressionArgument[bool],
        order_by: Sequence[sa.ColumnExpressionArgument[Any]],
        boundary: sa.ColumnExpressionArgument[bool] | None = None,
        limit: int,
    ) -> None:
        super().__init__(*clauses)
        if boundary is not None:
            self.add_clauses(boundary)

        self.order_by = tuple(order_by)
        self.limit = limit

    @override
    async def __call__(self, conn: AsyncSession, /, **kw: Any) -> Sequence[E]:
        return (await conn.scalars(self.make_stmt())).all()

    def make_stmt(self) -> sa.Select[tuple[E]]:
        return sa.select(self.entity).where(*self.clauses).order_by(*self.order_by).limit(self.limit)
