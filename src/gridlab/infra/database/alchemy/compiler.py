"""Lowering of grid filter and sort requests into SQLAlchemy expressions.

Every user supplied value ends up in a bound parameter; column names come only from
the sort allowlist below. Nothing here touches a connection.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

import sqlalchemy as sa
from sqlalchemy import orm

from gridlab.app.contracts.pagination import CursorToken, SortOrder
from gridlab.app.contracts.types.user import DEFAULT_SORT_FIELD, FilterSpec, SortField, SortSpec
from gridlab.infra.database.alchemy.entity import User


type Clause = sa.ColumnElement[bool]
type OrderBy = sa.UnaryExpression[object]

SORT_COLUMNS: Final[Mapping[SortField, orm.InstrumentedAttribute[object]]] = {
    "id": User.id,
    "name": User.name,
    "email": User.email,
    "status": User.status,
    "createdAt": User.created_at,
}


@dataclass(frozen=True, slots=True)
class QueryPlan:
    where: tuple[Clause, ...]
    order_by: tuple[OrderBy, ...]


def _direction(column: sa.ColumnElement[object], order: SortOrder) -> OrderBy:
    return column.asc() if order == "ASC" else column.desc()


def compile_filters(filters: FilterSpec) -> tuple[Clause, ...]:
    filters = filters.normalize()
    clauses: list[Clause] = []

    if filters.status is not None:
        clauses.append(User.status == filters.status)

    if filters.search is not None:
        # case-insensitive substring match, LIKE wildcards in the term match literally
        clauses.append(
            sa.or_(
                User.name.icontains(filters.search, autoescape=True),
                User.email.icontains(filters.search, autoescape=True),
            ),
        )

    return tuple(clauses)


def compile_sort(sort: SortSpec) -> tuple[OrderBy, ...]:
    column = SORT_COLUMNS.get(sort.field, SORT_COLUMNS[DEFAULT_SORT_FIELD])
    order: SortOrder = "ASC" if sort.order == "ASC" else "DESC"

    if sort.field == "id":
        return (_direction(User.id, order),)

    # id breaks ties so consecutive offset windows neither overlap nor skip rows
    return (_direction(column, order), _direction(User.id, order))


def compile_plan(filters: FilterSpec, sort: SortSpec) -> QueryPlan:
    return QueryPlan(where=compile_filters(filters), order_by=compile_sort(sort))


def keyset_order() -> tuple[OrderBy, ...]:
    return (User.created_at.desc(), User.id.desc())


def keyset_boundary(cursor: CursorToken) -> Clause:
    """Rows strictly after `cursor` under `(created_at DESC, id DESC)`.

    A row-value comparison keeps the bound lexicographic: an equal `created_at`
    falls through to `id`, which lets the engine seek on the composite index.
    """
    return sa.tuple_(User.created_at, User.id) < sa.tuple_(
        sa.literal(cursor.created_at, User.created_at.type),
        sa.literal(cursor.id, User.id.type),
    )
