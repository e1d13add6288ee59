from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final, Literal, Self, cast, get_args

from gridlab.app.contracts.pagination import SortOrder

from .base import BaseData


type SortField = Literal["id", "name", "email", "status", "createdAt"]

SORT_FIELDS: Final[frozenset[str]] = frozenset(get_args(SortField.__value__))
DEFAULT_SORT_FIELD: Final[SortField] = "createdAt"
DEFAULT_SORT_ORDER: Final[SortOrder] = "DESC"
DEFAULT_SORT: Final[str] = "createdAt:desc"
SORT_SEPARATOR: Final[str] = ":"


@enum.unique
class UserStatus(enum.StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


def normalize_search(value: str | None) -> str | None:
    if value is None:
        return None

    return value.strip() or None


@dataclass(frozen=True, slots=True)
class FilterSpec(BaseData):
    search: str | None = None
    status: UserStatus | None = None

    def normalize(self) -> FilterSpec:
        return FilterSpec(search=normalize_search(self.search), status=self.status)


@dataclass(frozen=True, slots=True)
class SortSpec(BaseData):
    field: SortField = DEFAULT_SORT_FIELD
    order: SortOrder = DEFAULT_SORT_ORDER

    @classmethod
    def parse(cls, raw: str | None) -> Self:
        """Parse `<field>:<asc|desc>`.

        Fields outside the allowlist fall back to `createdAt` and any direction other
        than an explicit `asc` becomes `DESC`; a bad sort key never fails a request.
        """
        field_raw, _, order_raw = (raw or "").partition(SORT_SEPARATOR)
        field_raw = field_raw.strip()
        field = cast(SortField, field_raw) if field_raw in SORT_FIELDS else DEFAULT_SORT_FIELD
        order: SortOrder = "ASC" if order_raw.strip().lower() == "asc" else "DESC"

        return cls(field=field, order=order)

    def __str__(self) -> str:
        return f"{self.field}{SORT_SEPARATOR}{self.order.lower()}"
