from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final, Literal, Self


type SortOrder = Literal["ASC", "DESC"]

MIN_PAGE: Final[int] = 1
MIN_PAGE_SIZE: Final[int] = 1


def as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def coerce(
        cls,
        page: int | None,
        page_size: int | None,
        *,
        default_page_size: int,
        max_page_size: int,
    ) -> Self:
        return cls(
            page=max(page or MIN_PAGE, MIN_PAGE),
            page_size=clamp_page_size(
                page_size,
                default=default_page_size,
                maximum=max_page_size,
            ),
        )


def clamp_page_size(value: int | None, *, default: int, maximum: int) -> int:
    if value is None:
        value = default

    return min(max(value, MIN_PAGE_SIZE), max(maximum, MIN_PAGE_SIZE))


@dataclass(frozen=True, slots=True)
class CursorToken:
    created_at: datetime
    id: int

    @classmethod
    def parse(
        cls,
        created_at: str | datetime | None,
        id_: str | int | None,
    ) -> Self | None:
        """Build a cursor from its two raw parts.

        Both parts must be present and well-formed, a partial or malformed cursor is
        reported as `None` so the caller restarts from the first page.
        """
        parsed_created_at = _parse_timestamp(created_at)
        parsed_id = _parse_id(id_)
        if parsed_created_at is None or parsed_id is None:
            return None

        return cls(created_at=parsed_created_at, id=parsed_id)


def _parse_timestamp(value: str | datetime | None) -> datetime | None:
    if isinstance(value, datetime):
        return as_utc(value)

    if not value or not value.strip():
        return None

    try:
        return as_utc(datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def _parse_id(value: str | int | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    try:
        return int(value.strip(), 10)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class OffsetPaginationResult[T]:
    items: Sequence[T]
    limit: int
    offset: int
    total: int


@dataclass(frozen=True, slots=True)
class KeysetPaginationResult[T]:
    items: Sequence[T]
    limit: int
    next_cursor: CursorToken | None
