from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable

from gridlab.app.contracts.types.user import FilterSpec


@runtime_checkable
class StrCache(Protocol):
    async def get(self, key: str) -> str | None: ...
    async def set(
        self,
        key: str,
        value: str,
        expire: float | timedelta | None = None,
    ) -> None: ...
    async def delete_matching(self, pattern: str) -> int: ...
    async def close(self) -> None: ...


@runtime_checkable
class CountCache(Protocol):
    """Memo of aggregate row counts keyed by a normalized filter condition.

    Entries expire `ttl` seconds after they were written. An expired entry is never
    returned; readers and writers share the store without mutual exclusion, and a
    concurrent miss for the same key simply overwrites the entry with an equally
    valid count.
    """

    @property
    def ttl(self) -> float: ...
    async def get(self, key: FilterSpec) -> int | None: ...
    async def set(self, key: FilterSpec, value: int) -> None: ...
    async def invalidate(self) -> int: ...
