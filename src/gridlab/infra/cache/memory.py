from __future__ import annotations

import time
from typing import NamedTuple

from gridlab.app.contracts.cache import CountCache
from gridlab.app.contracts.types.user import FilterSpec
from gridlab.shared.types import Clock

from .keys import count_cache_key


class _Entry(NamedTuple):
    value: int
    expires_at: float


class MemoryCountCache(CountCache):
    """Process-local count cache.

    Expired entries are dropped when read, nothing sweeps the map in the background.
    """

    __slots__ = (
        "_clock",
        "_entries",
        "_ttl",
    )

    def __init__(self, ttl: float, clock: Clock = time.monotonic) -> None:
        assert ttl > 0, "ttl must be positive"
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, key: FilterSpec) -> int | None:
        cache_key = count_cache_key(key)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            self._entries.pop(cache_key, None)
            return None

        return entry.value

    async def set(self, key: FilterSpec, value: int) -> None:
        self._entries[count_cache_key(key)] = _Entry(value, self._clock() + self._ttl)

    async def invalidate(self) -> int:
        dropped = len(self._entries)
        self._entries.clear()

        return dropped

    def __len__(self) -> int:
        return len(self._entries)
