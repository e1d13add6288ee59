from __future__ import annotations

import fnmatch
from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from gridlab.app.contracts import exceptions as exc
from gridlab.app.contracts.types.user import FilterSpec, UserStatus
from gridlab.infra.cache import COUNT_KEY_PREFIX, MemoryCountCache, RedisCountCache, count_cache_key


pytestmark = pytest.mark.anyio


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DictCache:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expires: dict[str, float | timedelta | None] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, expire: float | timedelta | None = None) -> None:
        self.data[key] = value
        self.expires[key] = expire

    async def delete_matching(self, pattern: str) -> int:
        matched = [key for key in self.data if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self.data[key]

        return len(matched)

    async def close(self) -> None: ...


class BrokenCache(DictCache):
    async def get(self, key: str) -> str | None:
        raise RedisConnectionError("connection refused")

    async def set(self, key: str, value: str, expire: float | timedelta | None = None) -> None:
        raise RedisConnectionError("connection refused")


def test_key_ignores_whitespace_around_search() -> None:
    assert count_cache_key(FilterSpec(search=" bob ")) == count_cache_key(FilterSpec(search="bob"))
    assert count_cache_key(FilterSpec(search="  ")) == count_cache_key(FilterSpec())


def test_key_is_namespaced() -> None:
    assert count_cache_key(FilterSpec()).startswith(COUNT_KEY_PREFIX)


@pytest.mark.parametrize(
    ("left", "right"),
    [
        (FilterSpec(search="bob"), FilterSpec(search="Bob")),
        (FilterSpec(status=UserStatus.ACTIVE), FilterSpec(status=UserStatus.INACTIVE)),
        (FilterSpec(status=UserStatus.ACTIVE), FilterSpec()),
        (FilterSpec(search="ACTIVE"), FilterSpec(status=UserStatus.ACTIVE)),
        (
            FilterSpec(search='a","status":"ACTIVE'),
            FilterSpec(search="a", status=UserStatus.ACTIVE),
        ),
        (FilterSpec(search="a|ACTIVE"), FilterSpec(search="a", status=UserStatus.ACTIVE)),
    ],
)
def test_different_filters_never_share_a_key(left: FilterSpec, right: FilterSpec) -> None:
    assert count_cache_key(left) != count_cache_key(right)


async def test_memory_cache_expires_at_ttl() -> None:
    clock = FakeClock()
    cache = MemoryCountCache(ttl=30, clock=clock)
    filters = FilterSpec(status=UserStatus.ACTIVE)

    assert await cache.get(filters) is None

    await cache.set(filters, 50)
    clock.advance(29.5)

    assert await cache.get(filters) == 50

    clock.advance(0.5)

    assert await cache.get(filters) is None
    assert len(cache) == 0


async def test_memory_cache_rewrite_restarts_ttl() -> None:
    clock = FakeClock()
    cache = MemoryCountCache(ttl=10, clock=clock)
    filters = FilterSpec(search="user")

    await cache.set(filters, 1)
    clock.advance(8)
    await cache.set(filters, 2)
    clock.advance(8)

    assert await cache.get(filters) == 2
    assert len(cache) == 1


async def test_memory_cache_eviction_is_lazy() -> None:
    clock = FakeClock()
    cache = MemoryCountCache(ttl=1, clock=clock)

    await cache.set(FilterSpec(search="a"), 1)
    await cache.set(FilterSpec(search="b"), 2)
    clock.advance(5)

    assert len(cache) == 2
    assert await cache.get(FilterSpec(search="a")) is None
    assert len(cache) == 1


async def test_memory_cache_stores_zero() -> None:
    cache = MemoryCountCache(ttl=1, clock=FakeClock())

    await cache.set(FilterSpec(search="nobody"), 0)

    assert await cache.get(FilterSpec(search="nobody")) == 0


def test_ttl_must_be_positive() -> None:
    with pytest.raises(AssertionError):
        MemoryCountCache(ttl=0)


async def test_redis_count_cache_uses_store_expiry() -> None:
    store = DictCache()
    cache = RedisCountCache(store, ttl=30)
    filters = FilterSpec(search="bob", status=UserStatus.ACTIVE)

    await cache.set(filters, 3)

    assert store.data == {count_cache_key(filters): "3"}
    assert store.expires == {count_cache_key(filters): 30.0}
    assert await cache.get(filters) == 3
    assert cache.ttl == 30


async def test_redis_count_cache_ignores_garbage() -> None:
    store = DictCache()
    cache = RedisCountCache(store, ttl=30)
    store.data[count_cache_key(FilterSpec())] = "not-a-number"

    assert await cache.get(FilterSpec()) is None


async def test_redis_count_cache_outage_is_unavailable() -> None:
    cache = RedisCountCache(BrokenCache(), ttl=30)

    with pytest.raises(exc.ServiceUnavailableError):
        await cache.get(FilterSpec())
    with pytest.raises(exc.ServiceUnavailableError):
        await cache.set(FilterSpec(), 1)


async def test_memory_invalidate_drops_every_count() -> None:
    cache = MemoryCountCache(ttl=30, clock=FakeClock())
    await cache.set(FilterSpec(), 100)
    await cache.set(FilterSpec(status=UserStatus.ACTIVE), 50)

    assert await cache.invalidate() == 2
    assert await cache.get(FilterSpec()) is None
    assert len(cache) == 0


async def test_redis_invalidate_only_touches_count_keys() -> None:
    store = DictCache()
    store.data["session:1"] = "keep"
    cache = RedisCountCache(store, ttl=30)
    await cache.set(FilterSpec(search="bob"), 1)

    assert await cache.invalidate() == 1
    assert store.data == {"session:1": "keep"}
