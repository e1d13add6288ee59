from datetime import timedelta
from typing import Self

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from gridlab.app.contracts.cache import CountCache, StrCache
from gridlab.app.contracts.exceptions import ServiceUnavailableError
from gridlab.app.contracts.types.user import FilterSpec

from .keys import COUNT_KEY_PREFIX, count_cache_key


def _ensure_string(value: str | bytes) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisCache(StrCache):
    __slots__ = ("_redis",)

    def __init__(self, redis: aioredis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis

    @classmethod
    def from_url(cls, url: str) -> Self:
        return cls(aioredis.Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        result = await self._redis.get(key)

        return _ensure_string(result) if result else None

    async def set(
        self,
        key: str,
        value: str,
        expire: float | timedelta | None = None,
    ) -> None:
        if isinstance(expire, float):
            # sub-second TTLs would be truncated by EX
            await self._redis.set(key, value, px=max(1, round(expire * 1000)))
        else:
            await self._redis.set(key, value, ex=expire)

    async def delete_matching(self, pattern: str) -> int:
        keys = [key async for key in self._redis.scan_iter(match=pattern, count=500)]
        if not keys:
            return 0

        return int(await self._redis.unlink(*keys))

    async def clear(self) -> None:
        await self._redis.flushdb(asynchronous=True)

    async def close(self) -> None:
        await self._redis.aclose(close_connection_pool=True)  # type: ignore[attr-defined]


class RedisCountCache(CountCache):
    """Count cache shared by every worker through Redis, expiry is left to the server."""

    __slots__ = (
        "_cache",
        "_ttl",
    )

    def __init__(self, cache: StrCache, ttl: float) -> None:
        assert ttl > 0, "ttl must be positive"
        self._cache = cache
        self._ttl = ttl

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, key: FilterSpec) -> int | None:
        try:
            value = await self._cache.get(count_cache_key(key))
        except RedisError as e:
            raise ServiceUnavailableError("Count cache is unavailable", detail=type(e).__name__) from e

        if value is None:
            return None

        try:
            return int(value)
        except ValueError:
            return None

    async def set(self, key: FilterSpec, value: int) -> None:
        try:
            await self._cache.set(count_cache_key(key), str(value), expire=float(self._ttl))
        except RedisError as e:
            raise ServiceUnavailableError("Count cache is unavailable", detail=type(e).__name__) from e

    async def invalidate(self) -> int:
        try:
            return await self._cache.delete_matching(f"{COUNT_KEY_PREFIX}*")
        except RedisError as e:
            raise ServiceUnavailableError("Count cache is unavailable", detail=type(e).__name__) from e
