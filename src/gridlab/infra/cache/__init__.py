from .keys import COUNT_KEY_PREFIX, count_cache_key
from .memory import MemoryCountCache
from .redis import RedisCache, RedisCountCache


__all__ = (
    "COUNT_KEY_PREFIX",
    "MemoryCountCache",
    "RedisCache",
    "RedisCountCache",
    "count_cache_key",
)
