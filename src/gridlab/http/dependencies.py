import logging
import time
from collections.abc import Awaitable, Callable

from litestar import Litestar
from litestar.config.app import AppConfig
from litestar.di import Provide

from config.core import BackendConfig, GridConfig
from gridlab.app.bus.core import QCBus
from gridlab.app.bus.middlewares import LoggingMiddleware
from gridlab.app.common.tools import (
    Closable,
    lazy,
    msgspec_decoder,
    msgspec_encoder,
    singleton,
)
from gridlab.app.contracts.cache import CountCache
from gridlab.app.use_cases import queries
from gridlab.infra.cache import MemoryCountCache, RedisCache, RedisCountCache
from gridlab.infra.database.alchemy.connection import ConnectionFactory
from gridlab.infra.database.alchemy.repositories import RepositoryGatewayImpl
from gridlab.infra.database.manager import ManagerFactory
from gridlab.infra.database.seed import create_schema


log = logging.getLogger(__name__)


def ensure_schema(conn: ConnectionFactory) -> Callable[[Litestar], Awaitable[None]]:
    async def _inner(_: Litestar) -> None:
        await create_schema(conn.engine)
        log.info("Schema is ready on %s", conn.engine.url.render_as_string(hide_password=True))

    return _inner


def create_count_cache(app_config: AppConfig, grid: GridConfig, redis_url: str) -> CountCache:
    if grid.count_cache_backend == "redis":
        cache = RedisCache.from_url(redis_url)
        app_config.state.cache = Closable("count cache", cache, cache.close)
        return RedisCountCache(cache, ttl=grid.count_cache_ttl_seconds)

    return MemoryCountCache(ttl=grid.count_cache_ttl_seconds)


def build_query_bus(
    conn: ConnectionFactory,
    count_cache: CountCache,
    clock: Callable[[], float] = time.perf_counter,
) -> QCBus:
    managers = ManagerFactory(conn)

    return (
        QCBus.builder()
        .dependencies(
            gateway=lazy(RepositoryGatewayImpl, managers.make_transaction_manager),
            count_cache=count_cache,
            clock=singleton(clock),
        )
        .middleware(LoggingMiddleware())
        .register(queries.user.get.GetUsersByOffsetQuery, queries.user.get.GetUsersByOffsetQueryHandler)
        .register(queries.user.get.GetUsersByKeysetQuery, queries.user.get.GetUsersByKeysetQueryHandler)
        .build()
    )


def setup_dependencies(app_config: AppConfig, backend_config: BackendConfig) -> None:
    conn = ConnectionFactory.from_config(
        backend_config.db,
        json_serializer=msgspec_encoder,
        json_deserializer=msgspec_decoder,
    )
    count_cache = create_count_cache(app_config, backend_config.grid, backend_config.redis.url)
    query_bus = build_query_bus(conn, count_cache)

    app_config.dependencies["query_bus"] = Provide(
        singleton(query_bus),
        use_cache=True,
        sync_to_thread=False,
    )
    app_config.dependencies["grid_config"] = Provide(
        singleton(backend_config.grid),
        use_cache=True,
        sync_to_thread=False,
    )
    app_config.on_startup.append(ensure_schema(conn))
    app_config.state.db_pool = Closable("database engine", conn.engine, conn.dispose)
