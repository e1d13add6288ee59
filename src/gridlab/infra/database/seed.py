"""Schema bootstrap and deterministic demo data for the users grid.

Row `i` (1-based) is named `User i`, has the email `user{i}@example.com`, is
`ACTIVE` when `i` is even and was created `i` minutes before `now`, so the newest
rows have the lowest ids.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime, timedelta
from itertools import batched
from typing import Any, Final

from sqlalchemy.ext.asyncio import AsyncEngine

from config.core import BackendConfig, DbConfig, load_config
from gridlab.app.contracts.cache import CountCache
from gridlab.app.contracts.types.user import UserStatus
from gridlab.infra.cache import RedisCache, RedisCountCache
from gridlab.infra.database.alchemy.connection import ConnectionFactory
from gridlab.infra.database.alchemy.dao import DAO
from gridlab.infra.database.alchemy.entity import Entity, User
from gridlab.infra.database.manager import ManagerFactory


log = logging.getLogger(__name__)

DEFAULT_ROWS: Final[int] = 200_000
BATCH_SIZE: Final[int] = 5_000
_STATUSES: Final[tuple[UserStatus, ...]] = (UserStatus.ACTIVE, UserStatus.INACTIVE)


async def create_schema(engine: AsyncEngine, *, drop: bool = False) -> None:
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Entity.metadata.drop_all)
        await conn.run_sync(Entity.metadata.create_all)


def generate_users(count: int, *, now: datetime | None = None) -> Iterator[Mapping[str, Any]]:
    now = now or datetime.now(UTC)
    for i in range(1, count + 1):
        yield {
            "name": f"User {i}",
            "email": f"user{i}@example.com",
            "status": _STATUSES[i % 2],
            "created_at": now - timedelta(minutes=i),
        }


async def seed_users(
    managers: ManagerFactory,
    count: int = DEFAULT_ROWS,
    *,
    now: datetime | None = None,
    batch_size: int = BATCH_SIZE,
) -> int:
    inserted = 0
    async with managers() as manager:
        await manager.with_transaction()
        dao = DAO(manager, entity=User)
        for batch in batched(generate_users(count, now=now), batch_size):
            inserted += await dao.batch_create(batch)
            log.debug("Inserted %d/%d users", inserted, count)

    log.info("Seeded %d users", inserted)
    return inserted


async def reset_and_seed(
    config: DbConfig,
    count: int = DEFAULT_ROWS,
    *,
    count_cache: CountCache | None = None,
) -> int:
    connections = ConnectionFactory.from_config(config)
    try:
        await create_schema(connections.engine, drop=True)
        inserted = await seed_users(ManagerFactory(connections), count)
    finally:
        await connections.dispose()

    if count_cache is not None:
        log.info("Dropped %d cached counts", await count_cache.invalidate())

    return inserted


async def _reseed(config: BackendConfig, count: int) -> int:
    if config.grid.count_cache_backend != "redis":
        # process-local counts of a running server expire on their own
        return await reset_and_seed(config.db, count)

    cache = RedisCache.from_url(config.redis.url)
    try:
        return await reset_and_seed(
            config.db,
            count,
            count_cache=RedisCountCache(cache, ttl=config.grid.count_cache_ttl_seconds),
        )
    finally:
        await cache.close()


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    count = int(argv[0]) if argv else DEFAULT_ROWS
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(_reseed(load_config(), count))


if __name__ == "__main__":
    main()
