from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from config.core import DbConfig
from gridlab.app.contracts.connection import AsyncConnection


def create_sa_engine(config: DbConfig, **options: Any) -> AsyncEngine:
    if config.is_sqlite:
        options.setdefault("connect_args", {"timeout": config.connection_timeout})
    else:
        options.setdefault("pool_size", config.pool_size)
        options.setdefault("pool_timeout", config.connection_timeout)
        options.setdefault("max_overflow", config.max_overflow)
        options.setdefault("pool_pre_ping", True)

    return create_async_engine(config.url(), echo=config.echo, **options)


class ConnectionFactory:
    __slots__ = (
        "_engine",
        "_session_factory",
    )

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    @classmethod
    def from_config(cls, config: DbConfig, **options: Any) -> ConnectionFactory:
        return cls(create_sa_engine(config, **options))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def create_connection(self) -> AsyncConnection:
        return self._session_factory()

    async def dispose(self) -> None:
        await self._engine.dispose()

    __call__ = create_connection
