from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, Literal
from urllib.parse import urljoin

import pytest
from litestar import Litestar
from litestar.testing import AsyncTestClient

from config.core import ApiConfig, BackendConfig, DbConfig, GridConfig, load_config
from gridlab.app.contracts.manager import TransactionManager
from gridlab.http import init_app
from gridlab.http.v1 import init_v1_router
from gridlab.infra.database.alchemy.connection import ConnectionFactory
from gridlab.infra.database.manager import ManagerFactory
from gridlab.infra.database.seed import create_schema, seed_users


TEST_URL: Final[str] = "http://testserver.local"
SEED_ROWS: Final[int] = 100
NOW: Final[datetime] = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def db_config(tmp_path: Path) -> DbConfig:
    return DbConfig(driver="sqlite+aiosqlite", name=str(tmp_path / "grid.sqlite"))


@pytest.fixture
def app_config(db_config: DbConfig) -> BackendConfig:
    return load_config(
        db=db_config,
        api=ApiConfig(debug=False, swagger=False, metrics=False),
        grid=GridConfig(count_cache_backend="memory"),
    )


@pytest.fixture
async def connection(db_config: DbConfig) -> AsyncIterator[ConnectionFactory]:
    connection = ConnectionFactory.from_config(db_config)
    await create_schema(connection.engine, drop=True)
    await seed_users(ManagerFactory(connection), SEED_ROWS, now=NOW)

    yield connection

    await connection.dispose()


@pytest.fixture
async def manager(connection: ConnectionFactory) -> AsyncIterator[TransactionManager]:
    async with ManagerFactory(connection).make_manager_context() as ctx:
        yield ctx


@pytest.fixture
def app(app_config: BackendConfig, connection: ConnectionFactory) -> Litestar:
    return init_app(app_config, init_v1_router())


@pytest.fixture
async def client(
    app: Litestar,
    app_config: BackendConfig,
    anyio_backend: Literal["asyncio", "trio"],
) -> AsyncIterator[AsyncTestClient[Litestar]]:
    async with AsyncTestClient(
        app,
        base_url=urljoin(TEST_URL, app_config.api.root_path),
        backend=anyio_backend,
    ) as client:
        yield client
