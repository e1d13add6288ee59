from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from types import TracebackType
from typing import Any, Self

from gridlab.app.contracts.connection import AsyncConnection, IsolationLevel
from gridlab.app.contracts.manager import TransactionManager
from gridlab.app.contracts.query import Query


log = logging.getLogger(__name__)


class TransactionManagerImpl(TransactionManager):
    """Owns one session for the span of a query handler or a seeding run.

    Reads run on the session's implicit transaction. `with_transaction` is only
    needed where writes must land together, and the outcome is settled on exit.
    """

    __slots__ = (
        "_in_tx",
        "conn",
    )

    def __init__(self, conn: AsyncConnection) -> None:
        self.conn = conn
        self._in_tx = False

    async def send[C: AsyncConnection, T](self, query: Query[C, T], /, **kw: Any) -> T:
        return await query(self.conn, **kw)  # type: ignore[arg-type]

    __call__ = send

    async def __aenter__(self) -> Self:
        await self.conn.__aenter__()

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        try:
            if self._in_tx:
                await (self.rollback() if exc_type else self.commit())
        finally:
            await self.close_transaction()

    async def commit(self) -> None:
        await self.conn.commit()

    async def rollback(self) -> None:
        await self.conn.rollback()

    async def with_transaction(self, isolation_level: IsolationLevel | None = None) -> Self:
        if self.conn.in_transaction():
            raise ValueError("Transaction is already open on this session")

        await self.conn.begin()
        self._in_tx = True
        if isolation_level:
            await self._set_isolation_level(isolation_level)

        return self

    async def close_transaction(self) -> None:
        self._in_tx = False
        await self.conn.__aexit__(None, None, None)

    async def _set_isolation_level(self, isolation_level: IsolationLevel) -> None:
        driver = await self.conn.connection()
        if driver.dialect.name == "sqlite":
            # sqlite has no per-transaction isolation statement
            log.debug("Ignoring isolation level %r on sqlite", isolation_level)
            return

        await driver.exec_driver_sql(f"SET TRANSACTION ISOLATION LEVEL {isolation_level.upper()}")


class ManagerFactory:
    __slots__ = ("_conn_factory",)

    def __init__(self, conn_factory: Callable[[], AsyncConnection]) -> None:
        self._conn_factory = conn_factory

    def __call__(self) -> AbstractAsyncContextManager[TransactionManager]:
        return self.make_manager_context()

    def make_transaction_manager(self) -> TransactionManager:
        return TransactionManagerImpl(self._conn_factory())

    @asynccontextmanager
    async def make_manager_context(self) -> AsyncIterator[TransactionManager]:
        async with self.make_transaction_manager() as manager:
            yield manager
