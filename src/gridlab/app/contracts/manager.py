from __future__ import annotations

from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

from .connection import AsyncConnection, IsolationLevel
from .query import Query


@runtime_checkable
class TransactionManager(Protocol):
    conn: AsyncConnection

    async def send[C: AsyncConnection, T](self, query: Query[C, T], /, **kw: Any) -> T: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def with_transaction(self, isolation_level: IsolationLevel | None = None) -> Self: ...
    async def close_transaction(self) -> None: ...
    async def __aenter__(self) -> Self: ...
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...
