from __future__ import annotations

from types import TracebackType
from typing import Any, Literal, Protocol, Self, runtime_checkable


type IsolationLevel = Literal[
    "serializable",
    "repeatable read",
    "read committed",
    "read uncommitted",
]


@runtime_checkable
class AsyncConnection(Protocol):
    def in_transaction(self) -> bool: ...
    async def begin(self) -> Any: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def connection(self) -> Any: ...
    async def execute(self, *args: Any, **kw: Any) -> Any: ...
    async def scalars(self, *args: Any, **kw: Any) -> Any: ...
    async def close(self) -> None: ...
    async def __aenter__(self) -> Self: ...
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...
