from typing import Protocol, overload, runtime_checkable

from gridlab.app import dto
from gridlab.app.contracts.context import Context

from . import user


__all__ = ("QueryBus", "user")


@runtime_checkable
class QueryBus(Protocol):
    @overload
    async def __call__(
        self,
        context: Context,
        qc: user.get.GetUsersByOffsetQuery,
        /,
    ) -> dto.OffsetPage: ...
    @overload
    async def __call__(
        self,
        context: Context,
        qc: user.get.GetUsersByKeysetQuery,
        /,
    ) -> dto.KeysetPage: ...
