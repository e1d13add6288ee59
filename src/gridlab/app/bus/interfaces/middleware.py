import abc
from typing import Any, Protocol

from gridlab.app.contracts.dto import DTO


class MiddlewareType(Protocol):
    async def __call__(self, call_next: Any, context: Any, qc: Any, /) -> Any: ...


class CallNextHandlerMiddlewareType(Protocol):
    async def __call__[C, Q: DTO, R](self, context: C, qc: Q, /) -> R: ...


class HandlerMiddleware[C](abc.ABC):
    """Wraps every dispatch of the bus; `call_next` runs the inner middlewares and the handler."""

    __slots__ = ()

    @abc.abstractmethod
    async def __call__[Q: DTO, R](
        self,
        call_next: CallNextHandlerMiddlewareType,
        context: C,
        qc: Q,
        /,
    ) -> R: ...
