from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Self

from gridlab.app.contracts.dto import DTO

from .interfaces.handler import Handler, HandlerType
from .interfaces.middleware import MiddlewareType
from .middlewares import wrap_middleware


if TYPE_CHECKING:
    from .builder import BusBuilder

type HandlerFactory = Callable[[], HandlerType]


class UnregisteredHandlerError(LookupError): ...


class QCBus:
    """Routes a query to the handler registered for its exact type.

    Handlers are built by their factory on every dispatch, so a handler never
    outlives the request it serves. Middlewares wrap the whole dispatch.
    """

    __slots__ = (
        "_dispatch",
        "_factories",
    )

    def __init__(self, *middlewares: MiddlewareType) -> None:
        self._factories: dict[type[DTO], HandlerFactory] = {}
        self._dispatch: Callable[..., Any] = wrap_middleware(self._handle, *middlewares)

    async def __call__[T, Q: DTO, R](self, context: T, qc: Q, /) -> R:
        result: R = await self._dispatch(context, qc)

        return result

    def register[T, Q: DTO, R](self, qc: type[Q], factory: Callable[[], Handler[T, Q, R]]) -> Self:
        self._factories[qc] = factory

        return self

    async def _handle[T, Q: DTO, R](self, context: T, qc: Q, /) -> R:
        handler: Handler[T, Q, R] = self._resolve(qc)

        return await handler(context, qc)

    def _resolve[T, Q: DTO, R](self, qc: Q) -> Handler[T, Q, R]:
        factory = self._factories.get(type(qc))
        if factory is None:
            raise UnregisteredHandlerError(f"No handler is registered for `{type(qc).__name__}`")

        return factory()

    @staticmethod
    def builder() -> BusBuilder:
        from .builder import BusBuilder

        return BusBuilder()
