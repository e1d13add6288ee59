from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, Self

from gridlab.app.common.tools import lazy
from gridlab.app.contracts.dto import DTO

from .core import QCBus
from .interfaces.handler import Handler
from .interfaces.middleware import MiddlewareType


class BusBuilder:
    """Collects handler classes and builds them per dispatch from named dependencies.

    A dependency given as a callable is called for every handler built, wrap plain
    callables (clocks and the like) with `singleton` to pass them through as values.
    """

    __slots__ = (
        "_dependencies",
        "_handlers",
        "_middlewares",
    )

    def __init__(self) -> None:
        self._dependencies: dict[str, Any] = {}
        self._middlewares: list[MiddlewareType] = []
        self._handlers: dict[type[DTO], type[Handler[Any, Any, Any]]] = {}

    def dependencies(self, **deps: Any) -> Self:
        self._dependencies.update(deps)

        return self

    def middleware(self, *middlewares: MiddlewareType) -> Self:
        self._middlewares.extend(middlewares)

        return self

    def register[T, Q: DTO, R](self, qc: type[Q], handler: type[Handler[T, Q, R]]) -> Self:
        self._handlers[qc] = handler

        return self

    def build(self) -> QCBus:
        bus = QCBus(*self._middlewares)
        for qc, handler in self._handlers.items():
            bus.register(qc, self._make_factory(handler))

        return bus

    def _make_factory[H: Handler[Any, Any, Any]](self, handler: type[H]) -> Callable[[], H]:
        assert dataclasses.is_dataclass(handler), f"{handler.__name__} must be a dataclass"

        wanted = {f.name for f in dataclasses.fields(handler) if f.init}
        missing = {
            f.name
            for f in dataclasses.fields(handler)
            if f.init
            and f.name not in self._dependencies
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        if missing:
            raise TypeError(f"{handler.__name__} is missing dependencies: {sorted(missing)}")

        return lazy(handler, **{k: v for k, v in self._dependencies.items() if k in wanted})
