from collections.abc import Callable
from functools import partial, reduce
from typing import Any

from gridlab.app.bus.interfaces.middleware import MiddlewareType

from .logging import LoggingMiddleware


__all__ = (
    "LoggingMiddleware",
    "wrap_middleware",
)


def wrap_middleware(
    call_next: Callable[..., Any],
    *middlewares: MiddlewareType,
) -> Callable[..., Any]:
    # the first middleware given runs outermost
    return reduce(lambda wrapped, mw: partial(mw, wrapped), reversed(middlewares), call_next)
