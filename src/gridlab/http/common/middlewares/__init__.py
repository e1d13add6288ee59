from litestar.types.composite_types import Middleware

from .context import ContextMiddleware
from .headers import ProcessTimeMiddleware, ResponseHeaderMiddleware, XRequestIdMiddleware


__all__ = (
    "ContextMiddleware",
    "ProcessTimeMiddleware",
    "ResponseHeaderMiddleware",
    "XRequestIdMiddleware",
    "middlewares",
)


def middlewares() -> tuple[Middleware, ...]:
    # outermost first, the context reads the request id set before it
    return (ProcessTimeMiddleware(), XRequestIdMiddleware(), ContextMiddleware())
