from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, NamedTuple

from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from gridlab.app.contracts.exceptions import AppError, ServiceUnavailableError


log = logging.getLogger(__name__)

UNAVAILABLE_ERRORS: tuple[type[Exception], ...] = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    ConnectionError,
)

type AsyncFn[**P, T] = Callable[P, Coroutine[Any, Any, T]]


class ResultImpl[T, E: Exception](NamedTuple):
    data: T | None
    err: E | None

    def __bool__(self) -> bool:
        return self.is_ok()

    def unwrap(self) -> T:
        if self.data is not None:
            return self.data
        if isinstance(self.err, AppError):
            raise self.err

        raise AppError("Empty result") from self.err

    def is_ok(self) -> bool:
        return self.data is not None

    def is_err(self) -> bool:
        return self.data is None


def _normalize_exc(e: Exception) -> AppError:
    """Turns a storage failure into the error the grid reports for it.

    Driver messages stay in the logs, the caller only sees the failure class.
    """
    if isinstance(e, AppError):
        return e

    if isinstance(e, UNAVAILABLE_ERRORS):
        ae: AppError = ServiceUnavailableError("Storage is unavailable", detail=type(e).__name__)
    elif isinstance(e, SQLAlchemyError):
        ae = AppError("Storage query failed", detail=type(e).__name__)
    else:
        ae = AppError(detail=type(e).__name__)

    log.warning("Storage call failed with %s: %s", type(e).__name__, e, exc_info=e)
    ae.__cause__ = e

    return ae


def as_result[**P, T]() -> Callable[[AsyncFn[P, T | None]], AsyncFn[P, ResultImpl[T, AppError]]]:
    def _decorator(f: AsyncFn[P, T | None], /) -> AsyncFn[P, ResultImpl[T, AppError]]:
        @wraps(f)
        async def _wrapper(*args: P.args, **kwargs: P.kwargs) -> ResultImpl[T, AppError]:
            try:
                result = await f(*args, **kwargs)
            except Exception as e:  # noqa: BLE001
                return ResultImpl(None, _normalize_exc(e))

            return ResultImpl(result, None if result is not None else AppError("Empty result"))

        return _wrapper

    return _decorator
