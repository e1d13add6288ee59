from __future__ import annotations

from typing import Protocol

from .exceptions import AppError


class Result[T, E: Exception](Protocol):
    @property
    def data(self) -> T | None: ...
    @property
    def err(self) -> E | None: ...
    def unwrap(self) -> T: ...
    def is_ok(self) -> bool: ...
    def is_err(self) -> bool: ...


type AppResult[T] = Result[T, AppError]
