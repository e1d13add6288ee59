from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import msgspec


log = logging.getLogger(__name__)

type _AnyDependency = Callable[[], Any] | Any


def msgspec_encoder(obj: Any, *args: Any, **kw: Any) -> str:
    return msgspec.json.encode(obj, *args, **kw).decode(encoding="utf-8")


def msgspec_decoder(obj: Any, *args: Any, **kw: Any) -> Any:
    return msgspec.json.decode(obj, *args, **kw)


def singleton[T](value: T) -> Callable[[], T]:
    """Wraps a value so a factory-aware consumer hands it over untouched."""

    return lambda: value


def lazy[T](v: Callable[..., T], *args: _AnyDependency, **deps: _AnyDependency) -> Callable[[], T]:
    def _resolve(dep: _AnyDependency) -> Any:
        return dep() if callable(dep) else dep

    return lambda: v(*map(_resolve, args), **{k: _resolve(dep) for k, dep in deps.items()})


@dataclass(frozen=True, slots=True)
class Closable:
    """A resource kept in application state and released on shutdown."""

    name: str
    target: Any
    close_fn: Callable[[], Any]

    async def close(self) -> None:
        result = self.close_fn()
        if inspect.isawaitable(result):
            await result
        log.debug("Closed %s", self.name)
