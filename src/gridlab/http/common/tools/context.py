from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from litestar import Request
from litestar.datastructures import State
from litestar.enums import ScopeType

from gridlab.app.contracts import exceptions as exc
from gridlab.app.contracts.context import Context


@dataclass(slots=True, frozen=True)
class HttpContext(Context):
    request_method: str | None = None
    request_path: str | None = None
    request_query: str | None = None


def context_from_request(request: Request[Any, Any, State]) -> HttpContext:
    if request.scope["type"] != ScopeType.HTTP:
        raise exc.AppError("Grid context is only available on HTTP requests")

    return HttpContext(
        request_id=request.state.get("request_id") or request.headers.get("x-request-id"),
        request_method=request.scope["method"],
        request_path=request.scope["path"],
        request_query=request.scope["query_string"].decode("latin-1") or None,
    )
