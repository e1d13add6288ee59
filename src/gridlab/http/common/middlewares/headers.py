import re
import time
from typing import Final

from litestar import types
from litestar.constants import HTTP_RESPONSE_START
from litestar.datastructures import Headers, MutableScopeHeaders
from litestar.enums import ScopeType
from litestar.middleware.base import ASGIMiddleware
from uuid_utils import uuid7


# a client id is echoed back only when it is safe to put into logs and headers
_CLIENT_REQUEST_ID: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9._:-]{1,128}")


class ResponseHeaderMiddleware(ASGIMiddleware):
    """Stamps one header on every HTTP response start message."""

    header_name: str

    def __init__(self, scopes: tuple[ScopeType, ...] = (ScopeType.HTTP,)) -> None:
        self.scopes = scopes

    def prepare(self, scope: types.Scope) -> None: ...

    def header_value(self, scope: types.Scope) -> str:
        raise NotImplementedError

    async def handle(
        self,
        scope: types.Scope,
        receive: types.Receive,
        send: types.Send,
        next_app: types.ASGIApp,
    ) -> None:
        self.prepare(scope)

        async def send_wrapper(message: types.Message) -> None:
            if message["type"] == HTTP_RESPONSE_START:
                MutableScopeHeaders.from_message(message=message)[self.header_name] = (
                    self.header_value(scope)
                )

            await send(message)

        await next_app(scope, receive, send_wrapper)


class ProcessTimeMiddleware(ResponseHeaderMiddleware):
    header_name = "X-Process-Time"

    def prepare(self, scope: types.Scope) -> None:
        scope.setdefault("state", {})["started_at"] = time.perf_counter()

    def header_value(self, scope: types.Scope) -> str:
        # milliseconds
        return f"{(time.perf_counter() - scope['state']['started_at']) * 1000:.3f}"


class XRequestIdMiddleware(ResponseHeaderMiddleware):
    header_name = "X-Request-Id"

    def prepare(self, scope: types.Scope) -> None:
        supplied = Headers.from_scope(scope).get(self.header_name)
        request_id = (
            supplied if supplied and _CLIENT_REQUEST_ID.fullmatch(supplied) else uuid7().hex
        )
        scope.setdefault("state", {})["request_id"] = request_id

    def header_value(self, scope: types.Scope) -> str:
        return scope["state"]["request_id"]
