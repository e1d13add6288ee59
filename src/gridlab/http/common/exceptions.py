import logging
from typing import Any

from litestar import MediaType, Request, Response
from litestar.types import ExceptionHandlersMap

import gridlab.app.contracts.exceptions as app_exc


log = logging.getLogger(__name__)

JsonResponse = Response[dict[str, Any]]
BasicRequest = Request[Any, Any, Any]


def exc_handlers() -> ExceptionHandlersMap:
    # litestar walks the MRO, so every AppError subclass lands here
    return {app_exc.AppError: handle_error}


def handle_error(request: BasicRequest, exc: app_exc.AppError) -> JsonResponse:
    log_fn = log.error if exc.status_code >= 500 else log.info
    log_fn(
        "Handle error: %s -> %s [request_id=%s]",
        type(exc).__name__,
        exc.content,
        request.state.get("request_id"),
    )

    return JsonResponse(
        content=exc.content.copy(),
        status_code=exc.status_code,
        media_type=MediaType.JSON,
    )
