from litestar import Router

from gridlab.http.healthcheck import healthcheck_endpoint
from gridlab.http.v1.controllers import UserGridController


def init_v1_router() -> Router:
    return Router("/v1", route_handlers=[healthcheck_endpoint, UserGridController])
