from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from litestar import Litestar, Router
from litestar.config.app import AppConfig
from litestar.config.cors import CORSConfig
from litestar.logging.config import LoggingConfig
from litestar.middleware.logging import LoggingMiddlewareConfig
from litestar.openapi.config import OpenAPIConfig
from litestar.openapi.plugins import ScalarRenderPlugin, SwaggerRenderPlugin

from config.core import BackendConfig
from gridlab.app.common.tools import Closable
from gridlab.http.common.exceptions import exc_handlers
from gridlab.http.common.middlewares import middlewares

from .dependencies import setup_dependencies


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncIterator[None]:
    try:
        yield
    finally:
        for v in app.state.values():
            if isinstance(v, Closable):
                await v.close()


def logging_config(config: BackendConfig) -> LoggingConfig:
    return LoggingConfig(
        root={"level": config.api.log_level, "handlers": ["queue_listener"]},
        loggers={
            "gridlab": {"level": config.api.log_level, "propagate": True},
        },
        log_exceptions="debug",
    )


def _metrics_name(title: str) -> str:
    return "_".join(title.split()).replace("-", "_").lower() if title else "gridlab"


def _on_app_init(config: BackendConfig, *routers: Router) -> Callable[[AppConfig], AppConfig]:
    def _wrapped(app_config: AppConfig) -> AppConfig:
        app_config.exception_handlers.update(exc_handlers())
        app_config.middleware.extend(middlewares())
        app_config.route_handlers.extend(routers)
        setup_dependencies(app_config, config)

        if config.api.log_requests:
            app_config.middleware.append(LoggingMiddlewareConfig().middleware)
        if config.api.metrics:
            from litestar.contrib.prometheus import PrometheusConfig, PrometheusController

            app_config.middleware.append(
                PrometheusConfig(
                    app_name=_metrics_name(config.api.title),
                    prefix=_metrics_name(config.api.title),
                    group_path=True,
                ).middleware,
            )
            PrometheusController.get.include_in_schema = False

            app_config.route_handlers.append(PrometheusController)

        return app_config

    return _wrapped


def init_app(config: BackendConfig, *routers: Router) -> Litestar:
    return Litestar(
        path=config.api.root_path,
        openapi_config=(
            OpenAPIConfig(
                title=config.api.title,
                version=config.api.version,
                render_plugins=(SwaggerRenderPlugin(), ScalarRenderPlugin()),
            )
        )
        if config.api.title and config.api.swagger
        else None,
        cors_config=CORSConfig(allow_origins=config.api.cors_origins, allow_methods=["GET"]),
        logging_config=logging_config(config),
        debug=config.api.debug,
        lifespan=[lifespan],
        on_app_init=[_on_app_init(config, *routers)],
    )
