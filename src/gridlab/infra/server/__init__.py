import logging
from typing import Any, assert_never

from config.core import BackendConfig

from .granian import run_granian
from .uvicorn import run_uvicorn


log = logging.getLogger(__name__)


def serve(config: BackendConfig, suffix: str = "app", **kw: Any) -> None:
    target = f"gridlab.__main__:{suffix}"
    if config.server.workers_count() > 1 and config.grid.count_cache_backend == "memory":
        log.warning("Each of %d workers keeps its own count cache", config.server.workers_count())

    match config.server.type:
        case "granian":
            run_granian(target, config, **kw)
        case "uvicorn":
            run_uvicorn(target, config, **kw)
        case _:
            assert_never(config.server.type)
