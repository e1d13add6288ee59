import socket
from typing import Any

import uvicorn

from config.core import BackendConfig


def run_uvicorn(target: str, config: BackendConfig, **kw: Any) -> None:
    workers = config.server.workers_count()
    options = {
        "workers": workers,
        "host": config.server.host,
        "port": config.server.port,
        "access_log": config.server.log,
        "limit_concurrency": config.compute_concurrency_limit(workers) if workers > 1 else None,
        "backlog": max(2048, socket.SOMAXCONN),
    }

    uvicorn.run(target, **{**options, **kw})
