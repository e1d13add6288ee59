import socket
from typing import Any

from granian.constants import Interfaces
from granian.server import Server as Granian

from config.core import BackendConfig


def run_granian(target: str, config: BackendConfig, **kw: Any) -> None:
    workers = config.server.workers_count()
    options = {
        "address": config.server.host,
        "port": config.server.port,
        "workers": workers,
        "interface": Interfaces.ASGI,
        "log_access": config.server.log,
        "log_access_format": (
            '[%(time)s] %(addr)s - "%(method)s %(path)s %(query_string)s '
            '%(protocol)s" %(status)d %(dt_ms).3f'
        ),
        "backpressure": config.compute_concurrency_limit(workers) if workers > 1 else None,
        "backlog": max(2048, socket.SOMAXCONN),
    }

    Granian(target, **{**options, **kw}).serve()  # type: ignore[attr-defined]
