from contextlib import suppress
from typing import Final

from litestar import Litestar

from config.core import BackendConfig, load_config
from gridlab.http import init_app
from gridlab.http.v1 import init_v1_router
from gridlab.infra.server import serve


config: Final[BackendConfig] = load_config()
app: Final[Litestar] = init_app(config, init_v1_router())


if __name__ == "__main__":
    with suppress(KeyboardInterrupt):
        serve(config=config)
