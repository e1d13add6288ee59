from __future__ import annotations

import math
import multiprocessing as mp
from pathlib import Path
from typing import Literal
from urllib.parse import quote

from pydantic_settings import BaseSettings, SettingsConfigDict


type ServerType = Literal["granian", "uvicorn"]
type CountCacheBackend = Literal["memory", "redis"]
type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


def env_settings(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix=prefix,
        extra="ignore",
    )


class DbConfig(BaseSettings):
    model_config = env_settings("DB_")

    driver: str = "sqlite+aiosqlite"
    name: str = "gridlab.sqlite"
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    connection_timeout: int = 10
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")

    def url(self) -> str:
        if self.is_sqlite:
            return f"{self.driver}:///{self.name}"

        return (
            f"{self.driver}://{self.user}:{quote(self.password or '')}@"
            f"{self.host}:{self.port}/{self.name}"
        )


class ServerConfig(BaseSettings):
    model_config = env_settings("SERVER_")

    host: str = "127.0.0.1"
    port: int = 4000
    type: ServerType = "uvicorn"
    workers: int | Literal["auto"] = 1
    log: bool = True

    def workers_count(self) -> int:
        if self.workers == "auto":
            return max(1, mp.cpu_count() - 1)

        return self.workers


class ApiConfig(BaseSettings):
    model_config = env_settings("APP_")

    root_path: str = "/api"
    title: str = "Grid Lab"
    version: str = "0.1.0"
    debug: bool = False
    log_requests: bool = False
    metrics: bool = False
    swagger: bool = True
    log_level: LogLevel = "INFO"
    cors_origins: list[str] = ["*"]


class RedisConfig(BaseSettings):
    model_config = env_settings("REDIS_")

    host: str = "127.0.0.1"
    port: int = 6379
    username: str | None = None
    password: str | None = None
    db: int = 0

    @property
    def url(self) -> str:
        auth = ""
        if self.password:
            auth = f"{self.username or ''}:{quote(self.password)}@"

        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class GridConfig(BaseSettings):
    """Paging limits, count cache and client pacing of the user grid."""

    model_config = env_settings("GRID_")

    count_cache_backend: CountCacheBackend = "memory"
    count_cache_ttl_seconds: float = 30
    default_page_size: int = 50
    max_page_size: int = 1_000_000
    default_cursor_page_size: int = 100
    max_cursor_page_size: int = 10_000
    debounce_ms: int = 350
    client_timeout_seconds: float = 10


class BackendConfig(BaseSettings):
    api: ApiConfig
    db: DbConfig
    server: ServerConfig
    redis: RedisConfig
    grid: GridConfig

    def compute_concurrency_limit(self, workers: int | None = None) -> int:
        # one worker should not hold more requests than its share of db connections
        workers = workers or self.server.workers_count()
        return max(1, math.ceil((self.db.pool_size + self.db.max_overflow) / workers))


def load_config(
    db: DbConfig | None = None,
    api: ApiConfig | None = None,
    server: ServerConfig | None = None,
    redis: RedisConfig | None = None,
    grid: GridConfig | None = None,
) -> BackendConfig:
    return BackendConfig(
        db=db or DbConfig(),
        api=api or ApiConfig(),
        server=server or ServerConfig(),
        redis=redis or RedisConfig(),
        grid=grid or GridConfig(),
    )
