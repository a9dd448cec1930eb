from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from bpmnhub.config.settings import Settings
from bpmnhub.logging.logger import Log

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """Build a libpq connection string from settings, quoting values as needed."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def init_pool(settings: Settings, max_size: int = 10) -> None:
    """Open the shared connection pool. Re-initializing closes the previous pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
    _pool = ConnectionPool(build_conninfo(settings), min_size=1, max_size=max_size)
    Log.info("Connection pool opened", host=settings.db_host, db=settings.db_database)


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a pooled connection. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
