from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from docworker.config.settings import Settings
from docworker.logging.logger import Log

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class Database:
    """Owns the connection pool for one process: open on startup, close on shutdown."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._pool: ConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """Create the pool and wait until at least one connection is ready."""
        if self._pool is not None:
            return
        pool = ConnectionPool(
            build_conninfo(self._settings),
            min_size=1,
            max_size=self._settings.db_pool_max_size,
            open=False,
        )
        pool.open(wait=True)
        self._pool = pool
        Log.info(
            f"Database pool opened ({self._settings.db_host}:{self._settings.db_port}/"
            f"{self._settings.db_database})"
        )

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            Log.info("Database pool closed")

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection from the pool. Caller manages commit/rollback."""
        if self._pool is None:
            raise RuntimeError("Database is not open. Call Database.open() first.")
        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection whose work is committed on success, rolled back on error."""
        with self.connection() as conn:
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()

    def apply_schema(self, schema_path: Path | None = None) -> None:
        """Create the processing tables if they do not exist yet."""
        sql = (schema_path or SCHEMA_PATH).read_text(encoding="utf-8")
        with self.transaction() as conn:
            conn.execute(sql)  # type: ignore[arg-type]
        Log.info("Database schema applied")
