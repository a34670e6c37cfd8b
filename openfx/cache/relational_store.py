"""SQLAlchemy powered cache stores (SQLite, Postgres, MySQL)."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Column,
    DateTime,
    LargeBinary,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
)

from openfx.cache.base_store import CacheStore
from openfx.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Engine
else:  # pragma: no cover - fallback type used at runtime
    Engine = Any

LOGGER = get_logger(__name__)

CACHE_TABLE_NAME = "openfx_cache"

metadata = MetaData()
cache_table = Table(
    CACHE_TABLE_NAME,
    metadata,
    Column("cache_key", String(160), primary_key=True),
    Column("payload", LargeBinary, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)


class RelationalCacheStore(CacheStore):
    """Key/value rows in a single ``openfx_cache`` table."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None
        self._schema_ready = False

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        LOGGER.debug("Ensuring cache table %s exists", CACHE_TABLE_NAME)
        metadata.create_all(self._get_engine())
        self._schema_ready = True

    def get(self, key: str) -> bytes | None:
        self.ensure_schema()
        with self._get_engine().connect() as connection:
            row = connection.execute(
                select(cache_table.c.payload).where(cache_table.c.cache_key == key)
            ).first()
        return bytes(row[0]) if row is not None else None

    def set(self, key: str, value: bytes) -> None:
        self.ensure_schema()
        with self._get_engine().begin() as connection:
            connection.execute(delete(cache_table).where(cache_table.c.cache_key == key))
            connection.execute(
                insert(cache_table).values(
                    cache_key=key,
                    payload=value,
                    updated_at=datetime.now(timezone.utc).replace(tzinfo=None),
                )
            )

    def close(self) -> None:
        if self._engine_instance is not None:
            self._engine_instance.dispose()
            self._engine_instance = None


class SQLiteCacheStore(RelationalCacheStore):
    """Cache rows stored in a local SQLite file."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        super().__init__(f"sqlite:///{self.db_path}")


class PostgresCacheStore(RelationalCacheStore):
    """Postgres-specific cache store (inherits SQLAlchemy defaults)."""


class MySQLCacheStore(RelationalCacheStore):
    """MySQL-specific cache store (inherits SQLAlchemy defaults)."""


__all__ = [
    "CACHE_TABLE_NAME",
    "MySQLCacheStore",
    "PostgresCacheStore",
    "RelationalCacheStore",
    "SQLiteCacheStore",
    "cache_table",
]
