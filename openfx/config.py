"""Configuration objects for clients and cache backends."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping
from urllib.parse import unquote, urlparse

from openfx.cache.base_store import CacheStore
from openfx.errors import CacheConfigurationError
from openfx.timeseries import DEFAULT_THROTTLE_SECONDS

ENV_PREFIX = "OPENFX_"


class CacheBackend(str, Enum):
    """Supported cache stores."""

    MEMORY = "memory"
    FILE = "file"
    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    MONGODB = "mongodb"

    @classmethod
    def resolve_backend_and_scheme(cls, scheme: str) -> tuple["CacheBackend", str]:
        """Return backend enum + canonical scheme used in connection URLs."""

        if not scheme:
            raise CacheConfigurationError(
                "Cache URL must include a scheme (e.g. sqlite:// or file://)"
            )
        scheme_lower = scheme.lower()
        base_scheme, _, driver = scheme_lower.partition("+")
        if base_scheme in {"postgresql", "postgres"}:
            canonical_scheme = f"postgresql+{driver}" if driver else "postgresql"
            return cls.POSTGRES, canonical_scheme
        if base_scheme == "mysql":
            # Keep driver hints such as ``mysql+pymysql``.
            return cls.MYSQL, scheme_lower if driver else "mysql"
        if base_scheme == "mongodb":
            # Keep srv-style schemes intact so pymongo can route via DNS.
            return cls.MONGODB, scheme_lower if driver else "mongodb"
        if base_scheme in {"sqlite", "file", "memory"}:
            return cls(base_scheme), base_scheme
        raise CacheConfigurationError(
            "Unsupported cache backend. Supported values are memory, file, SQLite, "
            "MySQL, Postgres, and MongoDB."
        )

    @classmethod
    def from_scheme(cls, scheme: str) -> "CacheBackend":
        backend, _ = cls.resolve_backend_and_scheme(scheme)
        return backend


@dataclass(slots=True)
class CacheConnectionInfo:
    """Parsed cache DSN."""

    backend: CacheBackend
    url: str
    path: str | None = None
    database: str | None = None

    @classmethod
    def from_url(cls, url: str) -> "CacheConnectionInfo":
        parsed = urlparse(url)
        backend, canonical_scheme = CacheBackend.resolve_backend_and_scheme(parsed.scheme)
        if parsed.scheme != canonical_scheme:
            parsed = parsed._replace(scheme=canonical_scheme)
        canonical_url = parsed.geturl()

        if backend in {CacheBackend.FILE, CacheBackend.SQLITE}:
            raw_path = unquote(parsed.netloc + parsed.path)
            if backend is CacheBackend.SQLITE and not parsed.netloc:
                # SQLAlchemy style: ``sqlite:///rel.db`` vs ``sqlite:////abs.db``.
                raw_path = raw_path[1:]
            if not raw_path:
                raise CacheConfigurationError(f"{backend.value} cache URL must include a path")
            return cls(backend=backend, url=canonical_url, path=raw_path)

        database = parsed.path[1:] if parsed.path and parsed.path != "/" else None
        return cls(backend=backend, url=canonical_url, database=database)

    def build_store(self) -> CacheStore:
        """Instantiate the configured cache store."""

        if self.backend is CacheBackend.MEMORY:
            from openfx.cache.memory_store import MemoryCacheStore

            return MemoryCacheStore()
        if self.backend is CacheBackend.FILE:
            from openfx.cache.file_store import FileCacheStore

            return FileCacheStore(Path(self.path or ""))
        if self.backend is CacheBackend.SQLITE:
            from openfx.cache.relational_store import SQLiteCacheStore

            return SQLiteCacheStore(Path(self.path or ""))
        if self.backend is CacheBackend.POSTGRES:
            from openfx.cache.relational_store import PostgresCacheStore

            return PostgresCacheStore(self.url)
        if self.backend is CacheBackend.MYSQL:
            from openfx.cache.relational_store import MySQLCacheStore

            return MySQLCacheStore(self.url)
        from openfx.cache.mongo_store import MongoCacheStore

        return MongoCacheStore(self.url, database=self.database)


@dataclass(slots=True)
class ClientConfig:
    """Settings needed to construct a :class:`openfx.client.RateClient`."""

    app_id: str
    base: str = "USD"
    symbols: str | None = None
    protocol: str = "https"
    cache_url: str | None = None
    throttle_seconds: float = DEFAULT_THROTTLE_SECONDS
    timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientConfig":
        """Read ``OPENFX_*`` variables (``OPENFX_APP_ID`` is required)."""

        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value.strip() if value and value.strip() else None

        app_id = _get("APP_ID")
        if not app_id:
            raise ValueError(f"{ENV_PREFIX}APP_ID is not set")
        try:
            throttle = float(_get("THROTTLE_SECONDS") or DEFAULT_THROTTLE_SECONDS)
            timeout = float(_get("TIMEOUT") or 10.0)
        except ValueError as exc:
            raise ValueError(f"Invalid numeric {ENV_PREFIX}* setting: {exc}") from exc
        return cls(
            app_id=app_id,
            base=(_get("BASE") or "USD").upper(),
            symbols=_get("SYMBOLS"),
            protocol=(_get("PROTOCOL") or "https").lower(),
            cache_url=_get("CACHE_URL"),
            throttle_seconds=throttle,
            timeout=timeout,
        )

    def build_cache_store(self) -> CacheStore | None:
        if not self.cache_url:
            return None
        return CacheConnectionInfo.from_url(self.cache_url).build_store()


__all__ = ["CacheBackend", "CacheConnectionInfo", "ClientConfig", "ENV_PREFIX"]
