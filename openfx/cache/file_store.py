"""Directory backed cache store (one file per key)."""

from __future__ import annotations

import os
import re
from pathlib import Path

from openfx.cache.base_store import CacheStore
from openfx.errors import CacheConfigurationError

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileCacheStore(CacheStore):
    """Persist entries as files inside an existing, writable directory."""

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        if not self.cache_dir.is_dir():
            raise CacheConfigurationError(f"Caching directory {self.cache_dir} must exist")
        if not os.access(self.cache_dir, os.W_OK):
            raise CacheConfigurationError(f"Caching directory {self.cache_dir} must be writable")

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Unsafe cache key {key!r}")
        return self.cache_dir / key

    def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_bytes() or None

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        # Readers never observe a partially written entry.
        tmp_path = path.with_name(f".{path.name}.tmp")
        tmp_path.write_bytes(value)
        tmp_path.replace(path)


__all__ = ["FileCacheStore"]
