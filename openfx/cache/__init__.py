"""Cache stores and key derivation for :mod:`openfx`."""

from __future__ import annotations

from openfx.cache.base_store import CacheStore
from openfx.cache.file_store import FileCacheStore
from openfx.cache.keys import CacheKeyBuilder
from openfx.cache.memory_store import MemoryCacheStore
from openfx.cache.safe import SafeCache

__all__ = [
    "CacheKeyBuilder",
    "CacheStore",
    "FileCacheStore",
    "MemoryCacheStore",
    "SafeCache",
]
