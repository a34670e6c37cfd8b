"""In-process cache store."""

from __future__ import annotations

from openfx.cache.base_store import CacheStore


class MemoryCacheStore(CacheStore):
    """Dictionary backed store; entries live as long as the instance."""

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._entries.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._entries[key] = bytes(value)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["MemoryCacheStore"]
