"""Cache store interface shared by every backend."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Byte-oriented key/value store with last-write-wins semantics."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the stored bytes for ``key`` or ``None`` on a miss."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["CacheStore"]
