"""Fault tolerant front for any :class:`CacheStore`."""

from __future__ import annotations

from typing import Callable, TypeVar

from openfx.cache.base_store import CacheStore
from openfx.cache.keys import CacheKeyBuilder
from openfx.models import RequestShape
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


class SafeCache:
    """Wrap a store so cache faults never reach the caller.

    Read failures (backend errors or undecodable bytes) behave as misses and
    write failures are dropped; both are logged.
    """

    def __init__(self, store: CacheStore | None, key_builder: CacheKeyBuilder | None = None) -> None:
        self.store = store
        self.key_builder = key_builder or CacheKeyBuilder()

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def key_for(self, shape: RequestShape) -> str:
        return self.key_builder.build(shape)

    def read(self, shape: RequestShape, loader: Callable[[bytes], T]) -> T | None:
        if self.store is None:
            return None
        key = self.key_for(shape)
        try:
            raw = self.store.get(key)
            if raw is None:
                LOGGER.debug("Cache miss for %s", key)
                return None
            value = loader(raw)
        except Exception as exc:  # noqa: BLE001 - any backend fault degrades to a miss
            LOGGER.warning("Cache read failed for %s: %s", key, exc)
            return None
        LOGGER.debug("Cache hit for %s", key)
        return value

    def write(self, shape: RequestShape, value: T, dumper: Callable[[T], bytes]) -> None:
        if self.store is None:
            return
        key = self.key_for(shape)
        try:
            self.store.set(key, dumper(value))
        except Exception as exc:  # noqa: BLE001 - any backend fault degrades to a no-op
            LOGGER.warning("Cache write failed for %s: %s", key, exc)

    def close(self) -> None:
        if self.store is not None:
            self.store.close()


__all__ = ["SafeCache"]
