"""MongoDB cache store."""

from __future__ import annotations

from datetime import datetime, timezone

from bson.binary import Binary
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from openfx.cache.base_store import CacheStore
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)

CACHE_COLLECTION_NAME = "openfx_cache"


class MongoCacheStore(CacheStore):
    """Cache entries stored as documents keyed by ``_id``."""

    def __init__(self, url: str, *, database: str | None = None) -> None:
        self.url = url
        self._client = MongoClient(url)
        db = self._client.get_default_database() if database is None else self._client[database]
        if db is None:
            raise ValueError("MongoDB connection URI must include a database name")
        self._collection: Collection = db[CACHE_COLLECTION_NAME]

    def get(self, key: str) -> bytes | None:
        try:
            doc = self._collection.find_one({"_id": key})
        except PyMongoError as exc:
            raise RuntimeError(f"Failed to read MongoDB cache entry: {exc}") from exc
        if doc is None:
            return None
        return bytes(doc["payload"])

    def set(self, key: str, value: bytes) -> None:
        try:
            self._collection.update_one(
                {"_id": key},
                {"$set": {"payload": Binary(value), "updated_at": datetime.now(timezone.utc)}},
                upsert=True,
            )
        except PyMongoError as exc:
            raise RuntimeError(f"Failed to write MongoDB cache entry: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


__all__ = ["CACHE_COLLECTION_NAME", "MongoCacheStore"]
