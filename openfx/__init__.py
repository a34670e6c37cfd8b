"""Public interface for the openfx package."""

from __future__ import annotations

from importlib import metadata as importlib_metadata
from typing import Any

from openfx.cache import CacheKeyBuilder, CacheStore, FileCacheStore, MemoryCacheStore, SafeCache
from openfx.client import RateClient
from openfx.config import CacheBackend, CacheConnectionInfo, ClientConfig
from openfx.errors import (
    AuthenticationError,
    CacheConfigurationError,
    FetchError,
    InvalidDateError,
    OpenFXError,
    UnknownCurrencyError,
)
from openfx.fetcher import Fetcher, RequestsFetcher
from openfx.models import (
    ConversionResult,
    PlanTier,
    RateTable,
    RequestKind,
    RequestShape,
    TimeSeries,
    UpstreamError,
)
from openfx.rates.plan import PlanPolicy
from openfx.rates.rebase import convert_amount, rebase
from openfx.rates.symbols import filter_symbols
from openfx.timeseries import TimeSeriesAssembler

__all__ = [
    "__version__",
    "AuthenticationError",
    "CacheBackend",
    "CacheConfigurationError",
    "CacheConnectionInfo",
    "CacheKeyBuilder",
    "CacheStore",
    "ClientConfig",
    "ConversionResult",
    "FetchError",
    "Fetcher",
    "FileCacheStore",
    "InvalidDateError",
    "MemoryCacheStore",
    "MongoCacheStore",
    "OpenFXError",
    "PlanPolicy",
    "PlanTier",
    "RateClient",
    "RateTable",
    "RequestKind",
    "RequestShape",
    "RequestsFetcher",
    "SQLiteCacheStore",
    "SafeCache",
    "TimeSeries",
    "TimeSeriesAssembler",
    "UnknownCurrencyError",
    "UpstreamError",
    "convert_amount",
    "filter_symbols",
    "rebase",
]

try:
    __version__ = importlib_metadata.version("openfx")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


def __getattr__(name: str) -> Any:
    """Lazily import database-backed stores to keep SQLAlchemy/pymongo off the import path."""

    if name == "SQLiteCacheStore":
        from openfx.cache.relational_store import SQLiteCacheStore as _store

        return _store
    if name == "MongoCacheStore":
        from openfx.cache.mongo_store import MongoCacheStore as _store

        return _store
    raise AttributeError(f"module 'openfx' has no attribute {name}")
