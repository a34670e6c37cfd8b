"""Encoding rate structures to and from the cache's byte representation."""

from __future__ import annotations

import json
from typing import Any, Dict

from openfx.models import RateTable, TimeSeries

ENCODING = "utf-8"


class CacheDecodeError(ValueError):
    """Stored bytes do not describe a known structure."""


def _dump(kind: str, data: Any) -> bytes:
    return json.dumps({"type": kind, "data": data}, separators=(",", ":")).encode(ENCODING)


def _load(raw: bytes, expected: str) -> Any:
    try:
        envelope = json.loads(raw.decode(ENCODING))
    except (UnicodeDecodeError, ValueError) as exc:
        raise CacheDecodeError("Cache entry is not valid JSON") from exc
    if not isinstance(envelope, dict) or envelope.get("type") != expected:
        raise CacheDecodeError(f"Cache entry is not a {expected}")
    return envelope.get("data")


def dump_rate_table(table: RateTable) -> bytes:
    return _dump("rate_table", table.to_payload())


def load_rate_table(raw: bytes) -> RateTable:
    try:
        return RateTable.from_payload(_load(raw, "rate_table"))
    except (KeyError, TypeError, ValueError) as exc:
        raise CacheDecodeError("Malformed cached rate table") from exc


def dump_time_series(series: TimeSeries) -> bytes:
    return _dump("time_series", series.to_payload())


def load_time_series(raw: bytes) -> TimeSeries:
    try:
        return TimeSeries.from_payload(_load(raw, "time_series"))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CacheDecodeError("Malformed cached time series") from exc


def dump_currencies(currencies: Dict[str, str]) -> bytes:
    return _dump("currencies", dict(currencies))


def load_currencies(raw: bytes) -> Dict[str, str]:
    data = _load(raw, "currencies")
    if not isinstance(data, dict):
        raise CacheDecodeError("Malformed cached currency catalog")
    return {str(code): str(name) for code, name in data.items()}


__all__ = [
    "CacheDecodeError",
    "dump_currencies",
    "dump_rate_table",
    "dump_time_series",
    "load_currencies",
    "load_rate_table",
    "load_time_series",
]
