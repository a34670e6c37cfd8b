"""Data models shared across the openfx engine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Union

from openfx.errors import UnknownCurrencyError

if TYPE_CHECKING:  # pragma: no cover
    import pandas as pd

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(code: str) -> str:
    """Upper-case and validate a three letter currency code."""

    if not isinstance(code, str):
        raise UnknownCurrencyError(str(code))
    cleaned = code.strip().upper()
    if not _CURRENCY_RE.match(cleaned):
        raise UnknownCurrencyError(cleaned)
    return cleaned


class PlanTier(str, Enum):
    """Whether the upstream honours arbitrary bases for the active credential."""

    CAPABLE = "capable"
    EMULATED = "emulated"


class RequestKind(str, Enum):
    """Operation tag used as the first component of every cache key."""

    LATEST = "latest"
    HISTORICAL = "historical"
    CURRENCIES = "currencies"
    TIME_SERIES = "timeseries"


@dataclass(frozen=True, slots=True)
class RequestShape:
    """Normalized description of a request; the sole input to cache keys."""

    kind: RequestKind
    base: str
    symbols: tuple[str, ...] | None = None
    date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalize_currency(self.base))
        if self.symbols is not None:
            symbols = tuple(normalize_currency(code) for code in self.symbols)
            object.__setattr__(self, "symbols", symbols or None)


@dataclass(frozen=True, slots=True)
class UpstreamError:
    """Error payload returned by the upstream, carried as data."""

    message: str
    description: str = ""
    status: int | None = None

    @property
    def error(self) -> bool:
        return True

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UpstreamError":
        try:
            status: int | None = int(payload["status"])
        except (KeyError, TypeError, ValueError):
            status = None
        return cls(
            message=str(payload.get("message", "unknown_error")),
            description=str(payload.get("description", "")),
            status=status,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "description": self.description,
        }
        if self.status is not None:
            payload["status"] = self.status
        return payload


def is_error_payload(payload: Mapping[str, Any]) -> bool:
    """Return True when ``payload`` is an upstream error envelope."""

    return bool(payload.get("error"))


@dataclass(frozen=True, slots=True)
class RateTable:
    """Rates quoted against ``base``; ``rates[base]`` is 1 after a rebase."""

    base: str
    timestamp: datetime
    rates: Mapping[str, float]
    disclaimer: str = ""
    license: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    @property
    def error(self) -> bool:
        return False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RateTable":
        """Build a table from an upstream ``latest``/``historical`` response."""

        raw_rates = payload.get("rates")
        if not isinstance(raw_rates, Mapping):
            raise ValueError("Rate payload is missing a 'rates' mapping")
        raw_timestamp = payload.get("timestamp", 0)
        if isinstance(raw_timestamp, str):
            timestamp = datetime.fromisoformat(raw_timestamp)
        else:
            timestamp = datetime.fromtimestamp(int(raw_timestamp or 0), tz=timezone.utc)
        return cls(
            base=normalize_currency(str(payload.get("base", ""))),
            timestamp=timestamp,
            rates={str(code).upper(): float(rate) for code, rate in raw_rates.items()},
            disclaimer=str(payload.get("disclaimer", "")),
            license=str(payload.get("license", "")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "timestamp": self.timestamp.isoformat(),
            "rates": dict(self.rates),
            "disclaimer": self.disclaimer,
            "license": self.license,
        }


RateResult = Union[RateTable, UpstreamError]
CurrencyResult = Union[Dict[str, str], UpstreamError]


def parse_rate_payload(payload: Mapping[str, Any]) -> RateResult:
    """Split an upstream response into the ``RateTable | UpstreamError`` result."""

    if is_error_payload(payload):
        return UpstreamError.from_payload(payload)
    return RateTable.from_payload(payload)


def parse_currency_payload(payload: Mapping[str, Any]) -> CurrencyResult:
    if is_error_payload(payload):
        return UpstreamError.from_payload(payload)
    return {str(code).upper(): str(name) for code, name in payload.items()}


@dataclass(slots=True)
class TimeSeries:
    """Daily snapshots keyed by date; days that failed are simply absent."""

    base: str
    disclaimer: str = ""
    license: str = ""
    days: Dict[date, Dict[str, float]] = field(default_factory=dict)

    @property
    def error(self) -> bool:
        return False

    @property
    def start_date(self) -> date | None:
        return min(self.days) if self.days else None

    @property
    def end_date(self) -> date | None:
        return max(self.days) if self.days else None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "disclaimer": self.disclaimer,
            "license": self.license,
            "rates": {day.isoformat(): dict(rates) for day, rates in sorted(self.days.items())},
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TimeSeries":
        days = {
            date.fromisoformat(day): {code: float(rate) for code, rate in rates.items()}
            for day, rates in payload.get("rates", {}).items()
        }
        return cls(
            base=str(payload["base"]),
            disclaimer=str(payload.get("disclaimer", "")),
            license=str(payload.get("license", "")),
            days=dict(sorted(days.items())),
        )

    def to_frame(self) -> "pd.DataFrame":
        """Return the series as a DataFrame indexed by date, one column per currency."""

        import pandas as pd

        frame = pd.DataFrame.from_dict(self.days, orient="index")
        frame.index = pd.to_datetime(frame.index)
        frame.index.name = "date"
        return frame.sort_index().reindex(sorted(frame.columns), axis=1)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Detail record for a single conversion."""

    from_currency: str
    to_currency: str
    from_rate: float
    to_rate: float
    amount: float
    result: str


__all__ = [
    "ConversionResult",
    "CurrencyResult",
    "PlanTier",
    "RateResult",
    "RateTable",
    "RequestKind",
    "RequestShape",
    "TimeSeries",
    "UpstreamError",
    "is_error_payload",
    "normalize_currency",
    "parse_currency_payload",
    "parse_rate_payload",
]
