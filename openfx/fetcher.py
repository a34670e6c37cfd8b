"""HTTP transport for the OpenExchangeRates-style upstream."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Protocol
from urllib.parse import urlencode

import requests

from openfx.errors import FetchError
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)

API_HOST = "openexchangerates.org/api"
ROUTE_LATEST = "latest.json"
ROUTE_CURRENCIES = "currencies.json"
ROUTE_HISTORICAL = "historical/{day}.json"
SUPPORTED_PROTOCOLS = ("http", "https")


class Fetcher(Protocol):
    """Contract for retrieving one decoded JSON document."""

    def fetch(self, url: str) -> Dict[str, Any]:
        ...  # pragma: no cover - protocol definition


def build_url(
    route: str,
    *,
    app_id: str,
    protocol: str = "https",
    base: str | None = None,
    symbols: Iterable[str] | None = None,
) -> str:
    """Return the full upstream URL for ``route`` with query parameters."""

    if protocol not in SUPPORTED_PROTOCOLS:
        raise ValueError(f"protocol must be one of {SUPPORTED_PROTOCOLS}")
    params: list[tuple[str, str]] = [("app_id", app_id)]
    if base:
        params.append(("base", base))
    if symbols:
        params.append(("symbols", ",".join(symbols)))
    return f"{protocol}://{API_HOST}/{route}?{urlencode(params, safe=',')}"


def historical_route(day: date) -> str:
    return ROUTE_HISTORICAL.format(day=day.isoformat())


def redact(url: str, app_id: str) -> str:
    """Hide the credential when a URL is logged."""

    return url.replace(app_id, "***") if app_id else url


class RequestsFetcher:
    """Fetch JSON documents with a shared :class:`requests.Session`.

    The upstream reports failures as JSON bodies with 4xx status codes, so any
    response carrying a JSON object is returned to the caller; only connection
    failures and non-JSON bodies raise :class:`FetchError`. Nothing is retried.
    """

    def __init__(self, *, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def fetch(self, url: str) -> Dict[str, Any]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"Request failed: {exc}", url=url) from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(
                f"Upstream responded with HTTP {response.status_code} and a non-JSON body",
                url=url,
            ) from exc
        if not isinstance(payload, dict):
            raise FetchError("Upstream JSON body is not an object", url=url)
        return payload

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestsFetcher":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = [
    "API_HOST",
    "Fetcher",
    "ROUTE_CURRENCIES",
    "ROUTE_HISTORICAL",
    "ROUTE_LATEST",
    "RequestsFetcher",
    "build_url",
    "historical_route",
    "redact",
]
