"""Shared fixtures: an in-memory stand-in for the upstream API."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable
from urllib.parse import parse_qsl, urlparse

import pytest

ANCHOR_RATES: Dict[str, float] = {"USD": 1.0, "EUR": 0.9, "GBP": 0.8, "JPY": 110.0}
CURRENCY_NAMES: Dict[str, str] = {
    "USD": "United States Dollar",
    "EUR": "Euro",
    "GBP": "British Pound Sterling",
    "JPY": "Japanese Yen",
}
DISCLAIMER = "Usage subject to terms"
LICENSE = "Data sourced from various providers"


def error_payload(message: str, status: int = 403, description: str = "") -> Dict[str, Any]:
    return {"error": True, "status": status, "message": message, "description": description}


class FakeFetcher:
    """Answers ``latest``/``historical``/``currencies`` URLs like the upstream.

    ``capable=False`` rejects any non-USD base with ``not_allowed``.
    ``overrides`` maps a route (``"latest.json"``, ``"historical/2021-01-02.json"``)
    to a payload or to an exception instance to raise.
    """

    def __init__(
        self,
        *,
        capable: bool = False,
        rates: Dict[str, float] | None = None,
        overrides: Dict[str, Any] | None = None,
    ) -> None:
        self.capable = capable
        self.rates = dict(rates or ANCHOR_RATES)
        self.overrides: Dict[str, Any] = dict(overrides or {})
        self.calls: list[str] = []

    def routes(self) -> list[str]:
        return [self._route(url) for url in self.calls]

    def params(self, index: int = -1) -> Dict[str, str]:
        return dict(parse_qsl(urlparse(self.calls[index]).query))

    @staticmethod
    def _route(url: str) -> str:
        return urlparse(url).path.split("/api/", 1)[1]

    def fetch(self, url: str) -> Dict[str, Any]:
        self.calls.append(url)
        route = self._route(url)
        if route in self.overrides:
            override = self.overrides[route]
            if isinstance(override, Exception):
                raise override
            if callable(override):
                return override(url)
            return override
        if route == "currencies.json":
            return dict(CURRENCY_NAMES)

        params = dict(parse_qsl(urlparse(url).query))
        base = params.get("base", "USD")
        if base != "USD" and not self.capable:
            return error_payload("not_allowed", description="Changing the base is not allowed")
        rates = {code: rate / self.rates[base] for code, rate in self.rates.items()}
        if base != "USD":
            rates[base] = 1.0
        symbols = params.get("symbols")
        if symbols:
            wanted = set(symbols.split(","))
            rates = {code: rate for code, rate in rates.items() if code in wanted}
        return {
            "disclaimer": DISCLAIMER,
            "license": LICENSE,
            "timestamp": 1609459200,
            "base": base,
            "rates": rates,
        }


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def make_client(sleeper: RecordingSleep) -> Callable[..., Any]:
    from openfx.client import RateClient

    def _factory(fetcher: FakeFetcher, *, base: str = "USD", symbols: Iterable[str] | str | None = None, **kwargs: Any):
        kwargs.setdefault("sleep", sleeper)
        return RateClient("test-app-id", base=base, symbols=symbols, fetcher=fetcher, **kwargs)

    return _factory
