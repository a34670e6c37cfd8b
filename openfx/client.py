"""Rate client orchestrating fetch, normalization and caching."""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from openfx.cache.base_store import CacheStore
from openfx.cache.keys import CacheKeyBuilder
from openfx.cache.safe import SafeCache
from openfx.cache.serialization import (
    dump_currencies,
    dump_rate_table,
    load_currencies,
    load_rate_table,
)
from openfx.config import ClientConfig
from openfx.errors import AuthenticationError, FetchError, UnknownCurrencyError
from openfx.fetcher import (
    ROUTE_CURRENCIES,
    ROUTE_LATEST,
    Fetcher,
    RequestsFetcher,
    build_url,
    historical_route,
    redact,
)
from openfx.models import (
    ConversionResult,
    CurrencyResult,
    PlanTier,
    RateResult,
    RateTable,
    RequestKind,
    RequestShape,
    TimeSeries,
    UpstreamError,
    normalize_currency,
    parse_currency_payload,
    parse_rate_payload,
)
from openfx.rates.plan import DEFAULT_ANCHOR, PlanPolicy
from openfx.rates.rebase import convert_amount, format_amount, rebase
from openfx.rates.symbols import filter_table, parse_symbols
from openfx.timeseries import DEFAULT_THROTTLE_SECONDS, TimeSeriesAssembler
from openfx.utils.date_range import parse_date
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RateClient:
    """Exchange rates in any base currency, whatever the account plan.

    Construction probes the upstream with the requested base to decide once
    whether the plan accepts arbitrary bases (:attr:`PlanTier.CAPABLE`) or
    whether rebasing and symbol filtering have to happen locally
    (:attr:`PlanTier.EMULATED`). An ``invalid_app_id`` probe raises
    :class:`AuthenticationError` and no client is created.

    Upstream error payloads are returned as :class:`UpstreamError` values
    rather than raised. Session tables are only replaced by successful
    fetches.
    """

    __slots__ = (
        "_app_id",
        "_protocol",
        "_anchor",
        "_base",
        "_symbols",
        "_fetcher",
        "_owns_fetcher",
        "_cache",
        "_tier",
        "_latest_rates",
        "_historical_rates",
        "_currencies",
        "_disclaimer",
        "_license",
        "_assembler",
    )

    def __init__(
        self,
        app_id: str,
        *,
        base: str = DEFAULT_ANCHOR,
        symbols: str | Iterable[str] | None = None,
        cache: CacheStore | SafeCache | None = None,
        fetcher: Fetcher | None = None,
        protocol: str = "https",
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
        anchor: str = DEFAULT_ANCHOR,
        key_builder: CacheKeyBuilder | None = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = 10.0,
    ) -> None:
        if not app_id or not str(app_id).strip():
            raise AuthenticationError("app_id must be defined")
        self._app_id = str(app_id).strip()
        self._protocol = protocol.lower()
        self._anchor = normalize_currency(anchor)
        self._base = normalize_currency(base)
        self._symbols = parse_symbols(symbols)
        self._owns_fetcher = fetcher is None
        self._fetcher: Fetcher = fetcher if fetcher is not None else RequestsFetcher(timeout=timeout)
        self._cache = cache if isinstance(cache, SafeCache) else SafeCache(cache, key_builder)
        self._latest_rates: RateTable | None = None
        self._historical_rates: RateTable | None = None
        self._currencies: CurrencyResult | None = None
        self._disclaimer = ""
        self._license = ""
        self._assembler = TimeSeriesAssembler(
            self._fetch_historical,
            cache=self._cache,
            delay_seconds=throttle_seconds,
            sleep=sleep,
        )

        try:
            self._bootstrap()
        except BaseException:
            self.close()
            raise

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        fetcher: Fetcher | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "RateClient":
        """Build a client (and its cache store) from :class:`ClientConfig`."""

        store = config.build_cache_store()
        try:
            return cls(
                config.app_id,
                base=config.base,
                symbols=config.symbols,
                cache=store,
                fetcher=fetcher,
                protocol=config.protocol,
                throttle_seconds=config.throttle_seconds,
                sleep=sleep,
                timeout=config.timeout,
            )
        except BaseException:
            if store is not None:
                store.close()
            raise

    # Operations ----------------------------------------------------------
    def get_latest_rates(
        self,
        base: str | None = None,
        reset_base: bool = True,
        skip_cache: bool = False,
    ) -> RateResult:
        """Return the latest rates in ``base`` (defaults to the session base).

        With ``reset_base=False`` an emulated client returns the anchor-quoted
        table untouched.
        """

        effective_base = normalize_currency(base) if base else self._base
        target_base = effective_base
        if self._tier is PlanTier.EMULATED and not reset_base:
            target_base = self._anchor
        shape = RequestShape(
            kind=RequestKind.LATEST,
            base=target_base,
            symbols=self._symbols,
            date=self._today(),
        )
        if not skip_cache:
            cached = self._cache.read(shape, load_rate_table)
            if cached is not None:
                self._latest_rates = cached
                return cached

        if self._tier is PlanTier.CAPABLE:
            result = self._request_latest(effective_base, symbols=self._symbols)
        else:
            result = self._normalize(self._request_latest(self._anchor), target_base)

        if isinstance(result, RateTable):
            self._latest_rates = result
            if not skip_cache:
                self._cache.write(shape, result, dump_rate_table)
        return result

    def get_historical(self, day: str | date, skip_cache: bool = False) -> RateResult:
        """Return the rates published for ``day`` (``YYYY-MM-DD`` or :class:`date`)."""

        rate_date = parse_date(day)
        shape = RequestShape(
            kind=RequestKind.HISTORICAL,
            base=self._base,
            symbols=self._symbols,
            date=rate_date,
        )
        if not skip_cache:
            cached = self._cache.read(shape, load_rate_table)
            if cached is not None:
                self._historical_rates = cached
                return cached

        result = self._fetch_historical(rate_date)
        if isinstance(result, RateTable):
            self._historical_rates = result
            if not skip_cache:
                self._cache.write(shape, result, dump_rate_table)
        return result

    def get_all_currencies(self, skip_cache: bool = False) -> CurrencyResult:
        """Return the ``{code: name}`` catalog, memoized for the session."""

        if isinstance(self._currencies, dict):
            return dict(self._currencies)

        shape = RequestShape(kind=RequestKind.CURRENCIES, base=self._anchor)
        if not skip_cache:
            cached = self._cache.read(shape, load_currencies)
            if cached is not None:
                self._currencies = cached
                return dict(cached)

        url = build_url(ROUTE_CURRENCIES, app_id=self._app_id, protocol=self._protocol)
        payload = self._fetch(url)
        try:
            result = parse_currency_payload(payload)
        except (AttributeError, TypeError, ValueError) as exc:
            raise FetchError(f"Malformed currency payload: {exc}", url=redact(url, self._app_id)) from exc

        self._currencies = result
        if isinstance(result, dict):
            if not skip_cache:
                self._cache.write(shape, result, dump_currencies)
            return dict(result)
        return result

    def get_time_series(
        self,
        start: str | date,
        end: str | date,
        skip_cache: bool = False,
    ) -> TimeSeries:
        """Return daily snapshots for ``[start, end)``; failed days are omitted."""

        start_date = parse_date(start)
        end_date = parse_date(end)
        return self._assembler.assemble(
            start_date,
            end_date,
            base=self._base,
            symbols=self._symbols,
            disclaimer=self._disclaimer,
            license=self._license,
            skip_cache=skip_cache,
        )

    def convert(
        self,
        from_currency: str,
        to_currency: str,
        amount: float,
        decimals: int | None = 2,
        from_rate: float | None = None,
        to_rate: float | None = None,
    ) -> ConversionResult | float:
        """Convert ``amount`` using the session latest rates or explicit overrides.

        ``decimals=None`` returns the raw float instead of a detail record.
        """

        from_code = normalize_currency(from_currency)
        to_code = normalize_currency(to_currency)
        if from_rate is None or to_rate is None:
            table = self._session_latest()
            if from_rate is None:
                from_rate = self._lookup(table, from_code)
            if to_rate is None:
                to_rate = self._lookup(table, to_code)

        value = convert_amount(amount, from_rate, to_rate)
        if decimals is None or decimals is False:
            return value
        return ConversionResult(
            from_currency=from_code,
            to_currency=to_code,
            from_rate=from_rate,
            to_rate=to_rate,
            amount=amount,
            result=format_amount(value, int(decimals)),
        )

    def get_rate(self, currency: str, base: str | None = None) -> float:
        """Return how many ``currency`` units one ``base`` unit buys."""

        table = self._session_latest()
        code = normalize_currency(currency)
        base_code = normalize_currency(base) if base else table.base
        return convert_amount(1, self._lookup(table, base_code), self._lookup(table, code))

    # Session state -------------------------------------------------------
    def set_base_currency(self, base: str, table: RateTable | None = None) -> RateTable | None:
        """Record ``base`` as the session base.

        Emulated clients return ``table`` rebased to ``base`` (the argument is
        left untouched; rebind your reference). Capable clients return it as is.
        """

        new_base = normalize_currency(base)
        self._base = new_base
        if self._tier is PlanTier.EMULATED and table is not None:
            return rebase(table, new_base)
        return table

    def set_symbols(self, symbols: str | Iterable[str] | None) -> None:
        self._symbols = parse_symbols(symbols)

    def get_symbols(self) -> tuple[str, ...] | None:
        return self._symbols

    def get_base_currency(self) -> str:
        return self._base

    def request_base(self) -> str:
        """Base currency actually sent upstream for rate requests."""

        return self._base if self._tier is PlanTier.CAPABLE else self._anchor

    def get_disclaimer(self) -> str:
        return self._disclaimer

    def get_license(self) -> str:
        return self._license

    @property
    def tier(self) -> PlanTier:
        return self._tier

    @property
    def anchor(self) -> str:
        return self._anchor

    @property
    def latest_rates(self) -> RateTable | None:
        return self._latest_rates

    @property
    def historical_rates(self) -> RateTable | None:
        return self._historical_rates

    @property
    def currencies(self) -> CurrencyResult | None:
        return self._currencies

    def close(self) -> None:
        if self._owns_fetcher and hasattr(self._fetcher, "close"):
            self._fetcher.close()
        self._cache.close()

    def __enter__(self) -> "RateClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Internals -----------------------------------------------------------
    def _bootstrap(self) -> None:
        """Probe the plan tier, then seed the latest table and currency catalog."""

        probe = self._request_latest(self._base)
        self._tier = PlanPolicy(anchor=self._anchor).determine(probe, self._base)
        LOGGER.info("Using %s plan tier for base %s", self._tier.value, self._base)

        if isinstance(probe, RateTable) and probe.base == self._base and not self._symbols:
            self._latest_rates = probe
        else:
            self.get_latest_rates()
        if self._latest_rates is not None:
            self._disclaimer = self._latest_rates.disclaimer
            self._license = self._latest_rates.license
        self.get_all_currencies()

    @staticmethod
    def _today() -> date:
        return datetime.now(timezone.utc).date()

    def _fetch(self, url: str) -> Mapping[str, Any]:
        LOGGER.debug("GET %s", redact(url, self._app_id))
        return self._fetcher.fetch(url)

    def _parse_rates(self, payload: Mapping[str, Any], url: str) -> RateResult:
        try:
            return parse_rate_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"Malformed rate payload: {exc}", url=redact(url, self._app_id)) from exc

    def _request_latest(self, base: str, symbols: Iterable[str] | None = None) -> RateResult:
        url = build_url(
            ROUTE_LATEST,
            app_id=self._app_id,
            protocol=self._protocol,
            base=base,
            symbols=symbols,
        )
        return self._parse_rates(self._fetch(url), url)

    def _fetch_historical(self, day: date) -> RateResult:
        """Uncached single-day path shared with the time-series assembler."""

        capable = self._tier is PlanTier.CAPABLE
        url = build_url(
            historical_route(day),
            app_id=self._app_id,
            protocol=self._protocol,
            base=self.request_base(),
            symbols=self._symbols if capable else None,
        )
        result = self._parse_rates(self._fetch(url), url)
        if capable:
            return result
        return self._normalize(result, self._base)

    def _normalize(self, result: RateResult, target_base: str) -> RateResult:
        """Apply local rebasing and symbol filtering for emulated plans."""

        if isinstance(result, UpstreamError):
            return result
        table = result
        if table.base != target_base:
            table = rebase(table, target_base)
        if self._symbols:
            table = filter_table(table, self._symbols)
        return table

    def _session_latest(self) -> RateTable:
        if self._latest_rates is None:
            self.get_latest_rates()
        if self._latest_rates is None:
            raise UnknownCurrencyError(self._base)
        return self._latest_rates

    @staticmethod
    def _lookup(table: RateTable, code: str) -> float:
        if code in table.rates:
            return table.rates[code]
        if code == table.base:
            return 1.0
        raise UnknownCurrencyError(code)


__all__ = ["RateClient"]
