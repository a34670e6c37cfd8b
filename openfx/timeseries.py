"""Sequential, throttled assembly of multi-day rate series."""

from __future__ import annotations

import time
from datetime import date
from typing import Callable, Sequence

from openfx.cache.safe import SafeCache
from openfx.cache.serialization import dump_time_series, load_time_series
from openfx.errors import FetchError, UnknownCurrencyError
from openfx.models import RateResult, RequestKind, RequestShape, TimeSeries, UpstreamError
from openfx.utils.date_range import daily_range, parse_date
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_THROTTLE_SECONDS = 0.2


class TimeSeriesAssembler:
    """Build a :class:`TimeSeries` one historical request at a time.

    ``fetch_day`` is the uncached single-day path of the client. Days whose
    fetch returns an upstream error, fails in transport or cannot be rebased
    are left out of the result. ``delay_seconds`` is waited between consecutive
    requests to stay within the upstream request quota; days are never fetched
    concurrently.
    """

    def __init__(
        self,
        fetch_day: Callable[[date], RateResult],
        *,
        cache: SafeCache | None = None,
        delay_seconds: float = DEFAULT_THROTTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self._fetch_day = fetch_day
        self._cache = cache or SafeCache(None)
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def assemble(
        self,
        start: str | date,
        end: str | date,
        *,
        base: str,
        symbols: Sequence[str] | None = None,
        disclaimer: str = "",
        license: str = "",
        skip_cache: bool = False,
    ) -> TimeSeries:
        start_date = parse_date(start)
        end_date = parse_date(end)
        days = list(daily_range(start_date, end_date))
        shape = RequestShape(
            kind=RequestKind.TIME_SERIES,
            base=base,
            symbols=tuple(symbols) if symbols else None,
            date=start_date,
            end_date=end_date,
        )

        if not skip_cache:
            cached = self._cache.read(shape, load_time_series)
            if cached is not None:
                return cached

        series = TimeSeries(base=base, disclaimer=disclaimer, license=license)
        for index, day in enumerate(days):
            if index and self.delay_seconds:
                self._sleep(self.delay_seconds)
            try:
                result = self._fetch_day(day)
            except (FetchError, UnknownCurrencyError) as exc:
                LOGGER.warning("Omitting %s from series: %s", day, exc)
                continue
            if isinstance(result, UpstreamError):
                LOGGER.warning("Omitting %s from series: upstream error %s", day, result.message)
                continue
            series.days[day] = dict(result.rates)
            if not series.disclaimer:
                series.disclaimer = result.disclaimer
            if not series.license:
                series.license = result.license

        LOGGER.info(
            "Assembled series %s → %s: %s of %s days",
            start_date,
            end_date,
            len(series.days),
            len(days),
        )
        if series.days and not skip_cache:
            self._cache.write(shape, series, dump_time_series)
        return series


__all__ = ["DEFAULT_THROTTLE_SECONDS", "TimeSeriesAssembler"]
