"""Restricting rate tables to a requested set of currencies."""

from __future__ import annotations

from typing import Iterable, Mapping

from openfx.models import RateTable, normalize_currency


def parse_symbols(value: str | Iterable[str] | None) -> tuple[str, ...] | None:
    """Normalise a comma separated string or iterable of codes.

    Returns ``None`` when no filter is requested.
    """

    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else list(value)
    symbols: list[str] = []
    for item in items:
        if not item or not item.strip():
            continue
        code = normalize_currency(item)
        if code not in symbols:
            symbols.append(code)
    return tuple(symbols) or None


def filter_symbols(rates: Mapping[str, float], symbols: Iterable[str]) -> dict[str, float]:
    """Keep only the currencies listed in ``symbols``.

    Requested symbols that ``rates`` does not quote are ignored.
    """

    wanted = set(symbols)
    return {code: rate for code, rate in rates.items() if code in wanted}


def filter_table(table: RateTable, symbols: Iterable[str]) -> RateTable:
    return RateTable(
        base=table.base,
        timestamp=table.timestamp,
        rates=filter_symbols(table.rates, symbols),
        disclaimer=table.disclaimer,
        license=table.license,
    )


__all__ = ["filter_symbols", "filter_table", "parse_symbols"]
