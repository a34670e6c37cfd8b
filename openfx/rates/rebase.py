"""Cross-rate arithmetic: rebasing anchor-quoted tables without network access."""

from __future__ import annotations

from openfx.errors import UnknownCurrencyError
from openfx.models import RateTable, normalize_currency


def convert_amount(amount: float, from_rate: float, to_rate: float) -> float:
    """Convert ``amount`` between two currencies quoted against a common anchor.

    A zero rate on either side means "no rate available" and yields ``0.0``.
    """

    if from_rate == 0 or to_rate == 0:
        return 0.0
    return amount / from_rate * to_rate


def format_amount(value: float, decimals: int) -> str:
    """Format ``value`` with thousands separators and ``decimals`` places."""

    if decimals < 0:
        raise ValueError("decimals must not be negative")
    return f"{value:,.{decimals}f}"


def rebase(table: RateTable, new_base: str) -> RateTable:
    """Return ``table`` re-quoted against ``new_base``.

    Uses the triangular identity ``rate(B->C) = rate(A->C) / rate(A->B)``; the
    new base itself is set to exactly ``1``.
    """

    new_base = normalize_currency(new_base)
    if new_base not in table.rates:
        raise UnknownCurrencyError(new_base)

    base_rate = table.rates[new_base]
    rates = {
        code: 1.0 if code == new_base else convert_amount(1, base_rate, rate)
        for code, rate in table.rates.items()
    }
    return RateTable(
        base=new_base,
        timestamp=table.timestamp,
        rates=rates,
        disclaimer=table.disclaimer,
        license=table.license,
    )


__all__ = ["convert_amount", "format_amount", "rebase"]
