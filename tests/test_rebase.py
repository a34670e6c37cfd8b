from __future__ import annotations

from datetime import datetime, timezone

import pytest

from openfx.errors import UnknownCurrencyError
from openfx.models import RateTable
from openfx.rates.rebase import convert_amount, format_amount, rebase


@pytest.fixture()
def usd_table() -> RateTable:
    return RateTable(
        base="USD",
        timestamp=datetime(2021, 1, 1, tzinfo=timezone.utc),
        rates={"USD": 1.0, "EUR": 0.9, "GBP": 0.8},
        disclaimer="disclaimer",
        license="license",
    )


def test_rebase_to_own_base_is_identity(usd_table: RateTable) -> None:
    assert rebase(usd_table, "USD") == usd_table
    assert rebase(usd_table, "USD").rates["USD"] == 1


def test_rebase_to_euro(usd_table: RateTable) -> None:
    rebased = rebase(usd_table, "EUR")

    assert rebased.base == "EUR"
    assert rebased.rates["EUR"] == 1.0
    assert rebased.rates["USD"] == pytest.approx(1.1111, abs=1e-4)
    assert rebased.rates["GBP"] == pytest.approx(0.8889, abs=1e-4)
    assert rebased.timestamp == usd_table.timestamp
    assert rebased.disclaimer == "disclaimer"
    assert rebased.license == "license"


@pytest.mark.parametrize("intermediate", ["EUR", "GBP"])
def test_rebase_round_trip(usd_table: RateTable, intermediate: str) -> None:
    restored = rebase(rebase(usd_table, intermediate), "USD")

    assert restored.base == "USD"
    assert restored.rates == pytest.approx(usd_table.rates)


def test_rebase_does_not_touch_input(usd_table: RateTable) -> None:
    before = dict(usd_table.rates)

    rebase(usd_table, "GBP")

    assert usd_table.rates == before
    assert usd_table.base == "USD"


def test_rebase_normalises_case(usd_table: RateTable) -> None:
    assert rebase(usd_table, " eur ").base == "EUR"


def test_rebase_unknown_currency(usd_table: RateTable) -> None:
    with pytest.raises(UnknownCurrencyError) as excinfo:
        rebase(usd_table, "CHF")
    assert excinfo.value.currency == "CHF"


def test_rebase_with_zero_rates_yields_zero() -> None:
    table = RateTable(
        base="USD",
        timestamp=datetime(2021, 1, 1, tzinfo=timezone.utc),
        rates={"USD": 1.0, "XAU": 0.0, "EUR": 0.9},
    )

    assert rebase(table, "EUR").rates["XAU"] == 0.0
    assert rebase(table, "XAU").rates == {"USD": 0.0, "XAU": 1.0, "EUR": 0.0}


@pytest.mark.parametrize("from_rate, to_rate", [(0, 1.2), (1.2, 0), (0, 0)])
def test_convert_amount_zero_guard(from_rate: float, to_rate: float) -> None:
    assert convert_amount(100, from_rate, to_rate) == 0.0


def test_convert_amount() -> None:
    assert convert_amount(90, 0.9, 0.8) == pytest.approx(80.0)


def test_format_amount() -> None:
    assert format_amount(1234.5678, 2) == "1,234.57"
    assert format_amount(3, 0) == "3"
    with pytest.raises(ValueError):
        format_amount(1, -1)


def test_rate_table_copies_and_freezes_rates() -> None:
    source = {"USD": 1.0, "EUR": 0.9}
    table = RateTable(base="USD", timestamp=datetime(2021, 1, 1, tzinfo=timezone.utc), rates=source)
    source["EUR"] = 5.0

    assert table.rates["EUR"] == 0.9
    with pytest.raises(TypeError):
        table.rates["GBP"] = 0.8  # type: ignore[index]
