from __future__ import annotations

from datetime import date

import pytest

from openfx.cache.keys import CacheKeyBuilder
from openfx.models import RequestKind, RequestShape


@pytest.fixture()
def builder() -> CacheKeyBuilder:
    return CacheKeyBuilder()


def test_key_is_stable(builder: CacheKeyBuilder) -> None:
    shape = RequestShape(kind=RequestKind.LATEST, base="EUR", symbols=("GBP", "USD"))

    assert builder.build(shape) == builder.build(
        RequestShape(kind=RequestKind.LATEST, base="EUR", symbols=("GBP", "USD"))
    )


def test_symbol_order_does_not_change_key(builder: CacheKeyBuilder) -> None:
    first = RequestShape(kind=RequestKind.HISTORICAL, base="EUR", symbols=("USD", "GBP", "JPY"), date=date(2021, 1, 1))
    second = RequestShape(kind=RequestKind.HISTORICAL, base="EUR", symbols=("JPY", "USD", "GBP"), date=date(2021, 1, 1))

    assert builder.build(first) == builder.build(second)


def test_key_carries_prefix_and_kind(builder: CacheKeyBuilder) -> None:
    key = builder.build(RequestShape(kind=RequestKind.CURRENCIES, base="USD"))

    assert key.startswith("openfx_currencies__")
    assert len(key.split("__", 1)[1]) == 64


def test_custom_prefix() -> None:
    key = CacheKeyBuilder(prefix="OER").build(RequestShape(kind=RequestKind.LATEST, base="USD"))

    assert key.startswith("OER_latest__")


def test_distinct_shapes_do_not_collide(builder: CacheKeyBuilder) -> None:
    base_shape = dict(kind=RequestKind.HISTORICAL, base="EUR", symbols=("GBP",), date=date(2021, 1, 1))
    variants = [
        RequestShape(**base_shape),
        RequestShape(**{**base_shape, "kind": RequestKind.LATEST}),
        RequestShape(**{**base_shape, "base": "USD"}),
        RequestShape(**{**base_shape, "symbols": ("GBP", "JPY")}),
        RequestShape(**{**base_shape, "symbols": None}),
        RequestShape(**{**base_shape, "date": date(2021, 1, 2)}),
        RequestShape(**{**base_shape, "kind": RequestKind.TIME_SERIES, "end_date": date(2021, 1, 5)}),
    ]

    keys = {builder.build(shape) for shape in variants}

    assert len(keys) == len(variants)


def test_shape_fields_are_normalised(builder: CacheKeyBuilder) -> None:
    lower = RequestShape(kind=RequestKind.LATEST, base=" eur", symbols=("gbp", "usd"))
    upper = RequestShape(kind=RequestKind.LATEST, base="EUR", symbols=("USD", "GBP"))

    assert lower.base == "EUR"
    assert lower.symbols == ("GBP", "USD")
    assert builder.build(lower) == builder.build(upper)
    assert RequestShape(kind=RequestKind.LATEST, base="EUR", symbols=()).symbols is None
