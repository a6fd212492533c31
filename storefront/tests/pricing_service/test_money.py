from decimal import Decimal

import pytest

from storefront.pricing_service.app.money import (
    apply_percent,
    from_cents,
    psychological_price,
    round2,
    to_cents,
    to_decimal,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("2.675"), Decimal("2.68")),
        (Decimal("-2.675"), Decimal("-2.68")),
        (Decimal("2.674"), Decimal("2.67")),
        (Decimal("105"), Decimal("105.00")),
    ],
)
def test_round2_rounds_half_away_from_zero(value: Decimal, expected: Decimal) -> None:
    assert round2(value) == expected
    assert round2(value).as_tuple().exponent == -2


def test_to_decimal_avoids_binary_float_noise() -> None:
    assert to_decimal(0.1) == Decimal("0.1")
    assert round2(1.005) == Decimal("1.01")


def test_apply_percent_handles_markup_and_discount() -> None:
    assert apply_percent(Decimal("1000"), Decimal("-20")) == Decimal("800")
    assert apply_percent(Decimal("200"), Decimal("5")) == Decimal("210")


@pytest.mark.parametrize(
    ("price", "expected"),
    [
        (Decimal("120.00"), Decimal("120.99")),
        (Decimal("120.50"), Decimal("120.99")),
        (Decimal("120.99"), Decimal("120.99")),
        (Decimal("0.40"), Decimal("0.99")),
    ],
)
def test_psychological_price_floors_then_adds_99_cents(price: Decimal, expected: Decimal) -> None:
    assert psychological_price(price) == expected


def test_cents_conversion_rounds_to_nearest_cent() -> None:
    assert to_cents(Decimal("19.995")) == 2000
    assert from_cents(1999) == Decimal("19.99")
