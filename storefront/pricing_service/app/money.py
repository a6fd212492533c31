"""Decimal helpers for prices and percentages."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
PSYCHOLOGICAL_ENDING = Decimal("0.99")


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` without inheriting binary float noise."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round2(value: Number) -> Decimal:
    """Round half away from zero to two decimal places."""

    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_multiplier(percent: Number) -> Decimal:
    return 1 + to_decimal(percent) / HUNDRED


def apply_percent(price: Number, percent: Number) -> Decimal:
    """Return ``price * (1 + percent/100)`` unrounded."""

    return to_decimal(price) * percent_multiplier(percent)


def psychological_price(price: Number) -> Decimal:
    """Floor to the whole unit, then add .99 (120.00 -> 120.99, 120.50 -> 120.99)."""

    return to_decimal(price).to_integral_value(rounding=ROUND_FLOOR) + PSYCHOLOGICAL_ENDING


def to_cents(amount: Number) -> int:
    quantized = (to_decimal(amount) * HUNDRED).to_integral_value(rounding=ROUND_HALF_UP)
    return int(quantized)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / HUNDRED).quantize(CENT)
