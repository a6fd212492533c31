"""VAT and senior/PWD discount overlay on a rule-adjusted price."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from .money import Number, percent_multiplier, round2, to_decimal
from .tax_config import TaxConfiguration

# Statutory senior citizen / PWD discount; fixed by law, not configuration.
SENIOR_PWD_DISCOUNT_RATE: Final = Decimal("0.20")


@dataclass(frozen=True, slots=True)
class OverlayResult:
    vat_inclusive_price: Decimal
    senior_pwd_price: Decimal | None


def overlay(final_price: Number, config: TaxConfiguration) -> OverlayResult:
    price = to_decimal(final_price)
    if config.vat_inclusive:
        vat_inclusive_price = round2(price * percent_multiplier(config.vat_rate_percent))
    else:
        vat_inclusive_price = round2(price)

    senior_pwd_price = None
    if config.senior_pwd_discount_enabled:
        senior_pwd_price = round2(price * (1 - SENIOR_PWD_DISCOUNT_RATE))
    return OverlayResult(vat_inclusive_price=vat_inclusive_price, senior_pwd_price=senior_pwd_price)
