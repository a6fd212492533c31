from decimal import Decimal

from storefront.pricing_service.app.overlay import overlay
from storefront.pricing_service.app.tax_config import TaxConfiguration


def test_vat_inclusive_price_and_statutory_senior_discount() -> None:
    config = TaxConfiguration(vat_rate_percent=Decimal("12"), vat_inclusive=True, senior_pwd_discount_enabled=True)

    result = overlay(Decimal("100"), config)

    assert result.vat_inclusive_price == Decimal("112.00")
    assert result.senior_pwd_price == Decimal("80.00")


def test_vat_exclusive_config_leaves_price_untouched() -> None:
    config = TaxConfiguration(vat_rate_percent=Decimal("12"), vat_inclusive=False, senior_pwd_discount_enabled=True)

    result = overlay(Decimal("100"), config)

    assert result.vat_inclusive_price == Decimal("100.00")
    assert result.senior_pwd_price == Decimal("80.00")


def test_senior_discount_disabled_yields_no_price() -> None:
    config = TaxConfiguration(senior_pwd_discount_enabled=False)

    assert overlay(Decimal("59.90"), config).senior_pwd_price is None


def test_withholding_tax_does_not_affect_prices() -> None:
    base = TaxConfiguration(vat_rate_percent=Decimal("12"))
    withholding = base.model_copy(
        update={"withholding_tax_enabled": True, "withholding_tax_rate_percent": Decimal("2")}
    )

    assert overlay(Decimal("250"), withholding) == overlay(Decimal("250"), base)
