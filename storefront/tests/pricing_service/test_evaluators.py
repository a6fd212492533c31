from datetime import date, timedelta
from decimal import Decimal

import pytest

from storefront.pricing_service.app.domain import Category, PricingRule, Product, RuleType
from storefront.pricing_service.app.errors import NoActiveRules
from storefront.pricing_service.app.evaluators import (
    active_rules_by_priority,
    plan_rule_changes,
    simulate_price,
)
from storefront.pricing_service.app.tax_config import TaxConfiguration

TODAY = date(2026, 10, 19)


def _expiring_rule(rule_id: int, *, priority: int, days: int, percent: str, **overrides) -> PricingRule:
    fields = {
        "id": rule_id,
        "name": f"Expiring within {days} days",
        "rule_type": RuleType.EXPIRATION_BASED,
        "adjustment_percent": Decimal(percent),
        "priority": priority,
        "condition_days": days,
    }
    fields.update(overrides)
    return PricingRule(**fields)


def _product(price: str = "1000.00", days_left: int | None = 3) -> Product:
    expiration = TODAY + timedelta(days=days_left) if days_left is not None else None
    return Product(id=1, category=Category.FRESH, selling_price=Decimal(price), expiration_date=expiration)


RULE_B = _expiring_rule(2, priority=5, days=10, percent="-10")
RULE_A = _expiring_rule(1, priority=10, days=5, percent="-20")


def test_priority_sort_is_descending_and_stable() -> None:
    first = _expiring_rule(1, priority=5, days=3, percent="-5")
    second = _expiring_rule(2, priority=9, days=3, percent="-5")
    third = _expiring_rule(3, priority=5, days=3, percent="-5")
    inactive = _expiring_rule(4, priority=99, days=3, percent="-5", is_active=False)

    ordered = active_rules_by_priority([first, second, third, inactive])

    assert [rule.id for rule in ordered] == [2, 1, 3]


def test_plan_uses_only_highest_priority_match() -> None:
    planned = plan_rule_changes([_product()], [RULE_B, RULE_A], TODAY)

    assert len(planned) == 1
    assert planned[0].rule.id == RULE_A.id
    assert planned[0].new_price == Decimal("800.00")


def test_plan_skips_products_without_match_or_price_change() -> None:
    zero = _expiring_rule(3, priority=1, days=30, percent="0")
    far_off = _product(days_left=60)
    unchanged = _product(days_left=20)

    assert plan_rule_changes([far_off, unchanged], [RULE_A, zero], TODAY) == []


def test_plan_without_active_rules_fails() -> None:
    inactive = _expiring_rule(1, priority=1, days=5, percent="-20", is_active=False)

    with pytest.raises(NoActiveRules):
        plan_rule_changes([_product()], [inactive], TODAY)


def test_simulate_compounds_every_matching_rule() -> None:
    result = simulate_price(
        Decimal("1000"),
        Category.FRESH,
        [RULE_A, RULE_B],
        TaxConfiguration(vat_rate_percent=Decimal("12")),
        days_to_expiry=3,
    )

    assert result.adjusted_price == Decimal("720.00")
    assert result.vat_inclusive_price == Decimal("806.40")
    assert result.senior_pwd_price == Decimal("576.00")
    assert result.applied_rule_ids == [RULE_A.id, RULE_B.id]


def test_simulate_and_apply_disagree_when_two_rules_match() -> None:
    applied = plan_rule_changes([_product()], [RULE_A, RULE_B], TODAY)[0].new_price
    simulated = simulate_price(
        Decimal("1000"),
        Category.FRESH,
        [RULE_A, RULE_B],
        TaxConfiguration(),
        days_to_expiry=3,
    ).adjusted_price

    assert applied == Decimal("800.00")
    assert simulated == Decimal("720.00")
    assert applied != simulated


def test_simulate_ignores_inert_inactive_and_other_category_rules() -> None:
    rules = [
        _expiring_rule(1, priority=1, days=5, percent="-20", is_active=False),
        _expiring_rule(2, priority=1, days=5, percent="-20", applies_to_category="frozen"),
        _expiring_rule(3, priority=1, days=None, percent="-20", rule_type=RuleType.DEMAND_BASED),
    ]

    result = simulate_price(Decimal("50"), Category.FRESH, rules, TaxConfiguration(), days_to_expiry=1)

    assert result.adjusted_price == Decimal("50.00")
    assert result.applied_rule_ids == []


def test_simulate_without_days_to_expiry_skips_expiration_rules() -> None:
    result = simulate_price(Decimal("1000"), Category.FRESH, [RULE_A], TaxConfiguration())

    assert result.adjusted_price == Decimal("1000.00")


@pytest.mark.parametrize("days_to_expiry", [-3_000_000, 3_000_000, -10**12, 10**12])
def test_simulate_handles_days_beyond_calendar_range(days_to_expiry: int) -> None:
    result = simulate_price(
        Decimal("100"), Category.FRESH, [RULE_A], TaxConfiguration(), days_to_expiry=days_to_expiry
    )

    expected = Decimal("80.00") if days_to_expiry < 0 else Decimal("100.00")
    assert result.adjusted_price == expected


def test_simulate_overlay_uses_unrounded_adjusted_price() -> None:
    half_percent_off = _expiring_rule(5, priority=1, days=5, percent="-0.5")

    result = simulate_price(
        Decimal("1.00"), Category.FRESH, [half_percent_off], TaxConfiguration(), days_to_expiry=1
    )

    assert result.adjusted_price == Decimal("1.00")
    assert result.vat_inclusive_price == Decimal("1.11")
    assert result.senior_pwd_price == Decimal("0.80")


def test_plan_skips_rules_for_unknown_categories() -> None:
    retired = _expiring_rule(6, priority=50, days=5, percent="-50", applies_to_category="bakery")

    planned = plan_rule_changes([_product()], [retired, RULE_A], TODAY)

    assert [change.rule.id for change in planned] == [RULE_A.id]
