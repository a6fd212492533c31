"""Rule evaluation for the catalog apply path and the calculator preview.

The two paths deliberately disagree when several rules match the same
product: apply takes only the highest-priority match, simulate compounds
every match in rule-list order. The calculator has always shown compounded
figures, so the preview keeps that behaviour.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .domain import Category, PricingRule, Product, RuleType
from .errors import NoActiveRules
from .matcher import category_matches, expiration_condition_met, matches
from .money import Number, percent_multiplier, round2, to_decimal
from .overlay import overlay
from .tax_config import TaxConfiguration


@dataclass(frozen=True, slots=True)
class PlannedChange:
    product: Product
    rule: PricingRule
    new_price: Decimal


@dataclass(frozen=True, slots=True)
class SimulationResult:
    adjusted_price: Decimal
    vat_inclusive_price: Decimal
    senior_pwd_price: Decimal | None
    applied_rule_ids: list[int | None] = field(default_factory=list)


def active_rules_by_priority(rules: Iterable[PricingRule]) -> list[PricingRule]:
    """Active rules, highest priority first; ties keep their store order."""

    return sorted((rule for rule in rules if rule.is_active), key=lambda rule: rule.priority, reverse=True)


def first_matching_rule(product: Product, ordered_rules: Sequence[PricingRule], today: date) -> PricingRule | None:
    for rule in ordered_rules:
        if matches(rule, product, today):
            return rule
    return None


def plan_rule_changes(
    products: Iterable[Product],
    rules: Iterable[PricingRule],
    today: date,
) -> list[PlannedChange]:
    """Pick the first matching rule per product and compute its new price.

    Products with no matching rule, or whose price would not move, are left
    out of the plan.
    """

    ordered = active_rules_by_priority(rules)
    if not ordered:
        raise NoActiveRules()

    planned: list[PlannedChange] = []
    for product in products:
        rule = first_matching_rule(product, ordered, today)
        if rule is None:
            continue
        new_price = round2(product.selling_price * percent_multiplier(rule.adjustment_percent))
        if new_price == product.selling_price:
            continue
        planned.append(PlannedChange(product=product, rule=rule, new_price=new_price))
    return planned


def compounding_rules(
    rules: Iterable[PricingRule],
    category: Category,
    days_to_expiry: int | None,
) -> list[PricingRule]:
    """Every active expiration rule whose window covers ``days_to_expiry``, in list order."""

    return [
        rule
        for rule in rules
        if rule.is_active
        and RuleType(rule.rule_type) is RuleType.EXPIRATION_BASED
        and category_matches(rule.applies_to_category, category)
        and expiration_condition_met(rule, days_to_expiry)
    ]


def simulate_price(
    base_price: Number,
    category: Category,
    rules: Iterable[PricingRule],
    config: TaxConfiguration,
    *,
    days_to_expiry: int | None = None,
) -> SimulationResult:
    """Preview the price of a hand-entered base price, compounding all matches."""

    applied = compounding_rules(rules, category, days_to_expiry)
    price = to_decimal(base_price)
    for rule in applied:
        price = price * percent_multiplier(rule.adjustment_percent)

    overlaid = overlay(price, config)
    return SimulationResult(
        adjusted_price=round2(price),
        vat_inclusive_price=overlaid.vat_inclusive_price,
        senior_pwd_price=overlaid.senior_pwd_price,
        applied_rule_ids=[rule.id for rule in applied],
    )
