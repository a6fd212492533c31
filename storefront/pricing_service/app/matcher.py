"""Rule applicability checks shared by the simulate and apply evaluators."""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import date, timedelta

from .domain import ALL_CATEGORIES, Category, PricingRule, Product, RuleType

ConditionMatcher = Callable[[PricingRule, Product, date], bool]

_ONE_DAY = timedelta(days=1)


def days_to_expiry(expiration_date: date, today: date) -> int:
    """Whole days left until expiry, rounded up; negative once expired."""

    return math.ceil((expiration_date - today) / _ONE_DAY)


def category_matches(applies_to_category: str | None, category: Category | str) -> bool:
    if applies_to_category is None or applies_to_category == ALL_CATEGORIES:
        return True
    # Stored rules may name categories the catalog no longer has; those just never match.
    return applies_to_category == Category(category).value


def expiration_condition_met(rule: PricingRule, days_left: int | None) -> bool:
    """True when an item with ``days_left`` until expiry falls inside the rule window."""

    if days_left is None or rule.condition_days is None:
        return False
    return days_left <= rule.condition_days


def _expiration_condition(rule: PricingRule, product: Product, today: date) -> bool:
    if product.expiration_date is None:
        return False
    return expiration_condition_met(rule, days_to_expiry(product.expiration_date, today))


def _no_signal(rule: PricingRule, product: Product, today: date) -> bool:
    return False


# Extension point: age and demand rules stay inert until products expose an
# age or demand signal. Replace the stub for a type to make its rules match.
CONDITION_MATCHERS: dict[RuleType, ConditionMatcher] = {
    RuleType.EXPIRATION_BASED: _expiration_condition,
    RuleType.AGE_BASED: _no_signal,
    RuleType.DEMAND_BASED: _no_signal,
    RuleType.MANUAL: _no_signal,
}


def matches(rule: PricingRule, product: Product, today: date) -> bool:
    """Return True when ``rule`` applies to ``product`` on ``today``."""

    if not rule.is_active:
        return False
    if not category_matches(rule.applies_to_category, product.category):
        return False
    condition = CONDITION_MATCHERS.get(RuleType(rule.rule_type), _no_signal)
    return condition(rule, product, today)
