"""Value types the pricing engine reasons about.

Repositories translate ORM rows into these frozen records so the matcher and
evaluators never touch a database session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Union

ALL_CATEGORIES = "all"


class Category(str, Enum):
    FRESH = "fresh"
    FROZEN = "frozen"
    CANNED = "canned"
    OTHER = "other"


class RuleType(str, Enum):
    EXPIRATION_BASED = "expiration_based"
    AGE_BASED = "age_based"
    DEMAND_BASED = "demand_based"
    MANUAL = "manual"


class AdjustmentDirection(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


CategoryFilter = Union[Category, Literal["all"], None]


def normalize_category_filter(value: CategoryFilter | str) -> Category | None:
    """Map ``None`` / ``"all"`` to no filter and anything else to a Category."""

    if value is None or value == ALL_CATEGORIES:
        return None
    return Category(value)


@dataclass(frozen=True, slots=True)
class PricingRule:
    id: int | None
    name: str
    rule_type: RuleType
    adjustment_percent: Decimal
    is_active: bool = True
    priority: int = 0
    condition_days: int | None = None
    applies_to_category: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Product:
    id: int | None
    category: Category
    selling_price: Decimal
    cost_price: Decimal | None = None
    expiration_date: date | None = None
    sku: str | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class PriceChange:
    """A price change about to be appended to the audit log."""

    product_id: int | None
    rule_id: int | None
    old_price: Decimal
    new_price: Decimal
    reason: str
    actor_id: str | None


@dataclass(frozen=True, slots=True)
class PriceChangeLogEntry:
    id: int
    product_id: int | None
    rule_id: int | None
    old_price: Decimal
    new_price: Decimal
    reason: str | None
    actor_id: str | None
    created_at: datetime
    product_name: str | None = None
    product_sku: str | None = None
