from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest

from storefront.pricing_service.app.domain import (
    Category,
    PriceChange,
    PriceChangeLogEntry,
    PricingRule,
    Product,
    RuleType,
)
from storefront.pricing_service.app.errors import RepositoryUnavailable
from storefront.pricing_service.app.services import PricingService

TODAY = date(2026, 10, 19)


class InMemoryProductStore:
    """Product store keeping rows in a dict; can fail after N writes."""

    def __init__(self) -> None:
        self.rows: dict[int, Product] = {}
        self.writes: list[tuple[int | None, Decimal]] = []
        self.fail_after_writes: int | None = None
        self.before_write: Callable[[int | None], None] | None = None
        self._ids = itertools.count(1)

    def add(self, **fields: Any) -> Product:
        product_id = next(self._ids)
        fields.setdefault("category", Category.FRESH)
        fields["selling_price"] = Decimal(str(fields.get("selling_price", "100.00")))
        product = Product(id=product_id, **fields)
        self.rows[product_id] = product
        return product

    def price_of(self, product_id: int | None) -> Decimal:
        assert product_id is not None
        return self.rows[product_id].selling_price

    def set_price(self, product_id: int | None, price: str) -> None:
        assert product_id is not None
        current = self.rows[product_id]
        self.rows[product_id] = replace(current, selling_price=Decimal(price))

    async def list_products(self, *, category: Category | None = None) -> list[Product]:
        return [row for row in self.rows.values() if category is None or row.category == category]

    async def get_product(self, product_id: int) -> Product | None:
        return self.rows.get(product_id)

    async def update_price(
        self,
        product_id: int | None,
        selling_price: Decimal,
        *,
        expected_price: Decimal | None = None,
    ) -> bool:
        if self.before_write is not None:
            self.before_write(product_id)
        if self.fail_after_writes is not None and len(self.writes) >= self.fail_after_writes:
            raise RepositoryUnavailable("product store offline")
        current = self.rows.get(product_id) if product_id is not None else None
        if current is None:
            return False
        if expected_price is not None and current.selling_price != expected_price:
            return False
        self.rows[current.id] = replace(current, selling_price=selling_price)
        self.writes.append((product_id, selling_price))
        return True


class InMemoryRuleStore:
    def __init__(self) -> None:
        self.rules: list[PricingRule] = []
        self._ids = itertools.count(1)

    def add(self, **fields: Any) -> PricingRule:
        fields.setdefault("name", f"Rule {len(self.rules) + 1}")
        fields.setdefault("rule_type", RuleType.EXPIRATION_BASED)
        fields["adjustment_percent"] = Decimal(str(fields.get("adjustment_percent", "-10")))
        rule = PricingRule(id=next(self._ids), **fields)
        self.rules.append(rule)
        return rule

    async def list_rules(self, *, is_active: bool | None = None) -> list[PricingRule]:
        return [rule for rule in self.rules if is_active is None or rule.is_active is is_active]


class InMemoryLogStore:
    def __init__(self) -> None:
        self.entries: list[PriceChangeLogEntry] = []
        self.available = True
        self._ids = itertools.count(1)
        self._clock = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    async def insert(self, change: PriceChange) -> PriceChangeLogEntry:
        if not self.available:
            raise RepositoryUnavailable("log store offline")
        self._clock += timedelta(seconds=1)
        entry = PriceChangeLogEntry(
            id=next(self._ids),
            product_id=change.product_id,
            rule_id=change.rule_id,
            old_price=change.old_price,
            new_price=change.new_price,
            reason=change.reason,
            actor_id=change.actor_id,
            created_at=self._clock,
        )
        self.entries.append(entry)
        return entry

    async def list_recent(self, limit: int) -> list[PriceChangeLogEntry]:
        return list(reversed(self.entries))[:limit]

    async def latest_for_product(self, product_id: int | None) -> PriceChangeLogEntry | None:
        for entry in reversed(self.entries):
            if entry.product_id == product_id:
                return entry
        return None


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def product_store() -> InMemoryProductStore:
    return InMemoryProductStore()


@pytest.fixture
def rule_store() -> InMemoryRuleStore:
    return InMemoryRuleStore()


@pytest.fixture
def log_store() -> InMemoryLogStore:
    return InMemoryLogStore()


@pytest.fixture
def make_service(
    product_store: InMemoryProductStore,
    rule_store: InMemoryRuleStore,
    log_store: InMemoryLogStore,
) -> Callable[..., PricingService]:
    def factory(**kwargs: Any) -> PricingService:
        kwargs.setdefault("clock", lambda: TODAY)
        return PricingService(product_store, rule_store, log_store, **kwargs)

    return factory
