"""Data access for products, pricing rules and the price change log.

Each store is described by a ``Protocol`` the engine depends on, and
implemented on an ``AsyncSession``. Price updates and log inserts commit
immediately: a bulk operation that fails halfway keeps the products it
already changed, and a failed log write never undoes the price before it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .domain import Category, PriceChange, PriceChangeLogEntry, PricingRule, Product, RuleType
from .errors import RepositoryUnavailable
from .models import PriceChangeLogRecord, PricingRuleRecord, ProductRecord
from .money import from_cents, to_cents, to_decimal


class ProductStore(Protocol):
    async def list_products(self, *, category: Category | None = None) -> list[Product]: ...

    async def get_product(self, product_id: int) -> Product | None: ...

    async def update_price(
        self,
        product_id: int | None,
        selling_price: Decimal,
        *,
        expected_price: Decimal | None = None,
    ) -> bool: ...


class PricingRuleStore(Protocol):
    async def list_rules(self, *, is_active: bool | None = None) -> list[PricingRule]: ...


class PriceChangeLogStore(Protocol):
    async def insert(self, change: PriceChange) -> PriceChangeLogEntry: ...

    async def list_recent(self, limit: int) -> list[PriceChangeLogEntry]: ...

    async def latest_for_product(self, product_id: int | None) -> PriceChangeLogEntry | None: ...


@asynccontextmanager
async def _store_errors(action: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise RepositoryUnavailable(f"Could not {action}") from exc


def _to_product(record: ProductRecord) -> Product:
    return Product(
        id=record.id,
        category=Category(record.category),
        selling_price=from_cents(record.selling_price_cents),
        cost_price=from_cents(record.cost_price_cents),
        expiration_date=record.expiration_date,
        sku=record.sku,
        name=record.name,
    )


def _to_rule(record: PricingRuleRecord) -> PricingRule:
    return PricingRule(
        id=record.id,
        name=record.name,
        rule_type=RuleType(record.rule_type),
        adjustment_percent=to_decimal(record.adjustment_percent),
        is_active=record.is_active,
        priority=record.priority,
        condition_days=record.condition_days,
        applies_to_category=record.applies_to_category,
        description=record.description,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _to_entry(
    record: PriceChangeLogRecord,
    product_name: str | None = None,
    product_sku: str | None = None,
) -> PriceChangeLogEntry:
    return PriceChangeLogEntry(
        id=record.id,
        product_id=record.product_id,
        rule_id=record.rule_id,
        old_price=from_cents(record.old_price_cents),
        new_price=from_cents(record.new_price_cents),
        reason=record.reason,
        actor_id=record.actor_id,
        created_at=record.created_at,
        product_name=product_name,
        product_sku=product_sku,
    )


class ProductRepository:
    """Product reads and price writes."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_product(
        self,
        *,
        sku: str,
        name: str,
        category: Category,
        selling_price: Decimal,
        cost_price: Decimal = Decimal("0"),
        expiration_date: date | None = None,
    ) -> Product:
        record = ProductRecord(
            sku=sku,
            name=name,
            category=Category(category).value,
            selling_price_cents=to_cents(selling_price),
            cost_price_cents=to_cents(cost_price),
            expiration_date=expiration_date,
        )
        async with _store_errors("create product"):
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record, attribute_names=["created_at", "updated_at"])
        return _to_product(record)

    async def list_products(self, *, category: Category | None = None) -> list[Product]:
        query: Select[tuple[ProductRecord]] = select(ProductRecord)
        if category is not None:
            query = query.where(ProductRecord.category == Category(category).value)
        async with _store_errors("list products"):
            result = await self.session.execute(query.order_by(ProductRecord.id))
        return [_to_product(record) for record in result.scalars()]

    async def get_product(self, product_id: int) -> Product | None:
        async with _store_errors("load product"):
            result = await self.session.execute(select(ProductRecord).where(ProductRecord.id == product_id))
        record = result.scalar_one_or_none()
        return _to_product(record) if record is not None else None

    async def update_price(
        self,
        product_id: int | None,
        selling_price: Decimal,
        *,
        expected_price: Decimal | None = None,
    ) -> bool:
        statement = (
            update(ProductRecord)
            .where(ProductRecord.id == product_id)
            .values(selling_price_cents=to_cents(selling_price))
        )
        if expected_price is not None:
            statement = statement.where(ProductRecord.selling_price_cents == to_cents(expected_price))
        async with _store_errors(f"update price of product {product_id}"):
            result = await self.session.execute(statement)
            await self.session.commit()
        return result.rowcount == 1


class PricingRuleRepository:
    """Persistence helpers for pricing rules."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_rule(
        self,
        *,
        name: str,
        rule_type: RuleType,
        adjustment_percent: Decimal,
        is_active: bool,
        priority: int,
        condition_days: int | None,
        applies_to_category: str | None,
        description: str | None,
    ) -> PricingRule:
        record = PricingRuleRecord(
            name=name,
            rule_type=RuleType(rule_type).value,
            adjustment_percent=float(adjustment_percent),
            is_active=is_active,
            priority=priority,
            condition_days=condition_days,
            applies_to_category=applies_to_category,
            description=description,
        )
        async with _store_errors("create pricing rule"):
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record, attribute_names=["created_at", "updated_at"])
        return _to_rule(record)

    async def list_rules(self, *, is_active: bool | None = None) -> list[PricingRule]:
        query: Select[tuple[PricingRuleRecord]] = select(PricingRuleRecord)
        if is_active is not None:
            query = query.where(PricingRuleRecord.is_active.is_(is_active))
        async with _store_errors("list pricing rules"):
            result = await self.session.execute(query.order_by(PricingRuleRecord.id))
        return [_to_rule(record) for record in result.scalars()]

    async def set_active(self, rule_id: int, is_active: bool) -> PricingRule | None:
        async with _store_errors(f"update pricing rule {rule_id}"):
            result = await self.session.execute(
                select(PricingRuleRecord).where(PricingRuleRecord.id == rule_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                return None
            record.is_active = is_active
            await self.session.flush()
            await self.session.refresh(record, attribute_names=["updated_at"])
        return _to_rule(record)


class PriceChangeLogRepository:
    """Append-only access to the price change log."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, change: PriceChange) -> PriceChangeLogEntry:
        record = PriceChangeLogRecord(
            product_id=change.product_id,
            rule_id=change.rule_id,
            old_price_cents=to_cents(change.old_price),
            new_price_cents=to_cents(change.new_price),
            reason=change.reason,
            actor_id=change.actor_id,
        )
        async with _store_errors("write price change log"):
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record, attribute_names=["created_at"])
            await self.session.commit()
        return _to_entry(record)

    async def list_recent(self, limit: int) -> list[PriceChangeLogEntry]:
        """Newest entries first, with the name and SKU of products that still exist."""

        query = (
            select(PriceChangeLogRecord, ProductRecord.name, ProductRecord.sku)
            .outerjoin(ProductRecord, ProductRecord.id == PriceChangeLogRecord.product_id)
            .order_by(PriceChangeLogRecord.created_at.desc(), PriceChangeLogRecord.id.desc())
            .limit(limit)
        )
        async with _store_errors("list price change log"):
            result = await self.session.execute(query)
        return [_to_entry(record, name, sku) for record, name, sku in result.all()]

    async def latest_for_product(self, product_id: int | None) -> PriceChangeLogEntry | None:
        if product_id is None:
            return None
        query = (
            select(PriceChangeLogRecord)
            .where(PriceChangeLogRecord.product_id == product_id)
            .order_by(PriceChangeLogRecord.created_at.desc(), PriceChangeLogRecord.id.desc())
            .limit(1)
        )
        async with _store_errors("load price change log"):
            result = await self.session.execute(query)
        record = result.scalar_one_or_none()
        return _to_entry(record) if record is not None else None
