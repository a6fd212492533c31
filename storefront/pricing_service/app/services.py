"""Pricing engine orchestration.

Operations run product by product. Each price write is committed on its own,
so a failure partway through leaves earlier products changed; the raised
``PricingError`` carries how many were updated before it so the operator can
decide whether to re-run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .audit import AuditLogger
from .domain import (
    AdjustmentDirection,
    CategoryFilter,
    PriceChangeLogEntry,
    PricingRule,
    Product,
    normalize_category_filter,
)
from .errors import EmptyCategory, InvalidPercent, NoActiveRules, PricingError
from .evaluators import (
    PlannedChange,
    SimulationResult,
    active_rules_by_priority,
    plan_rule_changes,
    simulate_price,
)
from .metrics import PRICING_OPERATION_FAILURES_TOTAL, PRICING_PRICE_CHANGES_TOTAL, error_label
from .money import HUNDRED, Number, psychological_price, round2, to_decimal
from .repository import PriceChangeLogStore, PricingRuleStore, ProductStore
from .tax_config import TaxConfiguration
from .writers import BestEffortPriceWriter, PriceWriter

logger = logging.getLogger(__name__)

PSYCHOLOGICAL_REASON = "Psychological pricing"


@dataclass
class ApplyResult:
    updated_count: int
    logs: list[PriceChangeLogEntry] = field(default_factory=list)


def updated_message(count: int) -> str:
    noun = "product" if count == 1 else "products"
    return f"Updated {count} {noun}"


def bulk_reason(direction: AdjustmentDirection, percent: Decimal) -> str:
    return f"Bulk {AdjustmentDirection(direction).value} of {percent.normalize():f}%"


def validate_percent(percent: Number, direction: AdjustmentDirection) -> Decimal:
    try:
        value = to_decimal(percent)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise InvalidPercent() from exc
    if not value.is_finite() or value <= 0:
        raise InvalidPercent()
    if AdjustmentDirection(direction) is AdjustmentDirection.DECREASE and value > HUNDRED:
        raise InvalidPercent("A decrease above 100% would make prices negative")
    return value


class PricingService:
    """Applies pricing rules, bulk adjustments and rounding to the catalog."""

    def __init__(
        self,
        products: ProductStore,
        rules: PricingRuleStore,
        logs: PriceChangeLogStore,
        *,
        price_writer: PriceWriter | None = None,
        audit_bulk_changes: bool = True,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.products = products
        self.rules = rules
        self.logs = logs
        self.audit = AuditLogger(logs)
        self.price_writer = price_writer or BestEffortPriceWriter(products)
        self.audit_bulk_changes = audit_bulk_changes
        self.clock = clock

    async def apply_rules(
        self,
        *,
        category: CategoryFilter = None,
        actor_id: str | None = None,
    ) -> ApplyResult:
        """Commit the highest-priority matching rule's price for each product."""

        result = ApplyResult(updated_count=0)
        try:
            rules = active_rules_by_priority(await self.rules.list_rules(is_active=True))
            if not rules:
                raise NoActiveRules()
            products = await self._load_products(category)
            planned = plan_rule_changes(products, rules, self.clock())
            for change in planned:
                if await self._already_applied(change):
                    continue
                if not await self.price_writer.write(change.product, change.new_price):
                    continue
                result.updated_count += 1
                PRICING_PRICE_CHANGES_TOTAL.labels(source="rule").inc()
                entry = await self.audit.record(
                    change.product.id,
                    change.product.selling_price,
                    change.new_price,
                    change.rule.id,
                    f"Applied rule: {change.rule.name}",
                    actor_id,
                )
                result.logs.append(entry)
        except PricingError as exc:
            self._abort("apply_rules", exc, result.updated_count)
            raise

        logger.info("Applied pricing rules: %s", updated_message(result.updated_count))
        return result

    async def simulate(
        self,
        *,
        base_price: Number,
        category: str,
        tax_config: TaxConfiguration,
        days_to_expiry: int | None = None,
    ) -> SimulationResult:
        """Preview a price by compounding every matching expiration rule."""

        rules: list[PricingRule] = await self.rules.list_rules()
        return simulate_price(
            base_price,
            category,
            rules,
            tax_config,
            days_to_expiry=days_to_expiry,
        )

    async def bulk_adjust(
        self,
        *,
        category: CategoryFilter,
        percent: Number,
        direction: AdjustmentDirection,
        actor_id: str | None = None,
    ) -> int:
        """Raise or lower every price in ``category`` by a flat percentage.

        Every product is written and counted, even when rounding leaves its
        price unchanged; only real changes reach the audit log.
        """

        updated = 0
        try:
            value = validate_percent(percent, direction)
            step = value / HUNDRED
            multiplier = 1 + step if AdjustmentDirection(direction) is AdjustmentDirection.INCREASE else 1 - step
            reason = bulk_reason(direction, value)
            for product in await self._load_products(category):
                new_price = round2(product.selling_price * multiplier)
                if not await self.price_writer.write(product, new_price):
                    continue
                updated += 1
                if new_price != product.selling_price:
                    PRICING_PRICE_CHANGES_TOTAL.labels(source="bulk").inc()
                    await self._audit_bulk(product, new_price, reason, actor_id)
        except PricingError as exc:
            self._abort("bulk_adjust", exc, updated)
            raise

        logger.info("Bulk %s of %s%%: %s", AdjustmentDirection(direction).value, percent, updated_message(updated))
        return updated

    async def apply_psychological_pricing(self, *, actor_id: str | None = None) -> int:
        """Rewrite every price to end in .99, counting only real changes."""

        updated = 0
        try:
            for product in await self.products.list_products():
                new_price = psychological_price(product.selling_price)
                if new_price == product.selling_price:
                    continue
                if not await self.price_writer.write(product, new_price):
                    continue
                updated += 1
                PRICING_PRICE_CHANGES_TOTAL.labels(source="psychological").inc()
                await self._audit_bulk(product, new_price, PSYCHOLOGICAL_REASON, actor_id)
        except PricingError as exc:
            self._abort("apply_psychological_pricing", exc, updated)
            raise

        logger.info("Psychological pricing: %s", updated_message(updated))
        return updated

    async def _load_products(self, category: CategoryFilter) -> list[Product]:
        category_filter = normalize_category_filter(category)
        products = await self.products.list_products(category=category_filter)
        if not products:
            raise EmptyCategory(category_filter.value if category_filter is not None else None)
        return products

    async def _already_applied(self, change: PlannedChange) -> bool:
        """True when the product still carries the price this rule last set."""

        latest = await self.logs.latest_for_product(change.product.id)
        return (
            latest is not None
            and latest.rule_id is not None
            and latest.rule_id == change.rule.id
            and latest.new_price == change.product.selling_price
        )

    async def _audit_bulk(self, product: Product, new_price: Decimal, reason: str, actor_id: str | None) -> None:
        if not self.audit_bulk_changes:
            return
        await self.audit.record(product.id, product.selling_price, new_price, None, reason, actor_id)

    def _abort(self, operation: str, exc: PricingError, updated: int) -> None:
        exc.updated_count = updated
        PRICING_OPERATION_FAILURES_TOTAL.labels(operation=operation, error=error_label(exc)).inc()
        logger.warning("%s aborted after %s: %s", operation, updated_message(updated), exc.message)
