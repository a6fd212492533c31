"""Append-only audit trail for committed price changes."""

from __future__ import annotations

import logging
from decimal import Decimal

from .domain import PriceChange, PriceChangeLogEntry
from .errors import RepositoryUnavailable
from .metrics import PRICING_AUDIT_ENTRIES_TOTAL, PRICING_AUDIT_FAILURES_TOTAL
from .repository import PriceChangeLogStore

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes one log entry per committed price change.

    The price write that precedes a log entry is already committed; a failed
    log write is surfaced to the caller and never undoes it.
    """

    def __init__(self, store: PriceChangeLogStore) -> None:
        self.store = store

    async def record(
        self,
        product_id: int | None,
        old_price: Decimal,
        new_price: Decimal,
        rule_id: int | None,
        reason: str,
        actor_id: str | None,
    ) -> PriceChangeLogEntry:
        change = PriceChange(
            product_id=product_id,
            rule_id=rule_id,
            old_price=old_price,
            new_price=new_price,
            reason=reason,
            actor_id=actor_id,
        )
        try:
            entry = await self.store.insert(change)
        except RepositoryUnavailable:
            PRICING_AUDIT_FAILURES_TOTAL.inc()
            logger.error(
                "Price of product %s changed %s -> %s but the audit entry could not be written",
                product_id,
                old_price,
                new_price,
            )
            raise

        PRICING_AUDIT_ENTRIES_TOTAL.labels(kind="rule" if rule_id is not None else "manual").inc()
        logger.info(
            "product=%s price %s -> %s rule=%s actor=%s reason=%s",
            product_id,
            old_price,
            new_price,
            rule_id,
            actor_id,
            reason,
        )
        return entry
