"""Prometheus metrics for the pricing service."""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter


PRICING_PRICE_CHANGES_TOTAL: Final = Counter(
    "pricing_price_changes_total",
    "Number of committed product price changes.",
    labelnames=("source",),
)

PRICING_AUDIT_ENTRIES_TOTAL: Final = Counter(
    "pricing_audit_entries_total",
    "Number of price change log entries written.",
    labelnames=("kind",),
)

PRICING_AUDIT_FAILURES_TOTAL: Final = Counter(
    "pricing_audit_failures_total",
    "Number of price change log writes that failed after the price was committed.",
)

PRICING_OPERATION_FAILURES_TOTAL: Final = Counter(
    "pricing_operation_failures_total",
    "Number of pricing operations aborted with an error.",
    labelnames=("operation", "error"),
)


def error_label(exc: BaseException) -> str:
    return type(exc).__name__
