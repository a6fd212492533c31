"""Failures reported by the pricing engine.

Every error carries ``updated_count`` so callers can report partial progress
("Updated N products") when a loop aborts midway.
"""

from __future__ import annotations


class PricingError(Exception):
    """Base class for pricing engine failures."""

    default_message = "Pricing operation failed"

    def __init__(self, message: str | None = None, *, updated_count: int = 0) -> None:
        self.message = message or self.default_message
        self.updated_count = updated_count
        super().__init__(self.message)


class NoActiveRules(PricingError):
    default_message = "No active pricing rules to apply"


class EmptyCategory(PricingError):
    default_message = "No products found in the selected category"

    def __init__(self, category: str | None = None, *, updated_count: int = 0) -> None:
        self.category = category
        message = None
        if category is not None:
            message = f"No products found in category '{category}'"
        super().__init__(message, updated_count=updated_count)


class InvalidPercent(PricingError):
    default_message = "Percentage must be a positive number"


class RepositoryUnavailable(PricingError):
    default_message = "Pricing data store is unavailable"


class Conflict(PricingError):
    default_message = "Product price changed concurrently"

    def __init__(self, product_id: int | None, *, updated_count: int = 0) -> None:
        self.product_id = product_id
        super().__init__(
            f"Price of product {product_id} changed since it was read; re-run to pick up the new price",
            updated_count=updated_count,
        )
