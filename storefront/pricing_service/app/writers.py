"""Price write strategies for the read-modify-write loops.

The engine reads a product, computes a price and writes it back without a
transaction spanning both steps. ``BestEffortPriceWriter`` accepts that a
concurrent edit in between is overwritten (last write wins);
``OptimisticPriceWriter`` makes the write conditional on the price that was
read and raises ``Conflict`` when it moved.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

from .domain import Product
from .errors import Conflict
from .repository import ProductStore

logger = logging.getLogger(__name__)


class PriceWriter(Protocol):
    async def write(self, product: Product, new_price: Decimal) -> bool:
        """Persist ``new_price``; return False when the product no longer exists."""
        ...


class BestEffortPriceWriter:
    def __init__(self, products: ProductStore) -> None:
        self.products = products

    async def write(self, product: Product, new_price: Decimal) -> bool:
        written = await self.products.update_price(product.id, new_price)
        if not written:
            logger.warning("Product %s disappeared before its price could be written", product.id)
        return written


class OptimisticPriceWriter:
    def __init__(self, products: ProductStore) -> None:
        self.products = products

    async def write(self, product: Product, new_price: Decimal) -> bool:
        written = await self.products.update_price(
            product.id,
            new_price,
            expected_price=product.selling_price,
        )
        if written:
            return True
        if product.id is None or await self.products.get_product(product.id) is None:
            logger.warning("Product %s disappeared before its price could be written", product.id)
            return False
        raise Conflict(product.id)


def build_price_writer(products: ProductStore, *, optimistic: bool) -> PriceWriter:
    if optimistic:
        return OptimisticPriceWriter(products)
    return BestEffortPriceWriter(products)
