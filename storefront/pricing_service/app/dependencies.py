"""Dependency wiring for the pricing service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.common import ServiceSettings, lifespan_session

from .repository import PriceChangeLogRepository, PricingRuleRepository, ProductRepository
from .services import PricingService
from .tax_config import TaxConfiguration, TaxConfigurationStore
from .writers import build_price_writer


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an AsyncSession for the current request lifecycle."""

    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with lifespan_session(session_factory) as session:
        yield session


def get_settings(request: Request) -> ServiceSettings:
    return request.app.state.settings


def get_product_repository(session: AsyncSession = Depends(get_session)) -> ProductRepository:
    return ProductRepository(session)


def get_rule_repository(session: AsyncSession = Depends(get_session)) -> PricingRuleRepository:
    return PricingRuleRepository(session)


def get_log_repository(session: AsyncSession = Depends(get_session)) -> PriceChangeLogRepository:
    return PriceChangeLogRepository(session)


def get_pricing_service(
    settings: ServiceSettings = Depends(get_settings),
    products: ProductRepository = Depends(get_product_repository),
    rules: PricingRuleRepository = Depends(get_rule_repository),
    logs: PriceChangeLogRepository = Depends(get_log_repository),
) -> PricingService:
    """Build a PricingService over repositories sharing one request session."""

    return PricingService(
        products,
        rules,
        logs,
        price_writer=build_price_writer(products, optimistic=settings.pricing_optimistic_locking),
        audit_bulk_changes=settings.audit_bulk_changes,
    )


def get_tax_store(request: Request) -> TaxConfigurationStore:
    store = getattr(request.app.state, "tax_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tax configuration store is not configured",
        )
    return store


def get_tax_configuration(request: Request) -> TaxConfiguration:
    """Return the configuration loaded for this process."""

    config = getattr(request.app.state, "tax_config", None)
    return config if config is not None else TaxConfiguration()
