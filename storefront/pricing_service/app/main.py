import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from storefront.common import (
    DEFAULT_APP_NAME,
    ServiceSettings,
    build_app,
    configure_logging,
    create_tables,
    dispose_engines,
    get_session_factory,
    resolve_database_url,
)

from .api.adjustments import router as adjustments_router
from .api.health import router as health_router
from .api.logs import router as logs_router
from .api.rules import router as rules_router
from .api.tax import router as tax_router
from .models import Base
from .tax_config import TaxConfigurationStore

SERVICE_NAME = "Pricing Service"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./pricing_service.db"

logger = logging.getLogger(__name__)


def create_app(settings: ServiceSettings | None = None) -> FastAPI:
    """Create the Pricing Service FastAPI application."""

    resolved_settings = settings or ServiceSettings()
    if resolved_settings.app_name == DEFAULT_APP_NAME:
        resolved_settings = resolved_settings.model_copy(update={"app_name": SERVICE_NAME})
    configure_logging(resolved_settings)
    database_url = resolve_database_url(resolved_settings, DEFAULT_DATABASE_URL)
    session_factory = get_session_factory(database_url)
    tax_store = TaxConfigurationStore(Path(resolved_settings.tax_config_path))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if resolved_settings.create_schema:
            await create_tables(database_url, Base.metadata)
        app.state.session_factory = session_factory
        app.state.tax_store = tax_store
        # Loaded once per process; PUT /pricing/tax-config replaces it.
        app.state.tax_config = await tax_store.load()
        logger.info("%s ready (tax config: %s)", resolved_settings.app_name, tax_store.path)
        try:
            yield
        finally:
            await dispose_engines()

    app = build_app(resolved_settings, lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(rules_router)
    app.include_router(adjustments_router)
    app.include_router(logs_router)
    app.include_router(tax_router)
    return app


app = create_app()
