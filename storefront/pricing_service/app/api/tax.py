"""Tax configuration routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_tax_configuration, get_tax_store
from ..errors import RepositoryUnavailable
from ..tax_config import TaxConfiguration, TaxConfigurationStore
from .errors import to_http_exception

router = APIRouter(prefix="/pricing/tax-config", tags=["tax"])


@router.get("", response_model=TaxConfiguration)
async def get_tax_config(config: TaxConfiguration = Depends(get_tax_configuration)) -> TaxConfiguration:
    return config


@router.put("", response_model=TaxConfiguration)
async def save_tax_config(
    payload: TaxConfiguration,
    request: Request,
    store: TaxConfigurationStore = Depends(get_tax_store),
) -> TaxConfiguration:
    try:
        await store.save(payload)
    except RepositoryUnavailable as exc:
        raise to_http_exception(exc) from exc
    request.app.state.tax_config = payload
    return payload
