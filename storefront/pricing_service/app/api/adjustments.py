"""API routes that preview or change catalog prices."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.common import ServiceSettings

from ..dependencies import get_pricing_service, get_settings, get_tax_configuration
from ..domain import PriceChangeLogEntry
from ..errors import PricingError
from ..services import PricingService, updated_message
from ..schemas import (
    ApplyRulesRequest,
    ApplyRulesResponse,
    BulkAdjustRequest,
    BulkUpdateResponse,
    PriceChangeResponse,
    PsychologicalPricingRequest,
    SimulationRequest,
    SimulationResponse,
)
from ..tax_config import TaxConfiguration
from .errors import to_http_exception

router = APIRouter(prefix="/pricing", tags=["pricing"])


def serialize_change(entry: PriceChangeLogEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "productId": entry.product_id,
        "ruleId": entry.rule_id,
        "oldPrice": entry.old_price,
        "newPrice": entry.new_price,
        "reason": entry.reason,
        "actorId": entry.actor_id,
        "createdAt": entry.created_at,
        "productName": entry.product_name,
        "productSku": entry.product_sku,
    }


@router.post("/apply", response_model=ApplyRulesResponse)
async def apply_pricing_rules(
    payload: ApplyRulesRequest,
    service: PricingService = Depends(get_pricing_service),
    settings: ServiceSettings = Depends(get_settings),
) -> ApplyRulesResponse:
    try:
        result = await service.apply_rules(
            category=payload.category,
            actor_id=payload.actor_id or settings.default_actor_id,
        )
    except PricingError as exc:
        raise to_http_exception(exc) from exc
    return ApplyRulesResponse(
        updated_count=result.updated_count,
        message=updated_message(result.updated_count),
        changes=[PriceChangeResponse.model_validate(serialize_change(entry)) for entry in result.logs],
    )


@router.post("/simulate", response_model=SimulationResponse)
async def simulate_price(
    payload: SimulationRequest,
    service: PricingService = Depends(get_pricing_service),
    tax_config: TaxConfiguration = Depends(get_tax_configuration),
) -> SimulationResponse:
    try:
        result = await service.simulate(
            base_price=payload.base_price,
            category=payload.category,
            tax_config=tax_config,
            days_to_expiry=payload.days_to_expiry,
        )
    except PricingError as exc:
        raise to_http_exception(exc) from exc
    return SimulationResponse(
        adjusted_price=result.adjusted_price,
        vat_inclusive_price=result.vat_inclusive_price,
        senior_pwd_price=result.senior_pwd_price,
        applied_rule_ids=result.applied_rule_ids,
    )


@router.post("/bulk-adjust", response_model=BulkUpdateResponse)
async def bulk_adjust_prices(
    payload: BulkAdjustRequest,
    service: PricingService = Depends(get_pricing_service),
    settings: ServiceSettings = Depends(get_settings),
) -> BulkUpdateResponse:
    try:
        updated = await service.bulk_adjust(
            category=payload.category,
            percent=payload.percent,
            direction=payload.direction,
            actor_id=payload.actor_id or settings.default_actor_id,
        )
    except PricingError as exc:
        raise to_http_exception(exc) from exc
    return BulkUpdateResponse(updated_count=updated, message=updated_message(updated))


@router.post("/psychological", response_model=BulkUpdateResponse)
async def apply_psychological_pricing(
    payload: PsychologicalPricingRequest | None = None,
    service: PricingService = Depends(get_pricing_service),
    settings: ServiceSettings = Depends(get_settings),
) -> BulkUpdateResponse:
    actor_id = payload.actor_id if payload is not None else None
    try:
        updated = await service.apply_psychological_pricing(actor_id=actor_id or settings.default_actor_id)
    except PricingError as exc:
        raise to_http_exception(exc) from exc
    return BulkUpdateResponse(updated_count=updated, message=updated_message(updated))
