"""API routes for managing pricing rules."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..dependencies import get_rule_repository
from ..domain import PricingRule
from ..errors import RepositoryUnavailable
from ..repository import PricingRuleRepository
from ..schemas import PricingRuleCreate, PricingRuleListResponse, PricingRuleResponse, PricingRuleUpdate
from .errors import to_http_exception

router = APIRouter(prefix="/pricing/rules", tags=["pricing-rules"])


def _serialize(rule: PricingRule) -> dict[str, object]:
    return {
        "id": rule.id,
        "name": rule.name,
        "ruleType": rule.rule_type,
        "description": rule.description,
        "isActive": rule.is_active,
        "priority": rule.priority,
        "conditionDays": rule.condition_days,
        "adjustmentPercent": rule.adjustment_percent,
        "appliesToCategory": rule.applies_to_category,
        "createdAt": rule.created_at,
        "updatedAt": rule.updated_at,
    }


@router.post("", response_model=PricingRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_pricing_rule(
    payload: PricingRuleCreate,
    repository: PricingRuleRepository = Depends(get_rule_repository),
) -> PricingRuleResponse:
    category = payload.applies_to_category
    try:
        rule = await repository.create_rule(
            name=payload.name,
            rule_type=payload.rule_type,
            adjustment_percent=payload.adjustment_percent,
            is_active=payload.is_active,
            priority=payload.priority,
            condition_days=payload.condition_days,
            applies_to_category=getattr(category, "value", category),
            description=payload.description,
        )
    except RepositoryUnavailable as exc:
        raise to_http_exception(exc) from exc
    return PricingRuleResponse.model_validate(_serialize(rule))


@router.get("", response_model=PricingRuleListResponse)
async def list_pricing_rules(
    active_only: bool = Query(default=False, alias="activeOnly"),
    repository: PricingRuleRepository = Depends(get_rule_repository),
) -> PricingRuleListResponse:
    try:
        rules = await repository.list_rules(is_active=True if active_only else None)
    except RepositoryUnavailable as exc:
        raise to_http_exception(exc) from exc
    # The admin screen lists rules in evaluation order.
    rules.sort(key=lambda rule: rule.priority, reverse=True)
    items = [PricingRuleResponse.model_validate(_serialize(rule)) for rule in rules]
    return PricingRuleListResponse(items=items, total=len(items))


@router.patch("/{rule_id}", response_model=PricingRuleResponse)
async def update_pricing_rule(
    rule_id: int,
    payload: PricingRuleUpdate,
    repository: PricingRuleRepository = Depends(get_rule_repository),
) -> PricingRuleResponse:
    try:
        rule = await repository.set_active(rule_id, payload.is_active)
    except RepositoryUnavailable as exc:
        raise to_http_exception(exc) from exc
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pricing rule not found")
    return PricingRuleResponse.model_validate(_serialize(rule))
