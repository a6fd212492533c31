"""Pydantic schemas for the pricing service."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from .domain import AdjustmentDirection, Category, RuleType


class PricingRuleBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    rule_type: RuleType = Field(alias="ruleType")
    description: str | None = None
    is_active: bool = Field(default=True, alias="isActive")
    priority: int = Field(default=0)
    condition_days: int | None = Field(default=None, alias="conditionDays")
    adjustment_percent: Decimal = Field(ge=Decimal("-100"), max_digits=7, decimal_places=2, alias="adjustmentPercent")
    applies_to_category: Category | Literal["all"] | None = Field(default=None, alias="appliesToCategory")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            msg = "name must be non-empty"
            raise ValueError(msg)
        return cleaned


class PricingRuleCreate(PricingRuleBase):
    pass


class PricingRuleUpdate(BaseModel):
    is_active: bool = Field(alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class PricingRuleResponse(PricingRuleBase):
    id: PositiveInt
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PricingRuleListResponse(BaseModel):
    items: list[PricingRuleResponse]
    total: int


class PriceChangeResponse(BaseModel):
    id: PositiveInt
    product_id: int | None = Field(alias="productId")
    rule_id: int | None = Field(alias="ruleId")
    old_price: Decimal = Field(alias="oldPrice")
    new_price: Decimal = Field(alias="newPrice")
    reason: str | None = None
    actor_id: str | None = Field(default=None, alias="actorId")
    created_at: datetime = Field(alias="createdAt")
    product_name: str | None = Field(default=None, alias="productName")
    product_sku: str | None = Field(default=None, alias="productSku")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PriceChangeListResponse(BaseModel):
    items: list[PriceChangeResponse]


class ApplyRulesRequest(BaseModel):
    category: Category | Literal["all"] | None = None
    actor_id: str | None = Field(default=None, max_length=64, alias="actorId")

    model_config = ConfigDict(populate_by_name=True)


class ApplyRulesResponse(BaseModel):
    updated_count: int = Field(alias="updatedCount")
    message: str
    changes: list[PriceChangeResponse]

    model_config = ConfigDict(populate_by_name=True)


class BulkAdjustRequest(BaseModel):
    category: Category | Literal["all"] = "all"
    percent: Decimal
    direction: AdjustmentDirection
    actor_id: str | None = Field(default=None, max_length=64, alias="actorId")

    model_config = ConfigDict(populate_by_name=True)


class PsychologicalPricingRequest(BaseModel):
    actor_id: str | None = Field(default=None, max_length=64, alias="actorId")

    model_config = ConfigDict(populate_by_name=True)


class BulkUpdateResponse(BaseModel):
    updated_count: int = Field(alias="updatedCount")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class SimulationRequest(BaseModel):
    base_price: Decimal = Field(gt=Decimal("0"), max_digits=12, decimal_places=2, alias="basePrice")
    category: Category
    days_to_expiry: int | None = Field(default=None, alias="daysToExpiry")

    model_config = ConfigDict(populate_by_name=True)


class SimulationResponse(BaseModel):
    adjusted_price: Decimal = Field(alias="adjustedPrice")
    vat_inclusive_price: Decimal = Field(alias="vatInclusivePrice")
    senior_pwd_price: Decimal | None = Field(default=None, alias="seniorPwdPrice")
    applied_rule_ids: list[int | None] = Field(default_factory=list, alias="appliedRuleIds")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
