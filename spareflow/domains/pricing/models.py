# spareflow/domains/pricing/models.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from prisma.models import PricingRule
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from spareflow.domains.wallet.models import AffordabilityCheck

from .courier import CourierCostBreakdown
from .rules import (
    PricingAction,
    PricingCondition,
    PricingResult,
    PricingRuleDefinition,
)
from .types import CourierType, ReturnReason, ServiceType

PINCODE_PATTERN = r"^\d{6}$"


class CostEstimateRequest(BaseModel):
    weight: float = Field(gt=0, description="Total weight of all boxes in kg")
    pieces: int = Field(1, ge=1, description="Number of boxes")
    pincode: str = Field(pattern=PINCODE_PATTERN)
    service_type: ServiceType = ServiceType.STANDARD
    courier_type: CourierType = CourierType.FORWARD
    return_reason: Optional[ReturnReason] = None
    declared_value: Decimal = Field(Decimal("0"), ge=0)
    distance: float = Field(0, ge=0)
    customer_tier: str = "regular"
    check_affordability: bool = False

    @field_validator("return_reason")
    @classmethod
    def reverse_only(
        cls, v: Optional[ReturnReason], info: ValidationInfo
    ) -> Optional[ReturnReason]:
        if v is not None and info.data.get("courier_type") != CourierType.REVERSE:
            raise ValueError("return_reason only applies to REVERSE shipments")
        return v


class CostEstimateResponse(BaseModel):
    brand_id: str
    courier: CourierCostBreakdown
    pricing: PricingResult
    total_cost: Decimal
    affordability: Optional[AffordabilityCheck] = None


class BrandRateRequest(BaseModel):
    per_box_rate: Decimal = Field(ge=0)
    is_active: bool = True


class BrandRateResponse(BaseModel):
    brand_id: str
    per_box_rate: Decimal
    is_active: bool


class PricingRuleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    brand_id: Optional[str] = Field(
        None, description="Brand scope; admins may leave empty for a global rule"
    )
    conditions: List[PricingCondition] = Field(default_factory=list)
    actions: List[PricingAction] = Field(min_length=1)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None


class PricingRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
    conditions: Optional[List[PricingCondition]] = None
    actions: Optional[List[PricingAction]] = Field(None, min_length=1)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None


class PricingRuleResponse(PricingRuleDefinition):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, rule: PricingRule) -> "PricingRuleResponse":
        return cls(
            id=rule.id,
            name=rule.name,
            description=rule.description,
            priority=rule.priority,
            is_active=rule.isActive,
            brand_id=rule.brandId,
            conditions=rule.conditions or [],
            actions=rule.actions,
            valid_from=rule.validFrom,
            valid_to=rule.validTo,
            created_at=rule.createdAt,
            updated_at=rule.updatedAt,
        )


class RuleTestContext(BaseModel):
    weight: float = Field(ge=0)
    distance: float = Field(ge=0)
    base_cost: Decimal = Field(ge=0)
    brand_id: str
    volume: float = 1000
    value: Decimal = Decimal("10000")
    destination_pincode: str = "110001"
    service_type: str = "standard"
    customer_tier: str = "regular"
    shipment_time: Optional[datetime] = None
    quantity: int = 1


class RuleTestRequest(BaseModel):
    rule: PricingRuleDefinition
    context: RuleTestContext


class RuleTestResponse(BaseModel):
    applicable: bool
    result: PricingResult
