from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

from .courier import PricingConfig
from .models import (
    BrandRateRequest,
    BrandRateResponse,
    CostEstimateRequest,
    CostEstimateResponse,
    PricingRuleCreate,
    PricingRuleResponse,
    PricingRuleUpdate,
    RuleTestRequest,
    RuleTestResponse,
)
from .service import PricingService

router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.post(
    "/estimate",
    response_model=CostEstimateResponse,
    operation_id="estimateShippingCost",
)
async def estimate_cost(
    request: CostEstimateRequest,
    brand_id: Optional[str] = Query(None, description="Brand to price for (admins)"),
    user: User = Depends(require_permission(Permission.ESTIMATE_COST)),
    db: Prisma = Depends(get_db),
) -> CostEstimateResponse:
    """
    Estimate the shipping charge for a consignment

    Brands always price for themselves; admins must name the brand.
    """
    return await PricingService(db).estimate(resolve_brand_id(user, brand_id), request)


@router.get(
    "/config",
    response_model=PricingConfig,
    operation_id="getPricingConfig",
)
async def get_config(
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_CONFIG)),
    db: Prisma = Depends(get_db),
) -> PricingConfig:
    return await PricingService(db).get_config()


@router.put(
    "/config",
    response_model=PricingConfig,
    operation_id="updatePricingConfig",
)
async def update_config(
    config: PricingConfig,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_CONFIG)),
    db: Prisma = Depends(get_db),
) -> PricingConfig:
    return await PricingService(db).update_config(config)


@router.put(
    "/overrides/{brand_id}",
    response_model=BrandRateResponse,
    operation_id="setBrandCourierRate",
)
async def set_brand_rate(
    brand_id: str,
    request: BrandRateRequest,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_CONFIG)),
    db: Prisma = Depends(get_db),
) -> BrandRateResponse:
    return await PricingService(db).set_brand_rate(brand_id, request)


@router.delete(
    "/overrides/{brand_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="removeBrandCourierRate",
)
async def remove_brand_rate(
    brand_id: str,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_CONFIG)),
    db: Prisma = Depends(get_db),
) -> None:
    await PricingService(db).remove_brand_rate(brand_id)


@router.get(
    "/rules",
    response_model=List[PricingRuleResponse],
    operation_id="getPricingRules",
)
async def list_rules(
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_RULES)),
    db: Prisma = Depends(get_db),
) -> List[PricingRuleResponse]:
    return await PricingService(db).list_rules(user)


@router.post(
    "/rules",
    response_model=PricingRuleResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createPricingRule",
)
async def create_rule(
    payload: PricingRuleCreate,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_RULES)),
    db: Prisma = Depends(get_db),
) -> PricingRuleResponse:
    return await PricingService(db).create_rule(user, payload)


@router.post(
    "/rules/test",
    response_model=RuleTestResponse,
    operation_id="testPricingRule",
)
async def dry_run_rule(
    request: RuleTestRequest,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_RULES)),
    db: Prisma = Depends(get_db),
) -> RuleTestResponse:
    """Dry-run a rule against a sample shipment without saving it"""
    return PricingService(db).dry_run_rule(request)


@router.patch(
    "/rules/{rule_id}",
    response_model=PricingRuleResponse,
    operation_id="updatePricingRule",
)
async def update_rule(
    rule_id: str,
    payload: PricingRuleUpdate,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_RULES)),
    db: Prisma = Depends(get_db),
) -> PricingRuleResponse:
    return await PricingService(db).update_rule(user, rule_id, payload)


@router.delete(
    "/rules/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deletePricingRule",
)
async def delete_rule(
    rule_id: str,
    user: User = Depends(require_permission(Permission.MANAGE_PRICING_RULES)),
    db: Prisma = Depends(get_db),
) -> None:
    await PricingService(db).delete_rule(user, rule_id)
