import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from prisma.enums import UserRole
from prisma.models import User
from prisma.types import PricingRuleWhereInput
from pydantic import ValidationError

from prisma import Json, Prisma
from spareflow.domains.wallet.service import WalletService
from spareflow.shared.exceptions import NotAuthorizedError, UserNotFoundError

from .courier import CourierCostBreakdown, PricingConfig, calculate_courier_cost
from .exceptions import (
    InvalidPricingRuleError,
    PricingConfigError,
    PricingRuleNotFoundError,
)
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
from .rules import PricingContext, PricingRuleDefinition, evaluate_rules
from .types import CourierType, ReturnReason, ServiceType

logger = logging.getLogger(__name__)

PRICING_CONFIG_KEY = "unified_pricing"


class PricingService:
    """Courier tariff, brand overrides and pricing rules."""

    def __init__(self, db: Prisma):
        self.db = db

    # Tariff configuration

    async def get_config(self) -> PricingConfig:
        row = await self.db.systemconfig.find_unique(where={"key": PRICING_CONFIG_KEY})
        stored = row.value if row and isinstance(row.value, dict) else None
        try:
            return PricingConfig.merged_with_defaults(stored)
        except ValidationError as e:
            logger.error(f"Stored pricing configuration is invalid: {e}")
            raise PricingConfigError()

    async def update_config(self, config: PricingConfig) -> PricingConfig:
        value = Json(config.model_dump(mode="json"))
        await self.db.systemconfig.upsert(
            where={"key": PRICING_CONFIG_KEY},
            data={
                "create": {
                    "key": PRICING_CONFIG_KEY,
                    "value": value,
                    "description": "Unified courier pricing configuration",
                },
                "update": {"value": value},
            },
        )
        logger.info("Unified pricing configuration updated")
        return config

    async def get_brand_rate(self, brand_id: str) -> Optional[Decimal]:
        override = await self.db.courierpricing.find_unique(where={"brandId": brand_id})
        if override and override.isActive:
            return override.perBoxRate
        return None

    async def set_brand_rate(
        self, brand_id: str, request: BrandRateRequest
    ) -> BrandRateResponse:
        brand = await self.db.user.find_unique(where={"id": brand_id})
        if not brand or brand.role != UserRole.BRAND:
            raise UserNotFoundError()

        row = await self.db.courierpricing.upsert(
            where={"brandId": brand_id},
            data={
                "create": {
                    "brandId": brand_id,
                    "perBoxRate": request.per_box_rate,
                    "isActive": request.is_active,
                },
                "update": {
                    "perBoxRate": request.per_box_rate,
                    "isActive": request.is_active,
                },
            },
        )
        return BrandRateResponse(
            brand_id=row.brandId, per_box_rate=row.perBoxRate, is_active=row.isActive
        )

    async def remove_brand_rate(self, brand_id: str) -> None:
        await self.db.courierpricing.delete_many(where={"brandId": brand_id})

    # Cost estimation

    async def calculate_courier_cost(
        self,
        brand_id: str,
        total_weight: float,
        pieces: int,
        pincode: str,
        service_type: ServiceType = ServiceType.STANDARD,
        courier_type: CourierType = CourierType.FORWARD,
        return_reason: Optional[ReturnReason] = None,
    ) -> CourierCostBreakdown:
        config = await self.get_config()
        brand_rate = (
            await self.get_brand_rate(brand_id)
            if courier_type == CourierType.FORWARD
            else None
        )
        return calculate_courier_cost(
            config,
            total_weight=total_weight,
            pieces=pieces,
            pincode=pincode,
            service_type=service_type,
            courier_type=courier_type,
            return_reason=return_reason,
            brand_rate=brand_rate,
        )

    async def load_rules(self, brand_id: str) -> List[PricingRuleDefinition]:
        """Active rules scoped to the brand plus global rules."""
        rows = await self.db.pricingrule.find_many(
            where={
                "isActive": True,
                "OR": [{"brandId": brand_id}, {"brandId": None}],
            },
            order={"priority": "desc"},
        )
        return [PricingRuleResponse.from_prisma(row) for row in rows]

    async def estimate(
        self,
        brand_id: str,
        request: CostEstimateRequest,
        shipment_time: Optional[datetime] = None,
    ) -> CostEstimateResponse:
        """
        Estimate the charge for a consignment

        The courier tariff gives the base cost; the brand's and global
        pricing rules then adjust it.

        Args:
            brand_id: Brand being charged
            request: Weight, boxes, destination and service options
            shipment_time: Moment used for time-based rules (defaults to now)

        Returns:
            CostEstimateResponse with courier and rule breakdowns
        """
        courier = await self.calculate_courier_cost(
            brand_id,
            request.weight,
            request.pieces,
            request.pincode,
            request.service_type,
            request.courier_type,
            request.return_reason,
        )
        context = PricingContext(
            base_cost=courier.total_cost,
            weight=request.weight,
            distance=request.distance,
            value=request.declared_value,
            destination_pincode=request.pincode,
            service_type=request.service_type.value.lower(),
            customer_tier=request.customer_tier,
            shipment_time=shipment_time or datetime.now(timezone.utc),
            quantity=request.pieces,
            brand_id=brand_id,
        )
        pricing = evaluate_rules(await self.load_rules(brand_id), context)

        affordability = None
        if request.check_affordability:
            affordability = await WalletService(self.db).check_balance(
                brand_id, pricing.final_price
            )

        return CostEstimateResponse(
            brand_id=brand_id,
            courier=courier,
            pricing=pricing,
            total_cost=pricing.final_price,
            affordability=affordability,
        )

    # Rule management

    async def list_rules(self, user: User) -> List[PricingRuleResponse]:
        where_input: PricingRuleWhereInput = {}
        if user.role != UserRole.SUPER_ADMIN:
            where_input["brandId"] = user.id
        rows = await self.db.pricingrule.find_many(
            where=where_input, order={"priority": "desc"}
        )
        return [PricingRuleResponse.from_prisma(row) for row in rows]

    async def create_rule(
        self, user: User, payload: PricingRuleCreate
    ) -> PricingRuleResponse:
        brand_id = payload.brand_id
        if user.role != UserRole.SUPER_ADMIN:
            # Brands can only create rules for themselves
            brand_id = user.id
        self._check_window(payload.valid_from, payload.valid_to)

        data: Dict[str, Any] = {
            "name": payload.name,
            "description": payload.description,
            "priority": payload.priority,
            "isActive": payload.is_active,
            "brandId": brand_id,
            "conditions": Json([c.model_dump(mode="json") for c in payload.conditions]),
            "actions": Json([a.model_dump(mode="json") for a in payload.actions]),
        }
        if payload.valid_from:
            data["validFrom"] = payload.valid_from
        if payload.valid_to:
            data["validTo"] = payload.valid_to

        row = await self.db.pricingrule.create(data=data)  # type: ignore[arg-type]
        logger.info(f"Pricing rule {row.id} '{row.name}' created by {user.id}")
        return PricingRuleResponse.from_prisma(row)

    async def update_rule(
        self, user: User, rule_id: str, payload: PricingRuleUpdate
    ) -> PricingRuleResponse:
        existing = await self._get_owned_rule(user, rule_id)
        self._check_window(
            payload.valid_from or existing.validFrom,
            payload.valid_to or existing.validTo,
        )

        data: Dict[str, Any] = {}
        if payload.name is not None:
            data["name"] = payload.name
        if payload.description is not None:
            data["description"] = payload.description
        if payload.priority is not None:
            data["priority"] = payload.priority
        if payload.is_active is not None:
            data["isActive"] = payload.is_active
        if payload.conditions is not None:
            data["conditions"] = Json(
                [c.model_dump(mode="json") for c in payload.conditions]
            )
        if payload.actions is not None:
            data["actions"] = Json([a.model_dump(mode="json") for a in payload.actions])
        if payload.valid_from is not None:
            data["validFrom"] = payload.valid_from
        if payload.valid_to is not None:
            data["validTo"] = payload.valid_to

        row = await self.db.pricingrule.update(
            where={"id": rule_id}, data=data  # type: ignore[arg-type]
        )
        if not row:
            raise PricingRuleNotFoundError()
        return PricingRuleResponse.from_prisma(row)

    async def delete_rule(self, user: User, rule_id: str) -> None:
        await self._get_owned_rule(user, rule_id)
        await self.db.pricingrule.delete(where={"id": rule_id})
        logger.info(f"Pricing rule {rule_id} deleted by {user.id}")

    def dry_run_rule(self, request: RuleTestRequest) -> RuleTestResponse:
        """Dry-run a rule against a sample context, ignoring its schedule."""
        ctx = request.context
        context = PricingContext(
            base_cost=ctx.base_cost,
            weight=ctx.weight,
            distance=ctx.distance,
            volume=ctx.volume,
            value=ctx.value,
            destination_pincode=ctx.destination_pincode,
            service_type=ctx.service_type,
            customer_tier=ctx.customer_tier,
            shipment_time=ctx.shipment_time or datetime.now(timezone.utc),
            quantity=ctx.quantity,
            brand_id=ctx.brand_id,
        )
        result = evaluate_rules([request.rule], context, enforce_schedule=False)
        return RuleTestResponse(applicable=bool(result.applied_rules), result=result)

    async def _get_owned_rule(self, user: User, rule_id: str) -> Any:
        rule = await self.db.pricingrule.find_unique(where={"id": rule_id})
        if not rule:
            raise PricingRuleNotFoundError()
        if user.role != UserRole.SUPER_ADMIN and rule.brandId != user.id:
            raise NotAuthorizedError()
        return rule

    @staticmethod
    def _check_window(
        valid_from: Optional[datetime], valid_to: Optional[datetime]
    ) -> None:
        if valid_from and valid_to:
            start = valid_from.replace(tzinfo=valid_from.tzinfo or timezone.utc)
            end = valid_to.replace(tzinfo=valid_to.tzinfo or timezone.utc)
            if end < start:
                raise InvalidPricingRuleError("valid_to must be after valid_from")
