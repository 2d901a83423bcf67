"""
Courier cost calculation for forward and reverse shipments.

The tariff is charged per box with a free weight allowance per box,
an express multiplier, a remote-area surcharge and a platform markup,
floored at a minimum charge.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .rules import quantize
from .types import CostResponsibility, CourierType, ReturnReason, ServiceType

DEFAULT_REMOTE_PINCODE_PREFIXES = ["79", "18", "37", "85", "86", "87", "88", "89"]

RETURN_REASON_RESPONSIBILITY: Dict[ReturnReason, CostResponsibility] = {
    ReturnReason.DEFECTIVE: CostResponsibility.BRAND,
    ReturnReason.WRONG_PART: CostResponsibility.BRAND,
    ReturnReason.EXCESS_STOCK: CostResponsibility.SERVICE_CENTER,
    ReturnReason.CUSTOMER_RETURN: CostResponsibility.CUSTOMER,
}


class TariffConfig(BaseModel):
    default_rate: Decimal = Field(ge=0, description="Rate per box")
    weight_rate_per_kg: Decimal = Field(ge=0)
    minimum_charge: Decimal = Field(ge=0)
    free_weight_limit: float = Field(ge=0, description="Free kg per box")
    markup_percentage: Decimal = Field(ge=0)
    remote_area_surcharge: Decimal = Field(ge=0, description="Surcharge per box")
    express_multiplier: Decimal = Field(ge=1)
    standard_multiplier: Decimal = Field(Decimal("1"), ge=1)


class ReverseTariffConfig(TariffConfig):
    return_reason_rates: Dict[ReturnReason, Decimal] = Field(default_factory=dict)


DEFAULT_FORWARD_TARIFF = TariffConfig(
    default_rate=Decimal("50"),
    weight_rate_per_kg=Decimal("25"),
    minimum_charge=Decimal("75"),
    free_weight_limit=0.5,
    markup_percentage=Decimal("15"),
    remote_area_surcharge=Decimal("25"),
    express_multiplier=Decimal("1.5"),
)

DEFAULT_REVERSE_TARIFF = ReverseTariffConfig(
    default_rate=Decimal("45"),
    weight_rate_per_kg=Decimal("25"),
    minimum_charge=Decimal("50"),
    free_weight_limit=0.5,
    markup_percentage=Decimal("10"),
    remote_area_surcharge=Decimal("25"),
    express_multiplier=Decimal("1.5"),
    return_reason_rates={
        ReturnReason.DEFECTIVE: Decimal("0"),
        ReturnReason.WRONG_PART: Decimal("0"),
        ReturnReason.EXCESS_STOCK: Decimal("50"),
        ReturnReason.CUSTOMER_RETURN: Decimal("60"),
    },
)


class PricingConfig(BaseModel):
    forward: TariffConfig = Field(
        default_factory=lambda: DEFAULT_FORWARD_TARIFF.model_copy(deep=True)
    )
    reverse: ReverseTariffConfig = Field(
        default_factory=lambda: DEFAULT_REVERSE_TARIFF.model_copy(deep=True)
    )
    remote_pincode_prefixes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_REMOTE_PINCODE_PREFIXES)
    )

    @classmethod
    def merged_with_defaults(cls, stored: Optional[Dict[str, Any]]) -> "PricingConfig":
        """Overlay a stored (possibly partial) configuration on the defaults."""
        merged = _deep_merge(cls().model_dump(mode="json"), stored or {})
        return cls.model_validate(merged)


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class CourierCostBreakdown(BaseModel):
    base_rate: Decimal
    rate_per_box: Decimal
    weight_charges: Decimal
    service_charges: Decimal
    remote_area_surcharge: Decimal
    subtotal: Decimal
    platform_markup: Decimal
    minimum_charge_applied: bool
    total_cost: Decimal
    total_weight: float
    pieces: int
    is_remote_area: bool
    courier_type: CourierType
    service_type: ServiceType
    cost_responsibility: CostResponsibility
    applied_rules: List[str]


def is_remote_area(pincode: str, prefixes: Optional[List[str]] = None) -> bool:
    prefixes = DEFAULT_REMOTE_PINCODE_PREFIXES if prefixes is None else prefixes
    return any(pincode.startswith(prefix) for prefix in prefixes)


def calculate_courier_cost(
    config: PricingConfig,
    *,
    total_weight: float,
    pieces: int,
    pincode: str,
    service_type: ServiceType = ServiceType.STANDARD,
    courier_type: CourierType = CourierType.FORWARD,
    return_reason: Optional[ReturnReason] = None,
    brand_rate: Optional[Decimal] = None,
) -> CourierCostBreakdown:
    """
    Price a consignment of `pieces` boxes weighing `total_weight` kg.

    Args:
        config: Tariff configuration
        total_weight: Combined weight of all boxes in kg
        pieces: Number of boxes
        pincode: Destination pincode
        service_type: STANDARD or EXPRESS
        courier_type: FORWARD or REVERSE
        return_reason: Reason for reverse shipments, sets the rate and payer
        brand_rate: Active per-box override for the brand (forward only)

    Returns:
        CourierCostBreakdown with money rounded to 2 decimal places
    """
    if pieces < 1:
        raise ValueError("pieces must be at least 1")

    applied: List[str] = [
        f"Using unified pricing configuration ({courier_type.value} courier)"
    ]
    tariff: TariffConfig
    responsibility = CostResponsibility.BRAND

    if courier_type == CourierType.REVERSE:
        tariff = config.reverse
        rate = config.reverse.default_rate
        if return_reason is not None:
            responsibility = RETURN_REASON_RESPONSIBILITY[return_reason]
            applied.append(
                f"Cost responsibility: {responsibility.value} "
                f"({return_reason.value.lower().replace('_', ' ')})"
            )
            if return_reason in config.reverse.return_reason_rates:
                rate = config.reverse.return_reason_rates[return_reason]
                applied.append(
                    f"{return_reason.value.replace('_', ' ').title()} rate: "
                    f"Rs.{rate}/box"
                )
            else:
                applied.append(f"Default reverse rate: Rs.{rate}/box")
        else:
            applied.append(f"Default reverse rate: Rs.{rate}/box")
    else:
        tariff = config.forward
        if brand_rate is not None:
            rate = brand_rate
            applied.append(f"Brand-specific forward rate: Rs.{rate}/box")
        else:
            rate = config.forward.default_rate
            applied.append(f"Default forward rate: Rs.{rate}/box")

    base_rate = rate * pieces
    applied.append(f"Base cost: Rs.{rate} x {pieces} pieces = Rs.{quantize(base_rate)}")

    excess_weight = max(0.0, total_weight - tariff.free_weight_limit * pieces)
    weight_charges = Decimal(str(round(excess_weight, 3))) * tariff.weight_rate_per_kg
    if excess_weight > 0:
        applied.append(
            f"Weight charges: {excess_weight:.2f}kg x Rs.{tariff.weight_rate_per_kg}/kg"
            f" = Rs.{quantize(weight_charges)}"
        )
    else:
        applied.append(
            "No weight charges (within free limit of "
            f"{tariff.free_weight_limit}kg per piece)"
        )

    multiplier = (
        tariff.express_multiplier
        if service_type == ServiceType.EXPRESS
        else tariff.standard_multiplier
    )
    service_charges = (base_rate + weight_charges) * (multiplier - 1)
    if service_type == ServiceType.EXPRESS:
        applied.append(
            f"Express service multiplier: {multiplier}x "
            f"(additional Rs.{quantize(service_charges)})"
        )
    else:
        applied.append("Standard service: no additional charges")

    remote = is_remote_area(pincode, config.remote_pincode_prefixes)
    remote_surcharge = tariff.remote_area_surcharge * pieces if remote else Decimal("0")
    if remote:
        applied.append(
            f"Remote area surcharge: Rs.{tariff.remote_area_surcharge} x {pieces} "
            f"pieces = Rs.{quantize(remote_surcharge)}"
        )
    else:
        applied.append("No remote area surcharge")

    subtotal = base_rate + weight_charges + service_charges + remote_surcharge
    markup = subtotal * tariff.markup_percentage / 100
    applied.append(
        f"Platform markup: {tariff.markup_percentage}% of Rs.{quantize(subtotal)}"
        f" = Rs.{quantize(markup)}"
    )

    total = subtotal + markup
    minimum_applied = total < tariff.minimum_charge
    if minimum_applied:
        applied.append(
            f"Minimum charge applied: Rs.{tariff.minimum_charge} "
            f"(was Rs.{quantize(total)})"
        )
        total = tariff.minimum_charge
    else:
        applied.append(f"Final cost: Rs.{quantize(total)}")

    return CourierCostBreakdown(
        base_rate=quantize(base_rate),
        rate_per_box=quantize(rate),
        weight_charges=quantize(weight_charges),
        service_charges=quantize(service_charges),
        remote_area_surcharge=quantize(remote_surcharge),
        subtotal=quantize(subtotal),
        platform_markup=quantize(markup),
        minimum_charge_applied=minimum_applied,
        total_cost=quantize(total),
        total_weight=total_weight,
        pieces=pieces,
        is_remote_area=remote,
        courier_type=courier_type,
        service_type=service_type,
        cost_responsibility=responsibility,
        applied_rules=applied,
    )
