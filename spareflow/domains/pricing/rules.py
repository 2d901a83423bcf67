"""
Pricing rule engine.

A rule matches when every one of its conditions holds for the shipment
context. Matching rules run highest priority first; each action adjusts
the running price and records how much it discounted or marked up.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from .types import ActionTarget, ActionType, ConditionOperator, ConditionType

CENT = Decimal("0.01")

# Weight tiers (kg threshold, multiplier on base cost), heaviest first
TIER_MULTIPLIERS: List[Tuple[float, Decimal]] = [
    (20, Decimal("0.85")),
    (10, Decimal("0.90")),
    (5, Decimal("0.95")),
]
PEAK_HOURS = range(9, 19)
PEAK_MULTIPLIER = Decimal("1.1")
OFF_PEAK_MULTIPLIER = Decimal("0.95")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class PricingCondition(BaseModel):
    type: ConditionType
    operator: ConditionOperator
    value: Any
    secondary_value: Optional[Any] = None

    @model_validator(mode="after")
    def check_operands(self) -> "PricingCondition":
        if self.operator == ConditionOperator.BETWEEN and self.secondary_value is None:
            raise ValueError("between requires secondary_value")
        if self.operator in (ConditionOperator.IN, ConditionOperator.NOT_IN):
            if not isinstance(self.value, list):
                raise ValueError(f"{self.operator.value} requires a list value")
        return self


class PricingAction(BaseModel):
    type: ActionType
    value: Decimal = Decimal("0")
    target: ActionTarget = ActionTarget.TOTAL_COST
    conditions: List[PricingCondition] = Field(default_factory=list)


class PricingRuleDefinition(BaseModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    brand_id: Optional[str] = None
    conditions: List[PricingCondition] = Field(default_factory=list)
    actions: List[PricingAction] = Field(min_length=1)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None


class PricingContext(BaseModel):
    """Shipment facts the rule conditions are evaluated against."""

    base_cost: Decimal
    weight: float = 0
    distance: float = 0
    volume: float = 0
    value: Decimal = Decimal("0")
    destination_pincode: str = ""
    service_type: str = "standard"
    customer_tier: str = "regular"
    shipment_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    quantity: int = 1
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None


class AppliedRule(BaseModel):
    rule_id: Optional[str]
    rule_name: str
    discount: Decimal
    markup: Decimal
    targets: List[ActionTarget]
    description: str


class PriceBreakdown(BaseModel):
    base_cost: Decimal
    discounts: Decimal
    markups: Decimal
    taxes: Decimal = Decimal("0")
    final_cost: Decimal


class Margin(BaseModel):
    amount: Decimal
    percentage: Decimal


class PricingResult(BaseModel):
    original_price: Decimal
    final_price: Decimal
    applied_rules: List[AppliedRule]
    breakdown: PriceBreakdown
    margin: Margin


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize(value: Any, numeric: bool) -> Any:
    if numeric:
        return _to_float(value)
    return str(value).strip().lower()


def _context_value(condition_type: ConditionType, context: PricingContext) -> Any:
    if condition_type == ConditionType.WEIGHT:
        return context.weight
    if condition_type == ConditionType.DISTANCE:
        return context.distance
    if condition_type == ConditionType.VOLUME:
        return context.volume
    if condition_type == ConditionType.VALUE:
        return context.value
    if condition_type == ConditionType.DESTINATION:
        return context.destination_pincode
    if condition_type == ConditionType.SERVICE_TYPE:
        return context.service_type
    if condition_type == ConditionType.CUSTOMER_TIER:
        return context.customer_tier
    if condition_type == ConditionType.TIME:
        # Time conditions compare the hour of day
        return context.shipment_time.hour
    return context.quantity


def evaluate_condition(condition: PricingCondition, context: PricingContext) -> bool:
    actual = _context_value(condition.type, context)
    numeric = _to_float(actual) is not None and not isinstance(actual, str)
    operator = condition.operator

    if operator == ConditionOperator.CONTAINS:
        return str(condition.value).lower() in str(actual).lower()

    if operator in (ConditionOperator.IN, ConditionOperator.NOT_IN):
        candidates = [_normalize(v, numeric) for v in condition.value]
        found = _normalize(actual, numeric) in candidates
        return found if operator == ConditionOperator.IN else not found

    if operator == ConditionOperator.EQUALS:
        return _normalize(actual, numeric) == _normalize(condition.value, numeric)

    number = _to_float(actual)
    target = _to_float(condition.value)
    if number is None or target is None:
        return False

    if operator == ConditionOperator.GREATER_THAN:
        return number > target
    if operator == ConditionOperator.LESS_THAN:
        return number < target

    upper = _to_float(condition.secondary_value)
    if upper is None:
        return False
    return target <= number <= upper


def conditions_match(
    conditions: List[PricingCondition], context: PricingContext
) -> bool:
    return all(evaluate_condition(condition, context) for condition in conditions)


def is_rule_in_effect(rule: PricingRuleDefinition, moment: datetime) -> bool:
    if not rule.is_active:
        return False
    moment = _aware(moment)
    if rule.valid_from and _aware(rule.valid_from) > moment:
        return False
    if rule.valid_to and _aware(rule.valid_to) < moment:
        return False
    return True


def _tier_price(context: PricingContext) -> Decimal:
    for threshold, multiplier in TIER_MULTIPLIERS:
        if context.weight > threshold:
            return context.base_cost * multiplier
    return context.base_cost


def _dynamic_price(context: PricingContext, current: Decimal) -> Decimal:
    hour = context.shipment_time.hour
    if hour in PEAK_HOURS:
        return current * PEAK_MULTIPLIER
    if hour >= 22 or hour <= 6:
        return current * OFF_PEAK_MULTIPLIER
    return current


def apply_action(
    action: PricingAction, context: PricingContext, current: Decimal
) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Apply one action to the running price.

    Returns:
        Tuple of (new price, discount amount, markup amount)
    """
    value = action.value
    zero = Decimal("0")

    if action.type == ActionType.PERCENTAGE_DISCOUNT:
        amount = current * abs(value) / 100
        if value > 0:
            return current - amount, amount, zero
        return current + amount, zero, amount

    if action.type == ActionType.FIXED_DISCOUNT:
        if value > 0:
            return max(zero, current - value), min(value, current), zero
        return current + abs(value), zero, abs(value)

    if action.type == ActionType.MARKUP:
        amount = current * value / 100
        return current + amount, zero, amount

    if action.type == ActionType.FIXED_PRICE:
        new_price = value
    elif action.type == ActionType.TIER_PRICING:
        new_price = _tier_price(context)
    else:
        new_price = _dynamic_price(context, current)

    if new_price < current:
        return new_price, current - new_price, zero
    return new_price, zero, new_price - current


def evaluate_rules(
    rules: List[PricingRuleDefinition],
    context: PricingContext,
    at: Optional[datetime] = None,
    enforce_schedule: bool = True,
) -> PricingResult:
    """
    Run every applicable rule against the context's base cost.

    Args:
        rules: Candidate rules, in any order
        context: Shipment facts and base cost
        at: Moment used for validity windows (defaults to the shipment time)
        enforce_schedule: Skip inactive or out-of-window rules; off for dry runs

    Returns:
        PricingResult with the final price, applied rules and margin
    """
    moment = at or context.shipment_time
    price = context.base_cost
    total_discount = Decimal("0")
    total_markup = Decimal("0")
    applied: List[AppliedRule] = []

    for rule in sorted(rules, key=lambda r: r.priority, reverse=True):
        if enforce_schedule and not is_rule_in_effect(rule, moment):
            continue
        if not conditions_match(rule.conditions, context):
            continue

        rule_discount = Decimal("0")
        rule_markup = Decimal("0")
        targets: List[ActionTarget] = []
        for action in rule.actions:
            if not conditions_match(action.conditions, context):
                continue
            price, discount, markup = apply_action(action, context, price)
            rule_discount += discount
            rule_markup += markup
            targets.append(action.target)

        if not targets:
            continue

        total_discount += rule_discount
        total_markup += rule_markup
        applied.append(
            AppliedRule(
                rule_id=rule.id,
                rule_name=rule.name,
                discount=quantize(rule_discount),
                markup=quantize(rule_markup),
                targets=targets,
                description=rule.description or rule.name,
            )
        )

    final_price = quantize(price)
    base_cost = quantize(context.base_cost)
    margin_amount = final_price - base_cost
    margin_percentage = (
        quantize(margin_amount / base_cost * 100) if base_cost else Decimal("0")
    )

    return PricingResult(
        original_price=base_cost,
        final_price=final_price,
        applied_rules=applied,
        breakdown=PriceBreakdown(
            base_cost=base_cost,
            discounts=quantize(total_discount),
            markups=quantize(total_markup),
            final_cost=final_price,
        ),
        margin=Margin(amount=margin_amount, percentage=margin_percentage),
    )
