"""Pricing domain enumerations shared by the calculators and API models."""

from enum import Enum


class ServiceType(str, Enum):
    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"


class CourierType(str, Enum):
    FORWARD = "FORWARD"
    REVERSE = "REVERSE"


class ReturnReason(str, Enum):
    DEFECTIVE = "DEFECTIVE"
    WRONG_PART = "WRONG_PART"
    EXCESS_STOCK = "EXCESS_STOCK"
    CUSTOMER_RETURN = "CUSTOMER_RETURN"


class CostResponsibility(str, Enum):
    BRAND = "BRAND"
    SERVICE_CENTER = "SERVICE_CENTER"
    DISTRIBUTOR = "DISTRIBUTOR"
    CUSTOMER = "CUSTOMER"


class ConditionType(str, Enum):
    WEIGHT = "weight"
    DISTANCE = "distance"
    VOLUME = "volume"
    VALUE = "value"
    DESTINATION = "destination"
    SERVICE_TYPE = "service_type"
    CUSTOMER_TIER = "customer_tier"
    TIME = "time"
    QUANTITY = "quantity"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"


class ActionType(str, Enum):
    FIXED_PRICE = "fixed_price"
    PERCENTAGE_DISCOUNT = "percentage_discount"
    FIXED_DISCOUNT = "fixed_discount"
    MARKUP = "markup"
    TIER_PRICING = "tier_pricing"
    DYNAMIC_PRICING = "dynamic_pricing"


class ActionTarget(str, Enum):
    BASE_PRICE = "base_price"
    SHIPPING_COST = "shipping_cost"
    TOTAL_COST = "total_cost"
    MARGIN = "margin"
