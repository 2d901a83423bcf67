"""
Domain-specific exceptions for pricing.
"""

from spareflow.shared.exceptions import BaseHTTPException


class PricingException(BaseHTTPException):
    """Base exception for pricing errors."""

    status_code = 400


class PricingRuleNotFoundError(PricingException):
    status_code = 404
    message = "Pricing rule not found"


class InvalidPricingRuleError(PricingException):
    message = "Invalid pricing rule"


class PricingConfigError(PricingException):
    status_code = 500
    message = "Stored pricing configuration is invalid"
