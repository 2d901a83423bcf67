"""
Domain-specific exceptions for the courier integration.
"""

from spareflow.shared.exceptions import BaseHTTPException


class CourierError(BaseHTTPException):
    """Base exception for courier failures."""

    status_code = 502
    message = "Courier request failed"


class CourierNotConfiguredError(CourierError):
    status_code = 503
    message = "Courier integration is not configured"


class CourierAuthenticationError(CourierError):
    message = "Courier rejected the configured credentials"


class CourierUnavailableError(CourierError):
    message = "Courier service is unavailable"


class CourierRequestError(CourierError):
    """Raised when the courier rejects the request payload."""

    status_code = 400
    message = "Courier rejected the request"


class CourierValidationError(CourierRequestError):
    """Raised before calling the courier when consignment details are incomplete."""

    message = "Invalid consignment details"
