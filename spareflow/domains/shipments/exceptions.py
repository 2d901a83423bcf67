"""
Domain-specific exceptions for shipments.
"""

from spareflow.shared.exceptions import BaseHTTPException


class ShipmentException(BaseHTTPException):
    """Base exception for shipment errors."""

    status_code = 400


class ShipmentNotFoundError(ShipmentException):
    status_code = 404
    message = "Shipment not found"


class RecipientNotFoundError(ShipmentException):
    """Raised when the recipient is unknown, inactive or outside the brand's network."""

    status_code = 404
    message = "Recipient not found or not authorized"


class InvalidShipmentStateError(ShipmentException):
    """Raised when an operation is not allowed in the shipment's current status."""

    message = "Operation not allowed in the current shipment status"
