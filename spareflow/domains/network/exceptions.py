"""
Domain-specific exceptions for a brand's authorized network.
"""

from spareflow.shared.exceptions import BaseHTTPException


class NetworkException(BaseHTTPException):
    """Base exception for network errors."""

    status_code = 400


class PartnerNotFoundError(NetworkException):
    status_code = 404
    message = "Authorization not found"


class PartnerAlreadyAuthorizedError(NetworkException):
    """Raised when the partner is already active in the brand's network."""

    status_code = 409
    message = "Partner is already in the authorized network"
