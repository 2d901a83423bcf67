"""
Domain-specific exceptions for the parts catalogue.
"""

from spareflow.shared.exceptions import BaseHTTPException


class DuplicatePartCodeError(BaseHTTPException):
    """Raised when a brand already has a part with the same code."""

    status_code = 409
    message = "A part with this code already exists"
