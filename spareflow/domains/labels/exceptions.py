"""
Domain-specific exceptions for shipping labels.
"""

from spareflow.shared.exceptions import BaseHTTPException


class LabelException(BaseHTTPException):
    """Base exception for label errors."""

    status_code = 400


class BoxNotFoundError(LabelException):
    status_code = 404
    message = "Box not found"


class LabelUnavailableError(LabelException):
    """Raised when a courier label is requested before the AWB exists."""

    message = "Cannot fetch a courier label without an AWB number"


class LabelStorageError(LabelException):
    status_code = 502
    message = "Label storage request failed"
