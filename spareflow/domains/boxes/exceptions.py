"""
Domain-specific exceptions for box allocation.
"""

from spareflow.shared.exceptions import BaseHTTPException


class AllocationError(BaseHTTPException):
    """Raised when parts cannot be arranged into boxes."""

    status_code = 400
    message = "Box allocation failed"


class OversizedItemError(AllocationError):
    """Raised when a single unit exceeds the per-box weight or volume limit."""

    message = "Part exceeds the maximum box weight or volume"


class ManualAllocationMismatchError(AllocationError):
    """Raised when manual boxes do not account for the requested quantities."""

    message = "Manual box allocation does not match requested parts"
