"""
Domain-specific exceptions for brand inventory.
"""

from typing import Any, Dict, List

from spareflow.shared.exceptions import BaseHTTPException


class InventoryException(BaseHTTPException):
    """Base exception for inventory errors."""

    status_code = 400


class InsufficientStockError(InventoryException):
    """Raised when available stock does not cover the requested quantities."""

    message = "Insufficient stock"

    def __init__(self, stock_issues: List[Dict[str, Any]]) -> None:
        self.stock_issues = stock_issues
        super().__init__(
            detail={"error": self.message, "stockIssues": stock_issues}
        )


class InventoryNotFoundError(InventoryException):
    status_code = 404
    message = "No inventory record for this part"


class InvalidAdjustmentError(InventoryException):
    message = "Invalid stock adjustment"
