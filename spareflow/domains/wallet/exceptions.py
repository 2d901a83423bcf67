"""
Domain-specific exceptions for wallets.
"""

from decimal import Decimal

from spareflow.shared.exceptions import BaseHTTPException


class WalletException(BaseHTTPException):
    """Base exception for wallet errors."""

    status_code = 400


class InsufficientBalanceError(WalletException):
    """Raised when a debit exceeds the wallet balance."""

    message = "Insufficient wallet balance"

    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(
            detail={
                "error": self.message,
                "required": float(required),
                "available": float(available),
                "shortfall": float(max(required - available, Decimal("0"))),
            }
        )


class InvalidAmountError(WalletException):
    message = "Amount must be greater than zero"
