# spareflow/domains/wallet/models.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from prisma.enums import WalletTransactionType
from prisma.models import Wallet, WalletTransaction
from pydantic import BaseModel, Field

from spareflow.shared.models import PaginationMetadata


class WalletResponse(BaseModel):
    userId: str
    balance: Decimal
    totalSpent: Decimal
    totalCredited: Decimal
    lastRecharge: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, wallet: Wallet) -> "WalletResponse":
        return cls(
            userId=wallet.userId,
            balance=wallet.balance,
            totalSpent=wallet.totalSpent,
            totalCredited=wallet.totalCredited,
            lastRecharge=wallet.lastRecharge,
        )


class WalletTransactionResponse(BaseModel):
    id: str
    type: WalletTransactionType
    amount: Decimal
    balanceAfter: Decimal
    description: str
    reference: Optional[str] = None
    shipmentId: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_prisma(cls, txn: WalletTransaction) -> "WalletTransactionResponse":
        return cls(
            id=txn.id,
            type=txn.type,
            amount=txn.amount,
            balanceAfter=txn.balanceAfter,
            description=txn.description,
            reference=txn.reference,
            shipmentId=txn.shipmentId,
            createdAt=txn.createdAt,
        )


class WalletTransactionListResponse(BaseModel):
    transactions: List[WalletTransactionResponse]
    pagination: PaginationMetadata


class AffordabilityCheck(BaseModel):
    sufficient: bool
    current_balance: Decimal
    required: Decimal
    shortfall: Decimal


class CreditRequest(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=2)
    description: str = Field("Wallet recharge", max_length=255)
    reference: Optional[str] = Field(None, description="Payment or receipt reference")
