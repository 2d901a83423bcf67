import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from prisma.enums import WalletTransactionType
from prisma.models import Wallet, WalletTransaction
from prisma.types import WalletTransactionWhereInput

from prisma import Prisma
from spareflow.domains.wallet.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
)
from spareflow.domains.wallet.models import (
    AffordabilityCheck,
    WalletResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)
from spareflow.shared.models import PaginationMetadata

logger = logging.getLogger(__name__)


class WalletService:
    """
    Prepaid wallet ledger.

    Every balance change writes a WalletTransaction carrying the balance
    after the change. Debits and credits run against whichever client the
    service was built with, so passing a transaction client makes them part
    of the caller's transaction.
    """

    def __init__(self, db: Prisma):
        self.db = db

    async def get_or_create_wallet(self, user_id: str) -> Wallet:
        wallet = await self.db.wallet.find_unique(where={"userId": user_id})
        if wallet:
            return wallet
        logger.info(f"Creating wallet for user {user_id}")
        return await self.db.wallet.create(data={"userId": user_id})

    async def get_wallet(self, user_id: str) -> WalletResponse:
        return WalletResponse.from_prisma(await self.get_or_create_wallet(user_id))

    async def check_balance(self, user_id: str, amount: Decimal) -> AffordabilityCheck:
        """
        Check whether the wallet covers an amount

        Args:
            user_id: Wallet owner
            amount: Amount to be charged

        Returns:
            AffordabilityCheck with the shortfall when the balance is short
        """
        wallet = await self.get_or_create_wallet(user_id)
        shortfall = max(amount - wallet.balance, Decimal("0"))
        return AffordabilityCheck(
            sufficient=shortfall == 0,
            current_balance=wallet.balance,
            required=amount,
            shortfall=shortfall,
        )

    async def debit(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference: Optional[str] = None,
        shipment_id: Optional[str] = None,
    ) -> WalletTransaction:
        """
        Deduct an amount from a wallet

        Args:
            user_id: Wallet owner
            amount: Positive amount to deduct
            description: Ledger description
            reference: External reference (AWB, invoice)
            shipment_id: Shipment the charge belongs to

        Returns:
            The DEBIT WalletTransaction

        Raises:
            InvalidAmountError: If amount is not positive
            InsufficientBalanceError: If the balance does not cover the amount
        """
        if amount <= 0:
            raise InvalidAmountError()

        wallet = await self.get_or_create_wallet(user_id)
        if wallet.balance < amount:
            raise InsufficientBalanceError(required=amount, available=wallet.balance)

        # Conditional update so a concurrent debit cannot overdraw
        updated = await self.db.wallet.update_many(
            where={"id": wallet.id, "balance": {"gte": amount}},
            data={
                "balance": {"decrement": amount},
                "totalSpent": {"increment": amount},
            },
        )
        if updated == 0:
            current = await self.db.wallet.find_unique(where={"id": wallet.id})
            raise InsufficientBalanceError(
                required=amount,
                available=current.balance if current else Decimal("0"),
            )

        return await self._record(
            wallet.id,
            user_id,
            WalletTransactionType.DEBIT,
            amount,
            description,
            reference,
            shipment_id,
        )

    async def credit(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference: Optional[str] = None,
        shipment_id: Optional[str] = None,
        is_recharge: bool = False,
    ) -> WalletTransaction:
        """Add an amount to a wallet; refunds and recharges both land here."""
        if amount <= 0:
            raise InvalidAmountError()

        wallet = await self.get_or_create_wallet(user_id)
        data = {
            "balance": {"increment": amount},
            "totalCredited": {"increment": amount},
        }
        if is_recharge:
            data["lastRecharge"] = datetime.now(timezone.utc)
        updated = await self.db.wallet.update(
            where={"id": wallet.id},
            data=data,  # type: ignore[arg-type]
        )

        return await self._record(
            wallet.id,
            user_id,
            WalletTransactionType.CREDIT,
            amount,
            description,
            reference,
            shipment_id,
            balance_after=updated.balance if updated else None,
        )

    async def _record(
        self,
        wallet_id: str,
        user_id: str,
        type: WalletTransactionType,
        amount: Decimal,
        description: str,
        reference: Optional[str],
        shipment_id: Optional[str],
        balance_after: Optional[Decimal] = None,
    ) -> WalletTransaction:
        if balance_after is None:
            wallet = await self.db.wallet.find_unique(where={"id": wallet_id})
            balance_after = wallet.balance if wallet else Decimal("0")
        txn = await self.db.wallettransaction.create(
            data={
                "walletId": wallet_id,
                "userId": user_id,
                "type": type,
                "amount": amount,
                "balanceAfter": balance_after,
                "description": description,
                "reference": reference,
                "shipmentId": shipment_id,
            }
        )
        logger.info(
            f"Wallet {type} of {amount} for user {user_id}, balance {balance_after}"
        )
        return txn

    async def list_transactions(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        type: Optional[WalletTransactionType] = None,
    ) -> WalletTransactionListResponse:
        where_input: WalletTransactionWhereInput = {"userId": user_id}
        if type:
            where_input["type"] = type

        transactions = await self.db.wallettransaction.find_many(
            where=where_input,
            skip=(page - 1) * limit,
            take=limit,
            order={"createdAt": "desc"},
        )
        total = await self.db.wallettransaction.count(where=where_input)

        return WalletTransactionListResponse(
            transactions=[
                WalletTransactionResponse.from_prisma(t) for t in transactions
            ],
            pagination=PaginationMetadata.build(page, limit, total),
        )
