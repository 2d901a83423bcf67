from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from prisma.enums import NotificationType, WalletTransactionType
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.notifications.service import NotificationService
from spareflow.domains.wallet.models import (
    CreditRequest,
    WalletResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)
from spareflow.domains.wallet.service import WalletService
from spareflow.shared.exceptions import UserNotFoundError
from spareflow.shared.permissions import Permission, require_permission

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get(
    "",
    response_model=WalletResponse,
    operation_id="getWallet",
)
async def get_wallet(
    user: User = Depends(require_permission(Permission.VIEW_WALLET)),
    db: Prisma = Depends(get_db),
) -> WalletResponse:
    return await WalletService(db).get_wallet(user.id)


@router.get(
    "/transactions",
    response_model=WalletTransactionListResponse,
    operation_id="getWalletTransactions",
)
async def get_wallet_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[WalletTransactionType] = Query(None),
    user: User = Depends(require_permission(Permission.VIEW_WALLET)),
    db: Prisma = Depends(get_db),
) -> WalletTransactionListResponse:
    return await WalletService(db).list_transactions(
        user.id, page=page, limit=limit, type=type
    )


@router.post(
    "/{user_id}/credit",
    response_model=WalletTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="creditWallet",
)
async def credit_wallet(
    user_id: str,
    request: CreditRequest,
    admin: User = Depends(require_permission(Permission.CREDIT_WALLET)),
    db: Prisma = Depends(get_db),
) -> WalletTransactionResponse:
    """
    Recharge a user's wallet

    Requires CREDIT_WALLET permission. The wallet owner is notified.
    """
    target = await db.user.find_unique(where={"id": user_id})
    if not target:
        raise UserNotFoundError()

    async with db.tx() as tx:
        txn = await WalletService(tx).credit(
            user_id,
            request.amount,
            request.description,
            reference=request.reference or f"admin:{admin.id}",
            is_recharge=True,
        )
    await NotificationService(db).create(
        user_id,
        NotificationType.WALLET_CREDIT,
        title="Wallet Recharged",
        message=f"Rs.{request.amount} added to your wallet. "
        f"New balance Rs.{txn.balanceAfter}.",
        data={"transactionId": txn.id, "amount": str(request.amount)},
        action_url="/wallet",
    )
    return WalletTransactionResponse.from_prisma(txn)
