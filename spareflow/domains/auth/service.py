from decimal import Decimal

from prisma.models import User

from prisma import Prisma
from spareflow.domains.auth.models import PublicUser, SessionState


class SessionService:
    """Service for session-related operations"""

    def __init__(self, db: Prisma):
        self.db = db

    async def get_session_state(self, user: User) -> SessionState:
        """
        Get session state for a user

        Args:
            user: Authenticated user

        Returns:
            SessionState with user info, wallet balance and unread count
        """
        wallet = await self.db.wallet.find_unique(where={"userId": user.id})
        unread = await self.db.notification.count(
            where={"userId": user.id, "isRead": False}
        )
        return SessionState(
            user=PublicUser.from_prisma(user),
            wallet_balance=wallet.balance if wallet else Decimal("0"),
            unread_notifications=unread,
        )
