# spareflow/domains/auth/models.py
from decimal import Decimal
from typing import Optional

from prisma.enums import UserRole
from prisma.models import User
from pydantic import BaseModel


class PublicUser(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    @classmethod
    def from_prisma(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            city=user.city,
            state=user.state,
            pincode=user.pincode,
        )


class SessionState(BaseModel):
    """Current user with the counters the dashboard header shows"""

    user: PublicUser
    wallet_balance: Decimal
    unread_notifications: int
