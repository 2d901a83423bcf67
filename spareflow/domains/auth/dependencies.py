# spareflow/domains/auth/dependencies.py
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Header, HTTPException, status
from prisma.enums import UserStatus
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.core.settings import settings
from spareflow.shared.exceptions import InactiveUserError

from .types import JwtPayload


def create_access_token(user: User) -> str:
    """
    Issue an HS256 access token for a user.

    Used by the seed script to hand out development tokens; production
    tokens are issued by the identity provider with the same secret.
    """
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication not configured",
        )
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.JWT_EXPIRY_DAYS)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_access_token(token: str) -> JwtPayload:
    """
    Verifies a JWT token signed with JWT_SECRET.
    """
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication not configured",
        )
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
        return JwtPayload(**dict(payload))
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_user_id(authorization: str = Header(None)) -> str:
    """
    Extracts and validates the JWT from the Authorization header.
    Returns the user's ID.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token"
        )

    token = authorization.split(" ")[1]
    payload = decode_access_token(token)
    if not payload.user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return payload.user_id


async def get_current_user(
    user_id: str = Depends(get_user_id), db: Prisma = Depends(get_db)
) -> User:
    """
    Loads the authenticated user, who must still be active.
    """
    user = await db.user.find_unique(where={"id": user_id})
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user"
        )
    if user.status != UserStatus.ACTIVE:
        raise InactiveUserError()
    return user
