"""Auth domain type definitions for type safety."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class JwtPayload(BaseModel):
    """Access token payload structure."""

    # Standard JWT claims
    sub: Optional[str] = Field(None, description="Subject (user ID)")
    iss: Optional[str] = Field(None, description="Token issuer")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")

    # Application claims
    email: Optional[str] = Field(None, description="User email address")
    role: Optional[str] = Field(None, description="User role at issue time")

    # Legacy payloads carried the user under these keys
    userId: Optional[str] = Field(None, description="Legacy user ID claim")
    user: Optional[dict[str, Any]] = Field(None, description="Legacy user claim")

    model_config = {"extra": "allow"}

    @property
    def user_id(self) -> Optional[str]:
        if self.sub:
            return self.sub
        if self.userId:
            return self.userId
        if self.user and self.user.get("id"):
            return str(self.user["id"])
        return None
