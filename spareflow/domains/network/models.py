# spareflow/domains/network/models.py
from datetime import datetime
from typing import List, Optional

from prisma.enums import AuthorizationStatus, UserRole, UserStatus
from prisma.models import BrandAuthorization, User
from pydantic import BaseModel, Field


class NetworkUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    @classmethod
    def from_prisma(cls, user: User) -> "NetworkUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            status=user.status,
            city=user.city,
            state=user.state,
            pincode=user.pincode,
        )


class PartnerResponse(BaseModel):
    id: str
    brandId: str
    status: AuthorizationStatus
    createdAt: datetime
    partner: NetworkUser

    @classmethod
    def from_prisma(cls, authorization: BrandAuthorization) -> "PartnerResponse":
        return cls(
            id=authorization.id,
            brandId=authorization.brandId,
            status=authorization.status,
            createdAt=authorization.createdAt,
            partner=NetworkUser.from_prisma(authorization.recipient),
        )


class NetworkResponse(BaseModel):
    distributors: List[PartnerResponse]
    service_centers: List[PartnerResponse]


class AddPartnerRequest(BaseModel):
    user_email_or_id: str = Field(..., min_length=1, max_length=255)
    role: UserRole


class PartnerStatusUpdate(BaseModel):
    status: AuthorizationStatus
