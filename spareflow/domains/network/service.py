import logging
from typing import List, Optional

from prisma.enums import AuthorizationStatus, UserRole, UserStatus
from prisma.errors import UniqueViolationError
from prisma.types import UserWhereInput

from prisma import Prisma
from spareflow.shared.exceptions import InvalidDataError, UserNotFoundError

from .exceptions import PartnerAlreadyAuthorizedError, PartnerNotFoundError
from .models import (
    AddPartnerRequest,
    NetworkResponse,
    NetworkUser,
    PartnerResponse,
)

logger = logging.getLogger(__name__)

NETWORK_ROLES = (UserRole.DISTRIBUTOR, UserRole.SERVICE_CENTER)
CANDIDATE_LIMIT = 20


def _ensure_network_role(role: UserRole) -> None:
    if role not in NETWORK_ROLES:
        raise InvalidDataError(
            "Only distributors and service centers can join a brand network"
        )


class NetworkService:
    """Distributors and service centers a brand is allowed to ship to"""

    def __init__(self, db: Prisma):
        self.db = db

    async def list_partners(
        self, brand_id: str, include_revoked: bool = False
    ) -> NetworkResponse:
        where = {"brandId": brand_id}
        if not include_revoked:
            where["status"] = AuthorizationStatus.ACTIVE

        rows = await self.db.brandauthorization.find_many(
            where=where,
            include={"recipient": True},
            order={"createdAt": "desc"},
        )
        partners = [PartnerResponse.from_prisma(row) for row in rows]
        return NetworkResponse(
            distributors=[
                p for p in partners if p.partner.role == UserRole.DISTRIBUTOR
            ],
            service_centers=[
                p for p in partners if p.partner.role == UserRole.SERVICE_CENTER
            ],
        )

    async def search_candidates(
        self, brand_id: str, role: UserRole, query: Optional[str] = None
    ) -> List[NetworkUser]:
        """
        Active users of the given role not yet authorized by the brand

        Revoked partners are included so they can be re-added.
        """
        _ensure_network_role(role)

        active = await self.db.brandauthorization.find_many(
            where={"brandId": brand_id, "status": AuthorizationStatus.ACTIVE}
        )
        where: UserWhereInput = {
            "role": role,
            "status": UserStatus.ACTIVE,
            "id": {"not_in": [a.recipientId for a in active]},
        }
        if query and query.strip():
            term = query.strip()
            where["OR"] = [
                {"name": {"contains": term, "mode": "insensitive"}},
                {"email": {"contains": term, "mode": "insensitive"}},
                {"phone": {"contains": term}},
                {"city": {"contains": term, "mode": "insensitive"}},
            ]

        users = await self.db.user.find_many(
            where=where,
            order=[{"name": "asc"}, {"email": "asc"}],
            take=CANDIDATE_LIMIT,
        )
        return [NetworkUser.from_prisma(u) for u in users]

    async def add_partner(
        self, brand_id: str, request: AddPartnerRequest, added_by: str
    ) -> PartnerResponse:
        """
        Authorize an existing distributor or service center for the brand

        A previously revoked authorization is reactivated rather than
        duplicated.

        Raises:
            UserNotFoundError: If the brand or the partner does not exist
            InvalidDataError: If the partner's role is not the requested one
            PartnerAlreadyAuthorizedError: If the partner is already active
        """
        _ensure_network_role(request.role)

        brand = await self.db.user.find_unique(where={"id": brand_id})
        if not brand or brand.role != UserRole.BRAND:
            raise UserNotFoundError()

        key = request.user_email_or_id.strip()
        lookup = {"email": key} if "@" in key else {"id": key}
        partner = await self.db.user.find_unique(where=lookup)
        if not partner:
            raise UserNotFoundError()
        if partner.role != request.role:
            raise InvalidDataError(
                f"User must have {request.role.value} role, found {partner.role.value}"
            )
        if partner.status != UserStatus.ACTIVE:
            raise InvalidDataError("Partner account is not active")

        existing = await self.db.brandauthorization.find_unique(
            where={
                "brandId_recipientId": {"brandId": brand_id, "recipientId": partner.id}
            }
        )
        if existing and existing.status == AuthorizationStatus.ACTIVE:
            raise PartnerAlreadyAuthorizedError()

        if existing:
            authorization = await self.db.brandauthorization.update(
                where={"id": existing.id},
                data={"status": AuthorizationStatus.ACTIVE},
                include={"recipient": True},
            )
        else:
            try:
                authorization = await self.db.brandauthorization.create(
                    data={"brandId": brand_id, "recipientId": partner.id},
                    include={"recipient": True},
                )
            except UniqueViolationError:
                raise PartnerAlreadyAuthorizedError()

        logger.info(
            f"{partner.role.value} {partner.id} authorized for brand {brand_id} "
            f"by {added_by}"
        )
        return PartnerResponse.from_prisma(authorization)

    async def set_status(
        self,
        brand_id: str,
        authorization_id: str,
        status: AuthorizationStatus,
    ) -> PartnerResponse:
        """
        Activate or revoke one of the brand's authorizations

        Raises:
            PartnerNotFoundError: If the authorization belongs to another brand
        """
        updated = await self.db.brandauthorization.update_many(
            where={"id": authorization_id, "brandId": brand_id},
            data={"status": status},
        )
        if not updated:
            raise PartnerNotFoundError()

        authorization = await self.db.brandauthorization.find_unique(
            where={"id": authorization_id}, include={"recipient": True}
        )
        if not authorization:
            raise PartnerNotFoundError()

        logger.info(
            f"Authorization {authorization_id} for brand {brand_id} set to "
            f"{status.value}"
        )
        return PartnerResponse.from_prisma(authorization)

    async def revoke(self, brand_id: str, authorization_id: str) -> PartnerResponse:
        return await self.set_status(
            brand_id, authorization_id, AuthorizationStatus.REVOKED
        )
