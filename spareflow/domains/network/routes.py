from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from prisma.enums import UserRole
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

from .models import (
    AddPartnerRequest,
    NetworkResponse,
    NetworkUser,
    PartnerResponse,
    PartnerStatusUpdate,
)
from .service import NetworkService

router = APIRouter(prefix="/network", tags=["Network"])


@router.get(
    "",
    response_model=NetworkResponse,
    operation_id="getNetwork",
)
async def get_network(
    include_revoked: bool = Query(False, description="Include revoked partners"),
    brand_id: Optional[str] = Query(None, description="Brand to inspect (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_NETWORK)),
    db: Prisma = Depends(get_db),
) -> NetworkResponse:
    """List the brand's authorized distributors and service centers"""
    return await NetworkService(db).list_partners(
        resolve_brand_id(user, brand_id), include_revoked=include_revoked
    )


@router.get(
    "/candidates",
    response_model=List[NetworkUser],
    operation_id="searchNetworkCandidates",
)
async def search_candidates(
    role: UserRole = Query(..., description="DISTRIBUTOR or SERVICE_CENTER"),
    query: Optional[str] = Query(None, description="Name, email, phone or city"),
    brand_id: Optional[str] = Query(None, description="Brand to search for (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_NETWORK)),
    db: Prisma = Depends(get_db),
) -> List[NetworkUser]:
    return await NetworkService(db).search_candidates(
        resolve_brand_id(user, brand_id), role, query=query
    )


@router.post(
    "",
    response_model=PartnerResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="addNetworkPartner",
)
async def add_partner(
    request: AddPartnerRequest,
    brand_id: Optional[str] = Query(None, description="Brand to update (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_NETWORK)),
    db: Prisma = Depends(get_db),
) -> PartnerResponse:
    """
    Authorize an existing distributor or service center by email or ID

    Only authorized partners can receive the brand's shipments.
    """
    return await NetworkService(db).add_partner(
        resolve_brand_id(user, brand_id), request, added_by=user.id
    )


@router.patch(
    "/{authorization_id}",
    response_model=PartnerResponse,
    operation_id="updateNetworkPartner",
)
async def update_partner(
    authorization_id: str,
    request: PartnerStatusUpdate,
    brand_id: Optional[str] = Query(None, description="Brand to update (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_NETWORK)),
    db: Prisma = Depends(get_db),
) -> PartnerResponse:
    return await NetworkService(db).set_status(
        resolve_brand_id(user, brand_id), authorization_id, request.status
    )


@router.delete(
    "/{authorization_id}",
    response_model=PartnerResponse,
    operation_id="revokeNetworkPartner",
)
async def revoke_partner(
    authorization_id: str,
    brand_id: Optional[str] = Query(None, description="Brand to update (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_NETWORK)),
    db: Prisma = Depends(get_db),
) -> PartnerResponse:
    """Revoke a partner; the row is kept so it can be reactivated"""
    return await NetworkService(db).revoke(
        resolve_brand_id(user, brand_id), authorization_id
    )
