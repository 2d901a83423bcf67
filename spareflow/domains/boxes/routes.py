from typing import Optional

from fastapi import APIRouter, Depends, Query
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.boxes.models import AllocationRequest, AllocationResponse
from spareflow.domains.boxes.service import preview_allocation
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

router = APIRouter(prefix="/boxes", tags=["Boxes"])


@router.post(
    "/allocate",
    response_model=AllocationResponse,
    operation_id="previewBoxAllocation",
)
async def allocate(
    request: AllocationRequest,
    brand_id: Optional[str] = Query(None, description="Brand to pack for (admins)"),
    user: User = Depends(require_permission(Permission.CREATE_SHIPMENTS)),
    db: Prisma = Depends(get_db),
) -> AllocationResponse:
    """
    Preview how the selected parts would be packed into boxes

    Returns auto allocated boxes, or the validated manual arrangement
    when `boxes` is supplied.
    """
    return await preview_allocation(resolve_brand_id(user, brand_id), request, db)
