from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from prisma.enums import UserRole
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.parts.models import (
    PartCreate,
    PartListResponse,
    PartResponse,
    PartUpdate,
)
from spareflow.domains.parts.service import (
    create_part,
    get_part,
    get_parts_by_brand,
    update_part,
)
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

router = APIRouter(prefix="/parts", tags=["Parts"])


@router.get(
    "",
    response_model=PartListResponse,
    operation_id="getParts",
)
async def list_parts(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search code, name, part number"),
    include_inactive: bool = Query(False),
    brand_id: Optional[str] = Query(None, description="Brand to view (admins)"),
    user: User = Depends(require_permission(Permission.VIEW_PARTS)),
    db: Prisma = Depends(get_db),
) -> PartListResponse:
    return await get_parts_by_brand(
        resolve_brand_id(user, brand_id),
        db,
        page=page,
        limit=limit,
        category=category,
        search=search,
        include_inactive=include_inactive,
    )


@router.post(
    "",
    response_model=PartResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createPart",
)
async def add_part(
    payload: PartCreate,
    brand_id: Optional[str] = Query(None, description="Owning brand (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_PARTS)),
    db: Prisma = Depends(get_db),
) -> PartResponse:
    return await create_part(
        resolve_brand_id(user, brand_id), payload, db, user_id=user.id
    )


@router.get(
    "/{part_id}",
    response_model=PartResponse,
    operation_id="getPart",
)
async def get_single_part(
    part_id: str,
    user: User = Depends(require_permission(Permission.VIEW_PARTS)),
    db: Prisma = Depends(get_db),
) -> PartResponse:
    return await get_part(part_id, db, _owner_scope(user))


@router.patch(
    "/{part_id}",
    response_model=PartResponse,
    operation_id="updatePart",
)
async def edit_part(
    part_id: str,
    payload: PartUpdate,
    user: User = Depends(require_permission(Permission.MANAGE_PARTS)),
    db: Prisma = Depends(get_db),
) -> PartResponse:
    return await update_part(part_id, _owner_scope(user), payload, db)


def _owner_scope(user: User) -> Optional[str]:
    # Admins can reach any brand's parts
    return None if user.role == UserRole.SUPER_ADMIN else user.id
