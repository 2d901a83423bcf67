from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from prisma.enums import InventoryAction
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.inventory.models import (
    InventoryItemResponse,
    InventoryListResponse,
    LedgerListResponse,
    StockAdjustmentRequest,
)
from spareflow.domains.inventory.service import InventoryService
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get(
    "",
    response_model=InventoryListResponse,
    operation_id="getInventory",
)
async def get_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search part name or code"),
    brand_id: Optional[str] = Query(None, description="Brand to view (admins)"),
    user: User = Depends(require_permission(Permission.VIEW_INVENTORY)),
    db: Prisma = Depends(get_db),
) -> InventoryListResponse:
    return await InventoryService(db).list_inventory(
        resolve_brand_id(user, brand_id), page=page, limit=limit, search=search
    )


@router.get(
    "/low-stock",
    response_model=List[InventoryItemResponse],
    operation_id="getLowStockInventory",
)
async def get_low_stock(
    brand_id: Optional[str] = Query(None, description="Brand to view (admins)"),
    user: User = Depends(require_permission(Permission.VIEW_INVENTORY)),
    db: Prisma = Depends(get_db),
) -> List[InventoryItemResponse]:
    """Parts whose available stock is at or below their minimum level"""
    return await InventoryService(db).low_stock(resolve_brand_id(user, brand_id))


@router.get(
    "/ledger",
    response_model=LedgerListResponse,
    operation_id="getInventoryLedger",
)
async def get_ledger(
    part_id: Optional[str] = Query(None),
    action: Optional[InventoryAction] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    brand_id: Optional[str] = Query(None, description="Brand to view (admins)"),
    user: User = Depends(require_permission(Permission.VIEW_INVENTORY)),
    db: Prisma = Depends(get_db),
) -> LedgerListResponse:
    return await InventoryService(db).list_ledger(
        resolve_brand_id(user, brand_id),
        part_id=part_id,
        action=action,
        page=page,
        limit=limit,
    )


@router.post(
    "/{part_id}/adjust",
    response_model=InventoryItemResponse,
    operation_id="adjustStock",
)
async def adjust_stock(
    part_id: str,
    request: StockAdjustmentRequest,
    brand_id: Optional[str] = Query(None, description="Brand to adjust (admins)"),
    user: User = Depends(require_permission(Permission.MANAGE_INVENTORY)),
    db: Prisma = Depends(get_db),
) -> InventoryItemResponse:
    """
    Add or remove stock of a part

    Positive quantities add stock, negative quantities remove it. The
    change is recorded in the inventory ledger.
    """
    return await InventoryService(db).adjust_stock(
        resolve_brand_id(user, brand_id), part_id, request, user_id=user.id
    )
