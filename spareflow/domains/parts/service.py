# spareflow/domains/parts/service.py
import logging
from typing import Any, Dict, Optional

from prisma.types import PartWhereInput

from prisma import Prisma
from spareflow.domains.inventory.service import InventoryService
from spareflow.domains.parts.exceptions import DuplicatePartCodeError
from spareflow.domains.parts.models import (
    PartCreate,
    PartListResponse,
    PartResponse,
    PartUpdate,
)
from spareflow.shared.exceptions import PartNotFoundError
from spareflow.shared.models import PaginationMetadata

logger = logging.getLogger(__name__)

_UPDATE_FIELDS = {
    "name": "name",
    "part_number": "partNumber",
    "description": "description",
    "category": "category",
    "price": "price",
    "cost_price": "costPrice",
    "weight": "weight",
    "length": "length",
    "breadth": "breadth",
    "height": "height",
    "min_stock_level": "minStockLevel",
    "is_active": "isActive",
}


async def get_parts_by_brand(
    brand_id: str,
    db: Prisma,
    page: int = 1,
    limit: int = 50,
    category: Optional[str] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
) -> PartListResponse:
    """
    Get a brand's catalogue with filtering and pagination

    Args:
        brand_id: Brand that owns the parts
        db: Prisma database connection
        page: Page number (1-based)
        limit: Number of records per page
        category: Filter by category
        search: Search in code, name or part number
        include_inactive: Also return deactivated parts

    Returns:
        PartListResponse with parts, their stock and pagination metadata
    """
    where_input: PartWhereInput = {"brandId": brand_id}
    if not include_inactive:
        where_input["isActive"] = True
    if category:
        where_input["category"] = category
    if search:
        where_input["OR"] = [
            {"code": {"contains": search, "mode": "insensitive"}},
            {"name": {"contains": search, "mode": "insensitive"}},
            {"partNumber": {"contains": search, "mode": "insensitive"}},
        ]

    parts = await db.part.find_many(
        where=where_input,
        include={"inventory": True},
        skip=(page - 1) * limit,
        take=limit,
        order={"name": "asc"},
    )
    total = await db.part.count(where=where_input)

    return PartListResponse(
        parts=[PartResponse.from_prisma(part) for part in parts],
        pagination=PaginationMetadata.build(page, limit, total),
    )


async def get_part(
    part_id: str, db: Prisma, brand_id: Optional[str] = None
) -> PartResponse:
    """Get a part; brand_id limits the lookup to that brand's catalogue."""
    where_input: PartWhereInput = {"id": part_id}
    if brand_id:
        where_input["brandId"] = brand_id
    part = await db.part.find_first(where=where_input, include={"inventory": True})
    if not part:
        raise PartNotFoundError(part_id)
    return PartResponse.from_prisma(part)


async def create_part(
    brand_id: str, payload: PartCreate, db: Prisma, user_id: Optional[str] = None
) -> PartResponse:
    """
    Add a part to a brand's catalogue with its opening stock

    The part, its inventory row and the STOCK_IN ledger entry are written
    in one transaction.

    Raises:
        DuplicatePartCodeError: If the brand already uses the code
    """
    existing = await db.part.find_unique(
        where={"brandId_code": {"brandId": brand_id, "code": payload.code}}
    )
    if existing:
        raise DuplicatePartCodeError(f"Part code {payload.code} already exists")

    async with db.tx() as tx:
        part = await tx.part.create(
            data={
                "brandId": brand_id,
                "code": payload.code,
                "name": payload.name,
                "partNumber": payload.part_number,
                "description": payload.description,
                "category": payload.category,
                "price": payload.price,
                "costPrice": payload.cost_price,
                "weight": payload.weight,
                "length": payload.length,
                "breadth": payload.breadth,
                "height": payload.height,
                "minStockLevel": payload.min_stock_level,
            }
        )
        await InventoryService(tx).add_initial_stock(
            brand_id, part.id, payload.initial_stock, user_id=user_id
        )

    logger.info(f"Part {part.code} created for brand {brand_id}")
    return await get_part(part.id, db, brand_id)


async def update_part(
    part_id: str, brand_id: Optional[str], payload: PartUpdate, db: Prisma
) -> PartResponse:
    await get_part(part_id, db, brand_id)

    data: Dict[str, Any] = {
        column: getattr(payload, field)
        for field, column in _UPDATE_FIELDS.items()
        if getattr(payload, field) is not None
    }
    if data:
        await db.part.update(where={"id": part_id}, data=data)  # type: ignore[arg-type]
    return await get_part(part_id, db, brand_id)
