from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from prisma.models import Part

from prisma import Prisma
from spareflow.shared.exceptions import InvalidDataError

from .allocation import (
    AllocatedBox,
    ManualBox,
    PackableItem,
    allocate_boxes,
    validate_manual_allocation,
)
from .models import AllocationRequest, AllocationResponse, PartQuantity


async def load_packable_items(
    brand_id: str, lines: List[PartQuantity], db: Prisma
) -> Tuple[List[PackableItem], Dict[str, Part]]:
    """
    Resolve requested part lines against the brand's catalogue.

    Duplicate lines for the same part are merged.

    Args:
        brand_id: Brand that owns the parts
        lines: Requested parts and quantities
        db: Prisma database connection

    Returns:
        Packable items and the loaded parts keyed by ID

    Raises:
        InvalidDataError: If a part is unknown, inactive or owned by another brand
    """
    quantities: Dict[str, int] = defaultdict(int)
    for line in lines:
        quantities[line.part_id] += line.quantity

    parts = await db.part.find_many(
        where={"id": {"in": list(quantities)}, "brandId": brand_id, "isActive": True}
    )
    parts_by_id = {part.id: part for part in parts}

    missing = [part_id for part_id in quantities if part_id not in parts_by_id]
    if missing:
        raise InvalidDataError(
            f"Parts not found or not owned by brand: {', '.join(missing)}"
        )

    items = [
        PackableItem(
            part_id=part_id,
            quantity=quantity,
            weight=parts_by_id[part_id].weight,
            length=parts_by_id[part_id].length,
            breadth=parts_by_id[part_id].breadth,
            height=parts_by_id[part_id].height,
            unit_value=parts_by_id[part_id].price,
        )
        for part_id, quantity in quantities.items()
    ]
    return items, parts_by_id


def arrange_boxes(
    items: List[PackableItem], manual_boxes: Optional[List[ManualBox]] = None
) -> List[AllocatedBox]:
    """Auto allocate, or validate a manual arrangement when one is given."""
    if manual_boxes:
        return validate_manual_allocation(items, manual_boxes)
    return allocate_boxes(items)


async def preview_allocation(
    brand_id: str, request: AllocationRequest, db: Prisma
) -> AllocationResponse:
    items, _ = await load_packable_items(brand_id, request.parts, db)
    boxes = arrange_boxes(items, request.boxes)
    return AllocationResponse(
        boxes=boxes,
        total_boxes=len(boxes),
        total_weight=round(sum(box.weight for box in boxes), 3),
        total_volume=round(sum(box.volume for box in boxes), 6),
        auto_calculated=not request.boxes,
    )
