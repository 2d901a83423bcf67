# spareflow/domains/boxes/models.py
from typing import List, Optional

from pydantic import BaseModel, Field

from .allocation import AllocatedBox, ManualBox


class PartQuantity(BaseModel):
    """A requested part and how many units of it"""

    part_id: str
    quantity: int = Field(gt=0)


class AllocationRequest(BaseModel):
    parts: List[PartQuantity] = Field(min_length=1)
    boxes: Optional[List[ManualBox]] = Field(
        None, description="Manual arrangement to validate instead of auto allocation"
    )


class AllocationResponse(BaseModel):
    boxes: List[AllocatedBox]
    total_boxes: int
    total_weight: float
    total_volume: float
    auto_calculated: bool
