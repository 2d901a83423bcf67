"""
Greedy box allocation for shipments.

Line items are sorted largest unit volume first and poured into boxes one
unit at a time; a box is closed as soon as the next unit would break the
weight or volume limit. Lines can span boxes. Dimensions are derived from
the largest part in each box plus padding.
"""

import math
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .exceptions import ManualAllocationMismatchError, OversizedItemError

MAX_BOX_WEIGHT_KG = 25.0
MAX_BOX_VOLUME_M3 = 0.1
DEFAULT_UNIT_WEIGHT_KG = 0.5
DEFAULT_UNIT_VOLUME_M3 = 0.001
# Sort key for parts without dimensions, in cm3 (same as the default volume)
DEFAULT_SORT_VOLUME_CM3 = 1000.0
MIN_BOX_LENGTH_CM = 30.0
MIN_BOX_BREADTH_CM = 20.0
MIN_BOX_HEIGHT_CM = 15.0
BOX_PADDING_CM = 5.0

# Float tolerance when comparing against capacity
_EPSILON = 1e-9


class PackableItem(BaseModel):
    """A part line to be packed, with per-unit physical attributes."""

    part_id: str
    quantity: int = Field(gt=0)
    weight: Optional[float] = Field(None, description="Unit weight in kg")
    length: Optional[float] = Field(None, description="Unit length in cm")
    breadth: Optional[float] = Field(None, description="Unit breadth in cm")
    height: Optional[float] = Field(None, description="Unit height in cm")
    unit_value: Decimal = Decimal("0")

    @property
    def has_dimensions(self) -> bool:
        return bool(self.length and self.breadth and self.height)

    @property
    def unit_weight(self) -> float:
        return self.weight or DEFAULT_UNIT_WEIGHT_KG

    @property
    def unit_volume(self) -> float:
        if self.has_dimensions:
            return self.sort_volume / 1_000_000
        return DEFAULT_UNIT_VOLUME_M3

    @property
    def sort_volume(self) -> float:
        if self.has_dimensions:
            return self.length * self.breadth * self.height  # type: ignore[operator]
        return DEFAULT_SORT_VOLUME_CM3


class BoxContent(BaseModel):
    part_id: str
    quantity: int = Field(gt=0)


class AllocatedBox(BaseModel):
    box_number: int
    contents: List[BoxContent]
    weight: float
    volume: float
    length: float
    breadth: float
    height: float
    value: Decimal = Decimal("0")
    auto_calculated: bool = True

    def quantity_of(self, part_id: str) -> int:
        return sum(c.quantity for c in self.contents if c.part_id == part_id)


class ManualBox(BaseModel):
    """Caller supplied box; dimensions are derived when omitted."""

    contents: List[BoxContent] = Field(min_length=1)
    length: Optional[float] = Field(None, gt=0)
    breadth: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)


class _OpenBox:
    """Box being filled."""

    def __init__(self) -> None:
        self.quantities: Dict[str, int] = {}
        self.items: Dict[str, PackableItem] = {}
        self.weight = 0.0
        self.volume = 0.0
        self.value = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return not self.quantities

    def units_that_fit(self, item: PackableItem) -> int:
        by_weight = math.floor(
            (MAX_BOX_WEIGHT_KG - self.weight + _EPSILON) / item.unit_weight
        )
        by_volume = math.floor(
            (MAX_BOX_VOLUME_M3 - self.volume + _EPSILON) / item.unit_volume
        )
        return max(0, min(by_weight, by_volume))

    def add(self, item: PackableItem, quantity: int) -> None:
        self.quantities[item.part_id] = self.quantities.get(item.part_id, 0) + quantity
        self.items[item.part_id] = item
        self.weight += item.unit_weight * quantity
        self.volume += item.unit_volume * quantity
        self.value += item.unit_value * quantity

    def close(self, box_number: int, auto_calculated: bool = True) -> AllocatedBox:
        length, breadth, height = _box_dimensions(
            (self.items[part_id], qty) for part_id, qty in self.quantities.items()
        )
        return AllocatedBox(
            box_number=box_number,
            contents=[
                BoxContent(part_id=part_id, quantity=qty)
                for part_id, qty in self.quantities.items()
            ],
            weight=round(self.weight, 3),
            volume=round(self.volume, 6),
            length=length,
            breadth=breadth,
            height=height,
            value=self.value,
            auto_calculated=auto_calculated,
        )


def _box_dimensions(
    packed: Iterable[tuple[PackableItem, int]],
) -> tuple[float, float, float]:
    length, breadth, height = MIN_BOX_LENGTH_CM, MIN_BOX_BREADTH_CM, MIN_BOX_HEIGHT_CM
    for item, quantity in packed:
        if not item.has_dimensions:
            continue
        length = max(length, item.length)  # type: ignore[arg-type]
        breadth = max(breadth, item.breadth)  # type: ignore[arg-type]
        height = max(height, item.height * quantity)  # type: ignore[operator]
    return length + BOX_PADDING_CM, breadth + BOX_PADDING_CM, height + BOX_PADDING_CM


def _ensure_unit_fits(item: PackableItem) -> None:
    if (
        item.unit_weight > MAX_BOX_WEIGHT_KG + _EPSILON
        or item.unit_volume > MAX_BOX_VOLUME_M3 + _EPSILON
    ):
        raise OversizedItemError(
            f"Part {item.part_id} does not fit in a single box "
            f"({item.unit_weight:.2f} kg, {item.unit_volume:.4f} m3; limits "
            f"{MAX_BOX_WEIGHT_KG} kg, {MAX_BOX_VOLUME_M3} m3)"
        )


def allocate_boxes(items: List[PackableItem]) -> List[AllocatedBox]:
    """
    Pack items into boxes within the weight and volume limits.

    Args:
        items: Part lines to pack

    Returns:
        Boxes numbered from 1, each within MAX_BOX_WEIGHT_KG and MAX_BOX_VOLUME_M3

    Raises:
        OversizedItemError: If a single unit exceeds a limit on its own
    """
    for item in items:
        _ensure_unit_fits(item)

    boxes: List[AllocatedBox] = []
    current = _OpenBox()

    # sorted() is stable so equal volumes keep request order
    for item in sorted(items, key=lambda i: i.sort_volume, reverse=True):
        remaining = item.quantity
        while remaining > 0:
            fits = current.units_that_fit(item)
            if fits == 0:
                boxes.append(current.close(len(boxes) + 1))
                current = _OpenBox()
                continue
            take = min(fits, remaining)
            current.add(item, take)
            remaining -= take

    if not current.is_empty:
        boxes.append(current.close(len(boxes) + 1))

    return boxes


def validate_manual_allocation(
    items: List[PackableItem], manual_boxes: List[ManualBox]
) -> List[AllocatedBox]:
    """
    Check caller supplied boxes against the requested parts and box limits.

    Args:
        items: Requested part lines
        manual_boxes: Boxes as arranged by the caller

    Returns:
        The boxes with computed weight, volume, value and dimensions

    Raises:
        ManualAllocationMismatchError: Unknown parts or quantities that do not add up
        OversizedItemError: A box over the weight or volume limit
    """
    by_part = {item.part_id: item for item in items}
    requested: Dict[str, int] = defaultdict(int)
    for item in items:
        requested[item.part_id] += item.quantity

    allocated: Dict[str, int] = defaultdict(int)
    boxes: List[AllocatedBox] = []

    for index, manual in enumerate(manual_boxes, start=1):
        open_box = _OpenBox()
        for content in manual.contents:
            item = by_part.get(content.part_id)
            if item is None:
                raise ManualAllocationMismatchError(
                    f"Box {index} contains part {content.part_id} "
                    "which is not part of the shipment"
                )
            open_box.add(item, content.quantity)
            allocated[content.part_id] += content.quantity

        if (
            open_box.weight > MAX_BOX_WEIGHT_KG + _EPSILON
            or open_box.volume > MAX_BOX_VOLUME_M3 + _EPSILON
        ):
            raise OversizedItemError(
                f"Box {index} exceeds limits ({open_box.weight:.2f} kg, "
                f"{open_box.volume:.4f} m3)"
            )

        box = open_box.close(index, auto_calculated=False)
        if manual.length and manual.breadth and manual.height:
            box.length, box.breadth, box.height = (
                manual.length,
                manual.breadth,
                manual.height,
            )
        boxes.append(box)

    mismatched = sorted(
        part_id
        for part_id in set(requested) | set(allocated)
        if requested[part_id] != allocated[part_id]
    )
    if mismatched:
        raise ManualAllocationMismatchError(
            "Allocated quantities do not match requested quantities for parts: "
            + ", ".join(mismatched)
        )

    return boxes
