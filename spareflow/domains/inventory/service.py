import logging
from typing import Any, Dict, List, Optional

from prisma.enums import InventoryAction
from prisma.models import BrandInventory, Part
from prisma.types import BrandInventoryWhereInput, InventoryLedgerWhereInput

from prisma import Prisma
from spareflow.domains.inventory.exceptions import (
    InsufficientStockError,
    InvalidAdjustmentError,
    InventoryNotFoundError,
)
from spareflow.domains.inventory.models import (
    InventoryItemResponse,
    InventoryListResponse,
    LedgerEntryResponse,
    LedgerListResponse,
    StockAdjustmentRequest,
    StockIssue,
)
from spareflow.shared.exceptions import PartNotFoundError
from spareflow.shared.models import PaginationMetadata

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Brand stock levels and the inventory ledger.

    Stock moves between three counters that always satisfy
    ``onHand = available + reserved``:

    - RESERVE: available -> reserved (shipment created)
    - RELEASE: reserved -> available (shipment cancelled before pickup)
    - TRANSFER_OUT: reserved leaves on-hand (AWB generated)
    - RETURN_IN: shipped stock comes back on-hand and available
    - STOCK_IN / ADJUSTMENT: manual change to on-hand and available

    Every movement appends an InventoryLedger row with the available
    quantity after the move. Pass a transaction client as ``db`` to make
    movements part of the caller's transaction.
    """

    def __init__(self, db: Prisma):
        self.db = db

    async def get_levels(
        self, brand_id: str, part_ids: List[str]
    ) -> Dict[str, BrandInventory]:
        rows = await self.db.brandinventory.find_many(
            where={"brandId": brand_id, "partId": {"in": part_ids}}
        )
        return {row.partId: row for row in rows}

    async def check_availability(
        self,
        brand_id: str,
        quantities: Dict[str, int],
        parts_by_id: Optional[Dict[str, Part]] = None,
    ) -> List[StockIssue]:
        """
        Compare requested quantities against available stock.

        Args:
            brand_id: Brand holding the stock
            quantities: Requested units per part ID
            parts_by_id: Loaded parts, used to label the issues

        Returns:
            One StockIssue per part that is short; empty when all are covered
        """
        levels = await self.get_levels(brand_id, list(quantities))
        parts_by_id = parts_by_id or {}
        issues: List[StockIssue] = []
        for part_id, requested in quantities.items():
            level = levels.get(part_id)
            available = level.availableQuantity if level else 0
            if available < requested:
                part = parts_by_id.get(part_id)
                issues.append(
                    StockIssue(
                        part_id=part_id,
                        part_code=part.code if part else None,
                        part_name=part.name if part else None,
                        requested=requested,
                        available=available,
                    )
                )
        return issues

    async def reserve(
        self,
        brand_id: str,
        quantities: Dict[str, int],
        shipment_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        """
        Hold stock for a shipment.

        Raises:
            InsufficientStockError: If stock was taken by a concurrent request
        """
        for part_id, quantity in quantities.items():
            moved = await self._move(
                brand_id,
                part_id,
                quantity,
                InventoryAction.RESERVE,
                guard={"availableQuantity": {"gte": quantity}},
                data={
                    "availableQuantity": {"decrement": quantity},
                    "reservedQuantity": {"increment": quantity},
                },
                shipment_id=shipment_id,
                note=f"Reserved for shipment {shipment_id}",
                user_id=user_id,
            )
            if not moved:
                level = await self._find(brand_id, part_id)
                raise InsufficientStockError(
                    [
                        StockIssue(
                            part_id=part_id,
                            requested=quantity,
                            available=level.availableQuantity if level else 0,
                        ).model_dump()
                    ]
                )

    async def release(
        self,
        brand_id: str,
        quantities: Dict[str, int],
        shipment_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        for part_id, quantity in quantities.items():
            moved = await self._move(
                brand_id,
                part_id,
                quantity,
                InventoryAction.RELEASE,
                guard={"reservedQuantity": {"gte": quantity}},
                data={
                    "reservedQuantity": {"decrement": quantity},
                    "availableQuantity": {"increment": quantity},
                },
                shipment_id=shipment_id,
                note=f"Released from shipment {shipment_id}",
                user_id=user_id,
            )
            if not moved:
                logger.warning(
                    f"Nothing reserved to release for part {part_id} "
                    f"on shipment {shipment_id}"
                )

    async def commit(
        self,
        brand_id: str,
        quantities: Dict[str, int],
        shipment_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Move reserved stock out of on-hand once the courier has the shipment."""
        for part_id, quantity in quantities.items():
            moved = await self._move(
                brand_id,
                part_id,
                quantity,
                InventoryAction.TRANSFER_OUT,
                guard={"reservedQuantity": {"gte": quantity}},
                data={
                    "reservedQuantity": {"decrement": quantity},
                    "onHandQuantity": {"decrement": quantity},
                },
                shipment_id=shipment_id,
                note=f"Shipped on shipment {shipment_id}",
                user_id=user_id,
            )
            if not moved:
                logger.warning(
                    f"Nothing reserved to ship for part {part_id} "
                    f"on shipment {shipment_id}"
                )

    async def return_to_stock(
        self,
        brand_id: str,
        quantities: Dict[str, int],
        shipment_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        for part_id, quantity in quantities.items():
            await self._move(
                brand_id,
                part_id,
                quantity,
                InventoryAction.RETURN_IN,
                guard={},
                data={
                    "onHandQuantity": {"increment": quantity},
                    "availableQuantity": {"increment": quantity},
                },
                shipment_id=shipment_id,
                note=f"Returned from cancelled shipment {shipment_id}",
                user_id=user_id,
            )

    async def add_initial_stock(
        self, brand_id: str, part_id: str, quantity: int, user_id: Optional[str] = None
    ) -> BrandInventory:
        """Create the inventory row for a new part, recording STOCK_IN when non-zero."""
        inventory = await self.db.brandinventory.create(
            data={
                "brandId": brand_id,
                "partId": part_id,
                "onHandQuantity": quantity,
                "availableQuantity": quantity,
            }
        )
        if quantity > 0:
            await self._log(
                brand_id,
                part_id,
                InventoryAction.STOCK_IN,
                quantity,
                inventory.availableQuantity,
                note="Initial stock",
                user_id=user_id,
            )
        return inventory

    async def adjust_stock(
        self,
        brand_id: str,
        part_id: str,
        request: StockAdjustmentRequest,
        user_id: Optional[str] = None,
    ) -> InventoryItemResponse:
        """
        Manually add or remove stock.

        Args:
            brand_id: Brand holding the stock
            part_id: Part to adjust
            request: Signed quantity, ledger action and note
            user_id: User making the change

        Returns:
            The updated inventory row

        Raises:
            PartNotFoundError: If the part is not in the brand's catalogue
            InvalidAdjustmentError: If the change would take available stock below 0
        """
        part = await self.db.part.find_first(where={"id": part_id, "brandId": brand_id})
        if not part:
            raise PartNotFoundError(part_id)

        level = await self._find(brand_id, part_id)
        if level is None:
            if request.quantity < 0:
                raise InvalidAdjustmentError("Cannot remove stock that was never added")
            level = await self.db.brandinventory.create(
                data={"brandId": brand_id, "partId": part_id}
            )

        quantity = request.quantity
        guard: Dict[str, Any] = {}
        if quantity < 0:
            guard = {"availableQuantity": {"gte": -quantity}}
        moved = await self._move(
            brand_id,
            part_id,
            quantity,
            request.action,
            guard=guard,
            data={
                "onHandQuantity": {"increment": quantity},
                "availableQuantity": {"increment": quantity},
            },
            note=request.note,
            user_id=user_id,
        )
        if not moved:
            raise InvalidAdjustmentError(
                f"Cannot remove {-quantity} units; only "
                f"{level.availableQuantity} available"
            )

        logger.info(
            f"Stock of part {part_id} adjusted by {quantity} for brand {brand_id}"
        )
        updated = await self.db.brandinventory.find_unique(
            where={"brandId_partId": {"brandId": brand_id, "partId": part_id}},
            include={"part": True},
        )
        if not updated:
            raise InventoryNotFoundError()
        return InventoryItemResponse.from_prisma(updated)

    async def list_inventory(
        self,
        brand_id: str,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
    ) -> InventoryListResponse:
        where_input: BrandInventoryWhereInput = {"brandId": brand_id}
        if search:
            where_input["part"] = {
                "is": {
                    "OR": [
                        {"name": {"contains": search, "mode": "insensitive"}},
                        {"code": {"contains": search, "mode": "insensitive"}},
                    ]
                }
            }

        rows = await self.db.brandinventory.find_many(
            where=where_input,
            include={"part": True},
            skip=(page - 1) * limit,
            take=limit,
            order={"lastUpdated": "desc"},
        )
        total = await self.db.brandinventory.count(where=where_input)

        return InventoryListResponse(
            items=[InventoryItemResponse.from_prisma(row) for row in rows],
            pagination=PaginationMetadata.build(page, limit, total),
        )

    async def low_stock(
        self, brand_id: str, part_ids: Optional[List[str]] = None
    ) -> List[InventoryItemResponse]:
        """Inventory rows whose available stock is at or below the part minimum."""
        where_input: BrandInventoryWhereInput = {"brandId": brand_id}
        if part_ids is not None:
            where_input["partId"] = {"in": part_ids}
        rows = await self.db.brandinventory.find_many(
            where=where_input, include={"part": True}
        )
        items = [InventoryItemResponse.from_prisma(row) for row in rows]
        return [item for item in items if item.isLowStock]

    async def list_ledger(
        self,
        brand_id: str,
        part_id: Optional[str] = None,
        action: Optional[InventoryAction] = None,
        page: int = 1,
        limit: int = 50,
    ) -> LedgerListResponse:
        where_input: InventoryLedgerWhereInput = {"brandId": brand_id}
        if part_id:
            where_input["partId"] = part_id
        if action:
            where_input["actionType"] = action

        entries = await self.db.inventoryledger.find_many(
            where=where_input,
            skip=(page - 1) * limit,
            take=limit,
            order={"createdAt": "desc"},
        )
        total = await self.db.inventoryledger.count(where=where_input)

        return LedgerListResponse(
            entries=[LedgerEntryResponse.from_prisma(e) for e in entries],
            pagination=PaginationMetadata.build(page, limit, total),
        )

    async def _find(self, brand_id: str, part_id: str) -> Optional[BrandInventory]:
        return await self.db.brandinventory.find_unique(
            where={"brandId_partId": {"brandId": brand_id, "partId": part_id}}
        )

    async def _move(
        self,
        brand_id: str,
        part_id: str,
        quantity: int,
        action: InventoryAction,
        guard: Dict[str, Any],
        data: Dict[str, Any],
        shipment_id: Optional[str] = None,
        note: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        # Conditional update so concurrent movements cannot go negative
        updated = await self.db.brandinventory.update_many(
            where={"brandId": brand_id, "partId": part_id, **guard},  # type: ignore
            data=data,  # type: ignore[arg-type]
        )
        if updated == 0:
            return False

        level = await self._find(brand_id, part_id)
        await self._log(
            brand_id,
            part_id,
            action,
            quantity,
            level.availableQuantity if level else 0,
            shipment_id=shipment_id,
            note=note,
            user_id=user_id,
        )
        return True

    async def _log(
        self,
        brand_id: str,
        part_id: str,
        action: InventoryAction,
        quantity: int,
        balance_after: int,
        shipment_id: Optional[str] = None,
        note: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        await self.db.inventoryledger.create(
            data={
                "brandId": brand_id,
                "partId": part_id,
                "actionType": action,
                "quantity": quantity,
                "balanceAfter": balance_after,
                "shipmentId": shipment_id,
                "referenceNote": note,
                "createdBy": user_id,
            }
        )
