# spareflow/domains/inventory/models.py
from datetime import datetime
from typing import List, Optional

from prisma.enums import InventoryAction
from prisma.models import BrandInventory, InventoryLedger
from pydantic import BaseModel, Field, model_validator

from spareflow.shared.models import PaginationMetadata


class InventoryItemResponse(BaseModel):
    id: str
    partId: str
    partCode: Optional[str] = None
    partName: Optional[str] = None
    onHandQuantity: int
    reservedQuantity: int
    availableQuantity: int
    minStockLevel: int = 0
    isLowStock: bool
    lastUpdated: datetime

    @classmethod
    def from_prisma(cls, inventory: BrandInventory) -> "InventoryItemResponse":
        part = inventory.part
        min_stock = part.minStockLevel if part else 0
        return cls(
            id=inventory.id,
            partId=inventory.partId,
            partCode=part.code if part else None,
            partName=part.name if part else None,
            onHandQuantity=inventory.onHandQuantity,
            reservedQuantity=inventory.reservedQuantity,
            availableQuantity=inventory.availableQuantity,
            minStockLevel=min_stock,
            isLowStock=inventory.availableQuantity <= min_stock,
            lastUpdated=inventory.lastUpdated,
        )


class InventoryListResponse(BaseModel):
    items: List[InventoryItemResponse]
    pagination: PaginationMetadata


class StockAdjustmentRequest(BaseModel):
    """Signed change to on-hand and available stock."""

    quantity: int = Field(description="Units to add (positive) or remove (negative)")
    action: InventoryAction = InventoryAction.ADJUSTMENT
    note: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_quantity(self) -> "StockAdjustmentRequest":
        if self.quantity == 0:
            raise ValueError("quantity must not be zero")
        if self.action not in (InventoryAction.ADJUSTMENT, InventoryAction.STOCK_IN):
            raise ValueError("action must be ADJUSTMENT or STOCK_IN")
        if self.action == InventoryAction.STOCK_IN and self.quantity < 0:
            raise ValueError("STOCK_IN requires a positive quantity")
        return self


class LedgerEntryResponse(BaseModel):
    id: str
    partId: str
    actionType: InventoryAction
    quantity: int
    balanceAfter: int
    shipmentId: Optional[str] = None
    referenceNote: Optional[str] = None
    createdBy: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_prisma(cls, entry: InventoryLedger) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            partId=entry.partId,
            actionType=entry.actionType,
            quantity=entry.quantity,
            balanceAfter=entry.balanceAfter,
            shipmentId=entry.shipmentId,
            referenceNote=entry.referenceNote,
            createdBy=entry.createdBy,
            createdAt=entry.createdAt,
        )


class LedgerListResponse(BaseModel):
    entries: List[LedgerEntryResponse]
    pagination: PaginationMetadata


class StockIssue(BaseModel):
    part_id: str
    part_code: Optional[str] = None
    part_name: Optional[str] = None
    requested: int
    available: int
