# spareflow/domains/parts/models.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from prisma.models import Part
from pydantic import BaseModel, Field

from spareflow.shared.models import PaginationMetadata


class PartResponse(BaseModel):
    """Response model for catalogue parts"""

    id: str
    brandId: str
    code: str
    name: str
    partNumber: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    costPrice: Optional[Decimal] = None
    weight: Optional[float] = None
    length: Optional[float] = None
    breadth: Optional[float] = None
    height: Optional[float] = None
    minStockLevel: int
    isActive: bool
    availableQuantity: Optional[int] = None
    reservedQuantity: Optional[int] = None
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_prisma(cls, part: Part) -> "PartResponse":
        stock = part.inventory[0] if part.inventory else None
        return cls(
            id=part.id,
            brandId=part.brandId,
            code=part.code,
            name=part.name,
            partNumber=part.partNumber,
            description=part.description,
            category=part.category,
            price=part.price,
            costPrice=part.costPrice,
            weight=part.weight,
            length=part.length,
            breadth=part.breadth,
            height=part.height,
            minStockLevel=part.minStockLevel,
            isActive=part.isActive,
            availableQuantity=stock.availableQuantity if stock else None,
            reservedQuantity=stock.reservedQuantity if stock else None,
            createdAt=part.createdAt,
            updatedAt=part.updatedAt,
        )


class PartListResponse(BaseModel):
    parts: List[PartResponse]
    pagination: PaginationMetadata


class PartCreate(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    part_number: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal = Field(ge=0, decimal_places=2)
    cost_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    weight: Optional[float] = Field(None, gt=0, description="Unit weight in kg")
    length: Optional[float] = Field(None, gt=0, description="cm")
    breadth: Optional[float] = Field(None, gt=0, description="cm")
    height: Optional[float] = Field(None, gt=0, description="cm")
    min_stock_level: int = Field(0, ge=0)
    initial_stock: int = Field(0, ge=0)


class PartUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    part_number: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    cost_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    weight: Optional[float] = Field(None, gt=0)
    length: Optional[float] = Field(None, gt=0)
    breadth: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
