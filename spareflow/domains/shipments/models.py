# spareflow/domains/shipments/models.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from prisma.enums import (
    BoxStatus,
    RecipientType,
    ShipmentPriority,
    ShipmentStatus,
)
from prisma.models import Box, BoxPart, Shipment
from pydantic import BaseModel, Field

from spareflow.domains.boxes.allocation import ManualBox
from spareflow.domains.boxes.models import PartQuantity
from spareflow.domains.courier.types import TrackingResult
from spareflow.domains.pricing.models import CostEstimateResponse
from spareflow.domains.pricing.types import ServiceType
from spareflow.shared.models import PaginationMetadata


class ShipmentCreateRequest(BaseModel):
    recipient_id: str
    recipient_type: RecipientType
    parts: List[PartQuantity] = Field(min_length=1)
    boxes: Optional[List[ManualBox]] = Field(
        None, description="Manual box arrangement; auto allocated when omitted"
    )
    priority: ShipmentPriority = ShipmentPriority.MEDIUM
    service_type: ServiceType = ServiceType.STANDARD
    notes: Optional[str] = Field(None, max_length=1000)


class BoxPartResponse(BaseModel):
    partId: str
    partCode: Optional[str] = None
    partName: Optional[str] = None
    quantity: int

    @classmethod
    def from_prisma(cls, box_part: BoxPart) -> "BoxPartResponse":
        part = box_part.part
        return cls(
            partId=box_part.partId,
            partCode=part.code if part else None,
            partName=part.name if part else None,
            quantity=box_part.quantity,
        )


class BoxResponse(BaseModel):
    id: str
    boxNumber: int
    length: float
    breadth: float
    height: float
    weight: float
    volume: float
    value: Decimal
    status: BoxStatus
    labelPath: Optional[str] = None
    parts: List[BoxPartResponse] = Field(default_factory=list)

    @classmethod
    def from_prisma(cls, box: Box) -> "BoxResponse":
        return cls(
            id=box.id,
            boxNumber=box.boxNumber,
            length=box.length,
            breadth=box.breadth,
            height=box.height,
            weight=box.weight,
            volume=box.volume,
            value=box.value,
            status=box.status,
            labelPath=box.labelPath,
            parts=[BoxPartResponse.from_prisma(bp) for bp in box.parts or []],
        )


class ShipmentResponse(BaseModel):
    """Response model for shipment data"""

    id: str
    brandId: str
    recipientId: str
    recipientType: RecipientType
    status: ShipmentStatus
    priority: ShipmentPriority
    serviceType: str
    numBoxes: int
    totalWeight: float
    totalValue: Decimal
    estimatedCost: Decimal
    recipientName: str
    recipientPhone: Optional[str] = None
    recipientAddress: Optional[str] = None
    recipientCity: Optional[str] = None
    recipientState: Optional[str] = None
    recipientPincode: str
    awbNumber: Optional[str] = None
    trackingUrl: Optional[str] = None
    courierStatus: Optional[str] = None
    lastTrackedAt: Optional[datetime] = None
    awbError: Optional[str] = None
    notes: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime
    boxes: List[BoxResponse] = Field(default_factory=list)

    @classmethod
    def from_prisma(cls, shipment: Shipment) -> "ShipmentResponse":
        return cls(
            id=shipment.id,
            brandId=shipment.brandId,
            recipientId=shipment.recipientId,
            recipientType=shipment.recipientType,
            status=shipment.status,
            priority=shipment.priority,
            serviceType=shipment.serviceType,
            numBoxes=shipment.numBoxes,
            totalWeight=shipment.totalWeight,
            totalValue=shipment.totalValue,
            estimatedCost=shipment.estimatedCost,
            recipientName=shipment.recipientName,
            recipientPhone=shipment.recipientPhone,
            recipientAddress=shipment.recipientAddress,
            recipientCity=shipment.recipientCity,
            recipientState=shipment.recipientState,
            recipientPincode=shipment.recipientPincode,
            awbNumber=shipment.awbNumber,
            trackingUrl=shipment.trackingUrl,
            courierStatus=shipment.courierStatus,
            lastTrackedAt=shipment.lastTrackedAt,
            awbError=shipment.awbError,
            notes=shipment.notes,
            createdAt=shipment.createdAt,
            updatedAt=shipment.updatedAt,
            boxes=[
                BoxResponse.from_prisma(box)
                for box in sorted(shipment.boxes or [], key=lambda b: b.boxNumber)
            ],
        )


class ShipmentListResponse(BaseModel):
    shipments: List[ShipmentResponse]
    pagination: PaginationMetadata


class CourierOutcome(BaseModel):
    success: bool
    awb_number: Optional[str] = None
    tracking_url: Optional[str] = None
    error: Optional[str] = None


class WalletCharge(BaseModel):
    deducted: Decimal
    transaction_id: Optional[str] = None
    balance_after: Decimal


class ShipmentCreateResponse(BaseModel):
    shipment: ShipmentResponse
    courier: CourierOutcome
    cost: CostEstimateResponse
    wallet: WalletCharge
    labels_stored: int = 0


class AwbRegenerationResponse(BaseModel):
    shipment: ShipmentResponse
    courier: CourierOutcome
    labels_stored: int = 0


class CancelShipmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CancelShipmentResponse(BaseModel):
    shipment: ShipmentResponse
    refunded_amount: Decimal
    courier_cancelled: bool


class TrackingResponse(BaseModel):
    shipment: ShipmentResponse
    tracking: TrackingResult


class TrackingRefreshResponse(BaseModel):
    checked: int
    updated: int
    delivered: int
    failed: int
