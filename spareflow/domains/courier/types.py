"""Courier domain type definitions."""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CourierStatus(str, Enum):
    BOOKED = "BOOKED"
    PICKUP_SCHEDULED = "PICKUP_SCHEDULED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    HELD_UP = "HELD_UP"
    REACHED_HUB = "REACHED_HUB"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    DELIVERY_ATTEMPTED = "DELIVERY_ATTEMPTED"
    UNDELIVERED = "UNDELIVERED"
    RETURN_TO_ORIGIN = "RETURN_TO_ORIGIN"
    CANCELLED = "CANCELLED"
    LOST = "LOST"
    DAMAGED = "DAMAGED"
    UNKNOWN = "UNKNOWN"


class Address(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


class ConsignmentRequest(BaseModel):
    """A booking request for one consignment of one or more boxes."""

    reference_number: str
    consignee: Address
    weight: float = Field(description="Total weight in kg")
    pieces: int = 1
    declared_value: Decimal = Decimal("0")
    length: float = 30.0
    breadth: float = 20.0
    height: float = 15.0
    description: str = "Spare Parts and Electronic Components"
    cod_amount: Optional[Decimal] = None


class AwbResult(BaseModel):
    awb_number: str
    reference_number: str
    tracking_url: str


class TrackingEvent(BaseModel):
    scan_code: str
    status: CourierStatus
    location: str
    timestamp: str
    description: str


class TrackingResult(BaseModel):
    awb_number: str
    current_status: CourierStatus
    location: Optional[str] = None
    timestamp: Optional[str] = None
    description: Optional[str] = None
    history: List[TrackingEvent] = Field(default_factory=list)


class PincodeCheckRequest(BaseModel):
    origin_pincode: Optional[str] = Field(None, pattern=r"^\d{6}$")
    destination_pincode: str = Field(pattern=r"^\d{6}$")


class PincodeCheckResult(BaseModel):
    origin_pincode: str
    destination_pincode: str
    serviceable: bool
    estimated_days: Optional[int] = None


class CancellationResult(BaseModel):
    cancelled_awbs: List[str]
    failed_awbs: List[str]
