import re
from typing import Dict

from .exceptions import CourierValidationError
from .types import ConsignmentRequest, CourierStatus

TRACKING_URL_TEMPLATE = "https://www.dtdc.in/tracking/track.asp?strAWBNo={awb}"

STATUS_MAP: Dict[str, CourierStatus] = {
    "BOOKED": CourierStatus.BOOKED,
    "PICKUP SCHEDULED": CourierStatus.PICKUP_SCHEDULED,
    "PICKED UP": CourierStatus.PICKED_UP,
    "PICKUP COMPLETED": CourierStatus.PICKED_UP,
    "IN TRANSIT": CourierStatus.IN_TRANSIT,
    "HELD UP": CourierStatus.HELD_UP,
    "REACHED DESTINATION": CourierStatus.REACHED_HUB,
    "OUT FOR DELIVERY": CourierStatus.OUT_FOR_DELIVERY,
    "DELIVERED": CourierStatus.DELIVERED,
    "DELIVERY ATTEMPTED": CourierStatus.DELIVERY_ATTEMPTED,
    "UNDELIVERED": CourierStatus.UNDELIVERED,
    "RTO": CourierStatus.RETURN_TO_ORIGIN,
    "RETURN TO ORIGIN": CourierStatus.RETURN_TO_ORIGIN,
    "CANCELLED": CourierStatus.CANCELLED,
    "LOST": CourierStatus.LOST,
    "DAMAGED": CourierStatus.DAMAGED,
}


def map_courier_status(raw: str | None) -> CourierStatus:
    """Map a DTDC status string ("In Transit", "PICKED_UP", ...) to CourierStatus."""
    if not raw:
        return CourierStatus.UNKNOWN
    key = re.sub(r"[\s_]+", " ", raw).strip().upper()
    return STATUS_MAP.get(key, CourierStatus.UNKNOWN)


def tracking_url(awb_number: str) -> str:
    return TRACKING_URL_TEMPLATE.format(awb=awb_number)


def sanitize_phone(phone: str) -> str:
    """Digits only, first 10."""
    return re.sub(r"\D", "", phone or "")[:10]


def validate_consignment(request: ConsignmentRequest) -> None:
    """
    Reject consignments the courier would refuse.

    Raises:
        CourierValidationError: Naming the first missing or invalid field
    """
    consignee = request.consignee
    if not consignee.name.strip():
        raise CourierValidationError("Recipient name is required")
    if len(sanitize_phone(consignee.phone)) < 10:
        raise CourierValidationError("Valid recipient phone number is required")
    if not re.fullmatch(r"\d{6}", consignee.pincode or ""):
        raise CourierValidationError("Valid 6-digit pincode is required")
    if not consignee.city.strip():
        raise CourierValidationError("Recipient city is required")
    if not consignee.state.strip():
        raise CourierValidationError("Recipient state is required")
    if not consignee.address.strip():
        raise CourierValidationError("Recipient address is required")
    if request.weight <= 0:
        raise CourierValidationError("Weight must be greater than 0")
    if request.pieces <= 0:
        raise CourierValidationError("Number of pieces must be greater than 0")
