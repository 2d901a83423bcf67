from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from prisma.enums import ShipmentStatus
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.courier.client import DTDCClient, get_courier_client
from spareflow.domains.labels.storage import LabelStorage, get_label_storage
from spareflow.shared.permissions import (
    Permission,
    require_permission,
    resolve_brand_id,
)

from .models import (
    AwbRegenerationResponse,
    CancelShipmentRequest,
    CancelShipmentResponse,
    ShipmentCreateRequest,
    ShipmentCreateResponse,
    ShipmentListResponse,
    ShipmentResponse,
    TrackingRefreshResponse,
    TrackingResponse,
)
from .service import ShipmentService

router = APIRouter(prefix="/shipments", tags=["Shipments"])


@router.post(
    "",
    response_model=ShipmentCreateResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createShipment",
)
async def create_shipment(
    request: ShipmentCreateRequest,
    brand_id: Optional[str] = Query(None, description="Sending brand (admins)"),
    user: User = Depends(require_permission(Permission.CREATE_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
    storage: Optional[LabelStorage] = Depends(get_label_storage),
) -> ShipmentCreateResponse:
    """
    Create a shipment, debit the wallet and book it with DTDC

    When the courier booking fails the shipment is still created with status
    AWB_PENDING and the booking can be retried.
    """
    service = ShipmentService(db, courier, storage)
    return await service.create_shipment(
        resolve_brand_id(user, brand_id), request, created_by=user.id
    )


@router.get(
    "",
    response_model=ShipmentListResponse,
    operation_id="getShipments",
)
async def get_shipments(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    status: Optional[ShipmentStatus] = Query(None, description="Filter by status"),
    search: Optional[str] = Query(None, description="AWB or recipient name"),
    brand_id: Optional[str] = Query(None, description="Filter by brand (admins)"),
    user: User = Depends(require_permission(Permission.VIEW_SHIPMENTS)),
    db: Prisma = Depends(get_db),
) -> ShipmentListResponse:
    """List shipments sent or received by the current user"""
    return await ShipmentService(db).list_shipments(
        user, page=page, limit=limit, status=status, search=search, brand_id=brand_id
    )


@router.post(
    "/tracking/refresh",
    response_model=TrackingRefreshResponse,
    operation_id="refreshActiveShipments",
)
async def refresh_active_shipments(
    user: User = Depends(require_permission(Permission.REFRESH_TRACKING)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
) -> TrackingRefreshResponse:
    """Refresh DTDC tracking for every shipment in transit"""
    return await ShipmentService(db, courier).refresh_active_shipments()


@router.get(
    "/{shipment_id}",
    response_model=ShipmentResponse,
    operation_id="getShipment",
)
async def get_shipment(
    shipment_id: str,
    user: User = Depends(require_permission(Permission.VIEW_SHIPMENTS)),
    db: Prisma = Depends(get_db),
) -> ShipmentResponse:
    return await ShipmentService(db).get_shipment(user, shipment_id)


@router.post(
    "/{shipment_id}/cancel",
    response_model=CancelShipmentResponse,
    operation_id="cancelShipment",
)
async def cancel_shipment(
    shipment_id: str,
    request: CancelShipmentRequest,
    user: User = Depends(require_permission(Permission.CREATE_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
) -> CancelShipmentResponse:
    """
    Cancel a shipment before pickup

    Refunds the wallet debit and returns reserved or committed stock.
    """
    return await ShipmentService(db, courier).cancel_shipment(
        user, shipment_id, request.reason
    )


@router.post(
    "/{shipment_id}/regenerate-awb",
    response_model=AwbRegenerationResponse,
    operation_id="regenerateAwb",
)
async def regenerate_awb(
    shipment_id: str,
    user: User = Depends(require_permission(Permission.CREATE_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
    storage: Optional[LabelStorage] = Depends(get_label_storage),
) -> AwbRegenerationResponse:
    return await ShipmentService(db, courier, storage).regenerate_awb(
        user, shipment_id
    )


@router.post(
    "/{shipment_id}/track",
    response_model=TrackingResponse,
    operation_id="trackShipment",
)
async def track_shipment(
    shipment_id: str,
    user: User = Depends(require_permission(Permission.VIEW_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
) -> TrackingResponse:
    """Fetch the latest DTDC scans and update the shipment status"""
    return await ShipmentService(db, courier).refresh_tracking(user, shipment_id)
