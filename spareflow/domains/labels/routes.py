from typing import Optional

from fastapi import APIRouter, Depends, Response
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.courier.client import DTDCClient, get_courier_client
from spareflow.domains.labels.service import LabelService
from spareflow.domains.labels.storage import LabelStorage, get_label_storage
from spareflow.shared.permissions import Permission, require_permission

router = APIRouter(prefix="/labels", tags=["Labels"])


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/boxes/{box_id}",
    response_class=Response,
    operation_id="downloadBoxLabel",
)
async def download_box_label(
    box_id: str,
    user: User = Depends(require_permission(Permission.VIEW_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    storage: Optional[LabelStorage] = Depends(get_label_storage),
) -> Response:
    """
    Download the shipping label PDF for a box

    Streams the stored label, or renders it when none was stored.
    """
    content, filename = await LabelService(db, storage).get_box_label(box_id, user)
    return _pdf(content, filename)


@router.get(
    "/shipments/{shipment_id}/courier",
    response_class=Response,
    operation_id="downloadCourierLabel",
)
async def download_courier_label(
    shipment_id: str,
    user: User = Depends(require_permission(Permission.VIEW_SHIPMENTS)),
    db: Prisma = Depends(get_db),
    courier: DTDCClient = Depends(get_courier_client),
) -> Response:
    """Download DTDC's own 4x6 label for the shipment's AWB"""
    content, filename = await LabelService(db).get_courier_label(
        shipment_id, user, courier
    )
    return _pdf(content, filename)
