import logging
from typing import Optional, Tuple

from prisma.enums import BoxStatus
from prisma.models import Box, Shipment, User

from prisma import Prisma
from spareflow.domains.courier.client import DTDCClient
from spareflow.domains.shipments.exceptions import ShipmentNotFoundError
from spareflow.shared.exceptions import NotAuthorizedError
from spareflow.shared.permissions import is_shipment_party

from .exceptions import BoxNotFoundError, LabelStorageError, LabelUnavailableError
from .renderer import LabelAddress, LabelData, LabelLine, render_box_label
from .storage import LabelStorage

logger = logging.getLogger(__name__)

_SHIPMENT_INCLUDE = {
    "brand": True,
    "boxes": {"include": {"parts": {"include": {"part": True}}}},
}


def build_label_data(shipment: Shipment, box: Box) -> LabelData:
    """Label fields for one box of a shipment loaded with brand and box parts."""
    return LabelData(
        shipment_id=shipment.id,
        box_number=box.boxNumber,
        total_boxes=shipment.numBoxes,
        awb_number=shipment.awbNumber,
        tracking_url=shipment.trackingUrl,
        brand_name=shipment.brand.name if shipment.brand else "",
        weight=box.weight,
        length=box.length,
        breadth=box.breadth,
        height=box.height,
        priority=shipment.priority.value,
        consignee=LabelAddress(
            name=shipment.recipientName,
            address=shipment.recipientAddress or "",
            city=shipment.recipientCity or "",
            state=shipment.recipientState or "",
            pincode=shipment.recipientPincode,
            phone=shipment.recipientPhone or "",
        ),
        contents=[
            LabelLine(
                code=bp.part.code if bp.part else bp.partId,
                name=bp.part.name if bp.part else "",
                quantity=bp.quantity,
            )
            for bp in box.parts or []
        ],
    )


class LabelService:
    """Per-box label rendering, storage and download."""

    def __init__(self, db: Prisma, storage: Optional[LabelStorage] = None):
        self.db = db
        self.storage = storage

    async def generate_shipment_labels(self, shipment_id: str) -> int:
        """
        Render a label for every box and store it when storage is configured.

        Boxes whose label was stored are marked LABELED. Upload failures are
        logged and leave the box to be rendered on demand.

        Returns:
            Number of labels stored
        """
        shipment = await self.db.shipment.find_unique(
            where={"id": shipment_id},
            include=_SHIPMENT_INCLUDE,  # type: ignore[arg-type]
        )
        if not shipment or not shipment.boxes:
            return 0
        if self.storage is None:
            logger.info(
                f"Label storage not configured; labels for shipment {shipment_id} "
                "will be rendered on demand"
            )
            return 0

        stored = 0
        for box in shipment.boxes:
            try:
                pdf = render_box_label(build_label_data(shipment, box))
                path = await self.storage.upload_label(pdf, shipment.id, box.boxNumber)
            except LabelStorageError as e:
                logger.warning(
                    f"Label upload failed for box {box.boxNumber} of shipment "
                    f"{shipment_id}: {e.detail}"
                )
                continue
            except Exception as e:
                logger.error(
                    f"Label rendering failed for box {box.boxNumber} of shipment "
                    f"{shipment_id}: {e}",
                    exc_info=True,
                )
                continue
            await self.db.box.update(
                where={"id": box.id},
                data={"labelPath": path, "status": BoxStatus.LABELED},
            )
            stored += 1

        logger.info(f"Stored {stored} labels for shipment {shipment_id}")
        return stored

    async def get_box_label(self, box_id: str, user: User) -> Tuple[bytes, str]:
        """
        Get the label PDF for a box

        Streams the stored file when there is one, otherwise renders it.

        Returns:
            Tuple of (PDF bytes, download filename)

        Raises:
            BoxNotFoundError: If the box does not exist
            NotAuthorizedError: If the user is not a party to the shipment
        """
        box = await self.db.box.find_unique(where={"id": box_id})
        if not box:
            raise BoxNotFoundError()
        shipment = await self.db.shipment.find_unique(
            where={"id": box.shipmentId},
            include=_SHIPMENT_INCLUDE,  # type: ignore[arg-type]
        )
        if not shipment:
            raise BoxNotFoundError()
        if not is_shipment_party(user, shipment):
            raise NotAuthorizedError()

        reference = shipment.awbNumber or shipment.id[-6:]
        filename = f"label-{reference}-box{box.boxNumber}.pdf"

        if box.labelPath and self.storage is not None:
            try:
                return await self.storage.download_label(box.labelPath), filename
            except LabelStorageError as e:
                logger.warning(f"Stored label for box {box_id} unavailable: {e.detail}")

        loaded = next((b for b in shipment.boxes or [] if b.id == box.id), box)
        return render_box_label(build_label_data(shipment, loaded)), filename

    async def get_courier_label(
        self, shipment_id: str, user: User, courier: DTDCClient
    ) -> Tuple[bytes, str]:
        """Download the courier's own label for a shipment with an AWB."""
        shipment = await self.db.shipment.find_unique(where={"id": shipment_id})
        if not shipment:
            raise ShipmentNotFoundError()
        if not is_shipment_party(user, shipment):
            raise NotAuthorizedError()
        if not shipment.awbNumber:
            raise LabelUnavailableError()

        content = await courier.fetch_label(shipment.awbNumber)
        return content, f"dtdc-label-{shipment.awbNumber}.pdf"
