import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from prisma.enums import (
    AuthorizationStatus,
    BoxStatus,
    NotificationPriority,
    NotificationType,
    RecipientType,
    ShipmentStatus,
    UserRole,
    UserStatus,
    WalletTransactionType,
)
from prisma.models import Shipment, User
from prisma.types import ShipmentWhereInput

from prisma import Prisma
from spareflow.domains.boxes.service import arrange_boxes, load_packable_items
from spareflow.domains.courier.client import DTDCClient
from spareflow.domains.courier.exceptions import (
    CourierError,
    CourierNotConfiguredError,
)
from spareflow.domains.courier.types import (
    Address,
    ConsignmentRequest,
    CourierStatus,
    TrackingResult,
)
from spareflow.domains.inventory.exceptions import InsufficientStockError
from spareflow.domains.inventory.service import InventoryService
from spareflow.domains.labels.service import LabelService
from spareflow.domains.labels.storage import LabelStorage
from spareflow.domains.notifications.service import NotificationService
from spareflow.domains.pricing.models import CostEstimateRequest
from spareflow.domains.pricing.service import PricingService
from spareflow.domains.wallet.service import WalletService
from spareflow.shared.exceptions import (
    InvalidDataError,
    NotAuthorizedError,
    UserNotFoundError,
)
from spareflow.shared.models import PaginationMetadata
from spareflow.shared.permissions import is_shipment_party

from .exceptions import (
    InvalidShipmentStateError,
    RecipientNotFoundError,
    ShipmentNotFoundError,
)
from .models import (
    AwbRegenerationResponse,
    CancelShipmentResponse,
    CourierOutcome,
    ShipmentCreateRequest,
    ShipmentCreateResponse,
    ShipmentListResponse,
    ShipmentResponse,
    TrackingRefreshResponse,
    TrackingResponse,
    WalletCharge,
)

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = [
    ShipmentStatus.INITIATED,
    ShipmentStatus.AWB_PENDING,
    ShipmentStatus.AWB_GENERATED,
]
TRACKABLE_STATUSES = [ShipmentStatus.AWB_GENERATED, ShipmentStatus.IN_TRANSIT]
# Statuses whose stock is still reserved rather than shipped
RESERVED_STATUSES = [ShipmentStatus.INITIATED, ShipmentStatus.AWB_PENDING]

MOVING_COURIER_STATUSES = {
    CourierStatus.PICKED_UP,
    CourierStatus.IN_TRANSIT,
    CourierStatus.HELD_UP,
    CourierStatus.REACHED_HUB,
    CourierStatus.OUT_FOR_DELIVERY,
    CourierStatus.DELIVERY_ATTEMPTED,
    CourierStatus.UNDELIVERED,
}
NETWORK_RECIPIENTS = {RecipientType.DISTRIBUTOR, RecipientType.SERVICE_CENTER}

_BOX_INCLUDE = {"boxes": {"include": {"parts": {"include": {"part": True}}}}}


def status_after_tracking(
    current: ShipmentStatus, courier_status: CourierStatus
) -> ShipmentStatus:
    """
    Shipment status implied by a courier scan.

    Only AWB_GENERATED and IN_TRANSIT shipments move; they never move
    backwards.
    """
    if current not in TRACKABLE_STATUSES:
        return current
    if courier_status == CourierStatus.DELIVERED:
        return ShipmentStatus.DELIVERED
    if courier_status in MOVING_COURIER_STATUSES:
        return ShipmentStatus.IN_TRANSIT
    return current


def shipment_quantities(shipment: Shipment) -> Dict[str, int]:
    """Units per part across all boxes of a shipment loaded with box parts."""
    quantities: Dict[str, int] = defaultdict(int)
    for box in shipment.boxes or []:
        for box_part in box.parts or []:
            quantities[box_part.partId] += box_part.quantity
    return dict(quantities)


class ShipmentService:
    """
    Shipment creation and lifecycle.

    Creation debits the brand's wallet, writes the shipment with its boxes
    and reserves stock in one database transaction. The courier booking,
    labels and notifications follow outside the transaction; a failed
    booking leaves the shipment AWB_PENDING for a later retry.
    """

    def __init__(
        self,
        db: Prisma,
        courier: Optional[DTDCClient] = None,
        storage: Optional[LabelStorage] = None,
    ):
        self.db = db
        self.courier = courier or DTDCClient()
        self.storage = storage

    async def create_shipment(
        self,
        brand_id: str,
        request: ShipmentCreateRequest,
        created_by: Optional[str] = None,
    ) -> ShipmentCreateResponse:
        """
        Create a shipment from a brand to a recipient

        Args:
            brand_id: Brand sending and paying for the shipment
            request: Recipient, parts, optional manual boxes and service options
            created_by: User performing the action (defaults to the brand)

        Returns:
            ShipmentCreateResponse with the shipment, courier outcome,
            cost breakdown and wallet charge

        Raises:
            UserNotFoundError: If the brand does not exist
            RecipientNotFoundError: If the recipient is unknown, inactive,
                of another type or outside the brand's network
            InvalidDataError: If parts are unknown or the recipient has no address
            InsufficientStockError: If available stock is short
            AllocationError: If the parts cannot be boxed
            InsufficientBalanceError: If the wallet does not cover the cost
            InvalidShipmentStateError: If the shipment is cancelled while it is
                being booked
        """
        actor = created_by or brand_id
        brand = await self.db.user.find_unique(where={"id": brand_id})
        if not brand or brand.role != UserRole.BRAND:
            raise UserNotFoundError()

        # 1. Recipient
        recipient = await self._verify_recipient(brand_id, request)

        # 2. Stock
        items, parts_by_id = await load_packable_items(brand_id, request.parts, self.db)
        quantities = {item.part_id: item.quantity for item in items}
        inventory = InventoryService(self.db)
        issues = await inventory.check_availability(brand_id, quantities, parts_by_id)
        if issues:
            raise InsufficientStockError([issue.model_dump() for issue in issues])

        # 3. Boxes
        boxes = arrange_boxes(items, request.boxes)
        total_weight = round(sum(box.weight for box in boxes), 3)
        total_value = sum(
            (item.unit_value * item.quantity for item in items), Decimal("0")
        )

        # 4. Cost
        estimate = await PricingService(self.db).estimate(
            brand_id,
            CostEstimateRequest(
                weight=total_weight,
                pieces=len(boxes),
                pincode=recipient.pincode,
                service_type=request.service_type,
                declared_value=total_value,
            ),
        )
        cost = estimate.total_cost

        # 5-8. Wallet, shipment, boxes and reservation in one transaction
        async with self.db.tx() as tx:
            wallet = WalletService(tx)
            txn = None
            if cost > 0:
                txn = await wallet.debit(
                    brand_id,
                    cost,
                    f"Shipment to {recipient.name} ({request.recipient_type.value})",
                )

            shipment = await tx.shipment.create(
                data={
                    "brandId": brand_id,
                    "recipientId": recipient.id,
                    "recipientType": request.recipient_type,
                    "status": ShipmentStatus.INITIATED,
                    "priority": request.priority,
                    "serviceType": request.service_type.value,
                    "numBoxes": len(boxes),
                    "totalWeight": total_weight,
                    "totalValue": total_value,
                    "estimatedCost": cost,
                    "recipientName": recipient.name,
                    "recipientPhone": recipient.phone,
                    "recipientAddress": recipient.address,
                    "recipientCity": recipient.city,
                    "recipientState": recipient.state,
                    "recipientPincode": recipient.pincode,
                    "notes": request.notes,
                }
            )
            if txn is not None:
                await tx.wallettransaction.update(
                    where={"id": txn.id},
                    data={
                        "shipmentId": shipment.id,
                        "reference": f"SHIPMENT_{shipment.id}",
                    },
                )

            for box in boxes:
                await tx.box.create(
                    data={
                        "shipmentId": shipment.id,
                        "boxNumber": box.box_number,
                        "length": box.length,
                        "breadth": box.breadth,
                        "height": box.height,
                        "weight": box.weight,
                        "volume": box.volume,
                        "value": box.value,
                        "parts": {
                            "create": [
                                {"partId": c.part_id, "quantity": c.quantity}
                                for c in box.contents
                            ]
                        },
                    }
                )

            await InventoryService(tx).reserve(
                brand_id, quantities, shipment.id, user_id=actor
            )
            wallet_after = await wallet.get_or_create_wallet(brand_id)

        logger.info(
            f"Shipment {shipment.id} created for brand {brand_id}: "
            f"{len(boxes)} boxes, {total_weight} kg, cost {cost}"
        )

        # 9. Courier booking
        loaded = await self._load(shipment.id)
        outcome = await self._book_awb(loaded, actor)

        # 10. Labels
        labels = LabelService(self.db, self.storage)
        labels_stored = await labels.generate_shipment_labels(shipment.id)

        # 11. Notifications
        await self._notify_created(brand, loaded, outcome)
        await self._notify_low_stock(brand_id, list(quantities))

        # 12. Response
        return ShipmentCreateResponse(
            shipment=ShipmentResponse.from_prisma(await self._load(shipment.id)),
            courier=outcome,
            cost=estimate,
            wallet=WalletCharge(
                deducted=cost,
                transaction_id=txn.id if txn else None,
                balance_after=wallet_after.balance,
            ),
            labels_stored=labels_stored,
        )

    async def regenerate_awb(
        self, user: User, shipment_id: str
    ) -> AwbRegenerationResponse:
        """
        Retry the courier booking of an AWB_PENDING shipment

        Raises:
            ShipmentNotFoundError: If the shipment does not exist
            NotAuthorizedError: If the user does not own the shipment
            InvalidShipmentStateError: If the shipment is not AWB_PENDING, or
                stops being so while DTDC books it
        """
        shipment = await self._get_owned(user, shipment_id)
        if shipment.status != ShipmentStatus.AWB_PENDING:
            raise InvalidShipmentStateError(
                f"AWB can only be regenerated for AWB_PENDING shipments "
                f"(current status {shipment.status})"
            )

        outcome = await self._book_awb(shipment, user.id)
        labels_stored = 0
        if outcome.success:
            labels_stored = await LabelService(
                self.db, self.storage
            ).generate_shipment_labels(shipment.id)
            notifications = NotificationService(self.db)
            for user_id in (shipment.brandId, shipment.recipientId):
                await notifications.create(
                    user_id,
                    NotificationType.AWB_GENERATED,
                    title="AWB Generated",
                    message=f"Shipment {shipment.id[-8:]} booked with DTDC. "
                    f"AWB: {outcome.awb_number}",
                    data={"shipmentId": shipment.id, "awbNumber": outcome.awb_number},
                    action_url=f"/shipments/{shipment.id}",
                )
        else:
            await self._notify_awb_failed(shipment, outcome)

        return AwbRegenerationResponse(
            shipment=ShipmentResponse.from_prisma(await self._load(shipment.id)),
            courier=outcome,
            labels_stored=labels_stored,
        )

    async def cancel_shipment(
        self, user: User, shipment_id: str, reason: Optional[str] = None
    ) -> CancelShipmentResponse:
        """
        Cancel a shipment that has not been picked up

        The courier booking is cancelled when there is one, the wallet is
        refunded what was debited for the shipment, and stock goes back to
        available.

        Raises:
            ShipmentNotFoundError: If the shipment does not exist
            NotAuthorizedError: If the user does not own the shipment
            InvalidShipmentStateError: If the shipment is past AWB_GENERATED
        """
        shipment = await self._get_owned(user, shipment_id)
        if shipment.status not in CANCELLABLE_STATUSES:
            raise InvalidShipmentStateError(
                f"Shipment in status {shipment.status} cannot be cancelled"
            )

        quantities = shipment_quantities(shipment)
        notes = shipment.notes or ""
        if reason:
            notes = f"{notes}\nCancelled: {reason}".strip()

        cancelled = {"status": ShipmentStatus.CANCELLED, "notes": notes}
        async with self.db.tx() as tx:
            # The guard that matches decides whether stock is still reserved
            reserved = await tx.shipment.update_many(
                where={"id": shipment.id, "status": {"in": RESERVED_STATUSES}},
                data=cancelled,
            )
            if reserved == 0:
                shipped = await tx.shipment.update_many(
                    where={"id": shipment.id, "status": ShipmentStatus.AWB_GENERATED},
                    data=cancelled,
                )
                if shipped == 0:
                    raise InvalidShipmentStateError(
                        "Shipment was updated concurrently"
                    )
            await tx.box.update_many(
                where={"shipmentId": shipment.id},
                data={"status": BoxStatus.CANCELLED},
            )

            debits = await tx.wallettransaction.find_many(
                where={
                    "shipmentId": shipment.id,
                    "type": WalletTransactionType.DEBIT,
                }
            )
            refund = sum((d.amount for d in debits), Decimal("0"))
            if refund > 0:
                await WalletService(tx).credit(
                    shipment.brandId,
                    refund,
                    f"Refund for cancelled shipment {shipment.id}",
                    reference=f"REFUND_{shipment.id}",
                    shipment_id=shipment.id,
                )

            stock = InventoryService(tx)
            if reserved:
                await stock.release(
                    shipment.brandId, quantities, shipment.id, user_id=user.id
                )
            else:
                await stock.return_to_stock(
                    shipment.brandId, quantities, shipment.id, user_id=user.id
                )

        logger.info(f"Shipment {shipment.id} cancelled by {user.id}, refund {refund}")

        # Reloaded so an AWB booked while the cancel was running is included
        cancelled_shipment = await self._load(shipment.id)
        courier_cancelled = False
        if cancelled_shipment.awbNumber:
            courier_cancelled = await self._cancel_awb(
                shipment.id, cancelled_shipment.awbNumber
            )

        await NotificationService(self.db).create(
            shipment.recipientId,
            NotificationType.SHIPMENT_CANCELLED,
            title="Shipment Cancelled",
            message=f"Shipment {shipment.id[-8:]} has been cancelled by the sender.",
            data={"shipmentId": shipment.id, "reason": reason},
            action_url=f"/shipments/{shipment.id}",
        )

        return CancelShipmentResponse(
            shipment=ShipmentResponse.from_prisma(cancelled_shipment),
            refunded_amount=refund,
            courier_cancelled=courier_cancelled,
        )

    async def list_shipments(
        self,
        user: User,
        page: int = 1,
        limit: int = 20,
        status: Optional[ShipmentStatus] = None,
        search: Optional[str] = None,
        brand_id: Optional[str] = None,
    ) -> ShipmentListResponse:
        """
        List shipments visible to a user

        Brands see what they sent, other roles what they received and
        admins everything (optionally one brand's).
        """
        where_input: ShipmentWhereInput = {}
        if user.role == UserRole.SUPER_ADMIN:
            if brand_id:
                where_input["brandId"] = brand_id
        elif user.role == UserRole.BRAND:
            where_input["brandId"] = user.id
        else:
            where_input["recipientId"] = user.id

        if status:
            where_input["status"] = status
        if search:
            where_input["OR"] = [
                {"awbNumber": {"contains": search, "mode": "insensitive"}},
                {"recipientName": {"contains": search, "mode": "insensitive"}},
            ]

        shipments = await self.db.shipment.find_many(
            where=where_input,
            skip=(page - 1) * limit,
            take=limit,
            order={"createdAt": "desc"},
        )
        total = await self.db.shipment.count(where=where_input)

        return ShipmentListResponse(
            shipments=[ShipmentResponse.from_prisma(s) for s in shipments],
            pagination=PaginationMetadata.build(page, limit, total),
        )

    async def get_shipment(self, user: User, shipment_id: str) -> ShipmentResponse:
        shipment = await self._load(shipment_id)
        if not is_shipment_party(user, shipment):
            raise NotAuthorizedError()
        return ShipmentResponse.from_prisma(shipment)

    async def refresh_tracking(self, user: User, shipment_id: str) -> TrackingResponse:
        """
        Fetch the latest courier scans for a shipment and apply them

        Raises:
            InvalidShipmentStateError: If the shipment has no AWB yet
            CourierError: If DTDC tracking fails
        """
        shipment = await self._load(shipment_id)
        if not is_shipment_party(user, shipment):
            raise NotAuthorizedError()
        if not shipment.awbNumber:
            raise InvalidShipmentStateError("Shipment has no AWB number to track")

        tracking = await self.courier.track(shipment.awbNumber)
        await self._apply_tracking(shipment, tracking)
        return TrackingResponse(
            shipment=ShipmentResponse.from_prisma(await self._load(shipment.id)),
            tracking=tracking,
        )

    async def refresh_active_shipments(self) -> TrackingRefreshResponse:
        """
        Refresh tracking for every shipment with the courier

        Failures for individual shipments are logged and counted.

        Raises:
            CourierNotConfiguredError: If no tracking token is configured
        """
        if not self.courier.tracking_token:
            raise CourierNotConfiguredError("DTDC_TRACKING_ACCESS_TOKEN must be set")

        shipments = await self.db.shipment.find_many(
            where={
                "status": {"in": TRACKABLE_STATUSES},
                "awbNumber": {"not": None},
            },
            order={"createdAt": "asc"},
        )

        updated = delivered = failed = 0
        for shipment in shipments:
            try:
                tracking = await self.courier.track(shipment.awbNumber or "")
            except CourierError as e:
                failed += 1
                logger.warning(f"Tracking refresh failed for {shipment.id}: {e.detail}")
                continue
            new_status = await self._apply_tracking(shipment, tracking)
            if new_status != shipment.status:
                updated += 1
                if new_status == ShipmentStatus.DELIVERED:
                    delivered += 1

        logger.info(
            f"Tracking refresh: {len(shipments)} checked, {updated} updated, "
            f"{delivered} delivered, {failed} failed"
        )
        return TrackingRefreshResponse(
            checked=len(shipments), updated=updated, delivered=delivered, failed=failed
        )

    async def _verify_recipient(
        self, brand_id: str, request: ShipmentCreateRequest
    ) -> User:
        recipient = await self.db.user.find_unique(where={"id": request.recipient_id})
        if (
            not recipient
            or recipient.status != UserStatus.ACTIVE
            or recipient.role.value != request.recipient_type.value
        ):
            raise RecipientNotFoundError()

        if request.recipient_type in NETWORK_RECIPIENTS:
            authorization = await self.db.brandauthorization.find_first(
                where={
                    "brandId": brand_id,
                    "recipientId": recipient.id,
                    "status": AuthorizationStatus.ACTIVE,
                }
            )
            if not authorization:
                raise RecipientNotFoundError()

        if not recipient.pincode or not re.fullmatch(r"\d{6}", recipient.pincode):
            raise InvalidDataError("Recipient address not found")
        return recipient

    async def _book_awb(self, shipment: Shipment, actor: str) -> CourierOutcome:
        """Book the shipment with DTDC, recording AWB_PENDING on failure."""
        boxes = shipment.boxes or []
        consignment = ConsignmentRequest(
            reference_number=f"SF-{shipment.id}",
            consignee=Address(
                name=shipment.recipientName,
                phone=shipment.recipientPhone or "",
                address=shipment.recipientAddress or "",
                city=shipment.recipientCity or "",
                state=shipment.recipientState or "",
                pincode=shipment.recipientPincode,
            ),
            weight=shipment.totalWeight,
            pieces=shipment.numBoxes,
            declared_value=shipment.totalValue,
            length=max((b.length for b in boxes), default=30.0),
            breadth=max((b.breadth for b in boxes), default=20.0),
            height=max((b.height for b in boxes), default=15.0),
        )

        try:
            result = await self.courier.generate_awb(consignment)
        except CourierError as e:
            error = str(e.detail)
            logger.warning(f"Shipment {shipment.id} left AWB_PENDING: {error}")
            await self.db.shipment.update_many(
                where={"id": shipment.id, "status": {"in": RESERVED_STATUSES}},
                data={"status": ShipmentStatus.AWB_PENDING, "awbError": error},
            )
            return CourierOutcome(success=False, error=error)

        async with self.db.tx() as tx:
            booked = await tx.shipment.update_many(
                where={"id": shipment.id, "status": {"in": RESERVED_STATUSES}},
                data={
                    "status": ShipmentStatus.AWB_GENERATED,
                    "awbNumber": result.awb_number,
                    "trackingUrl": result.tracking_url,
                    "courierStatus": CourierStatus.BOOKED.value,
                    "awbError": None,
                },
            )
            if booked:
                await InventoryService(tx).commit(
                    shipment.brandId,
                    shipment_quantities(shipment),
                    shipment.id,
                    user_id=actor,
                )

        if not booked:
            # Cancelled or booked by another request while DTDC was called
            logger.warning(
                f"Shipment {shipment.id} changed during booking, "
                f"discarding AWB {result.awb_number}"
            )
            await self._cancel_awb(shipment.id, result.awb_number)
            raise InvalidShipmentStateError(
                "Shipment was updated while it was being booked"
            )

        logger.info(f"Shipment {shipment.id} booked with AWB {result.awb_number}")
        return CourierOutcome(
            success=True,
            awb_number=result.awb_number,
            tracking_url=result.tracking_url,
        )

    async def _cancel_awb(self, shipment_id: str, awb_number: str) -> bool:
        try:
            result = await self.courier.cancel([awb_number])
        except CourierError as e:
            logger.warning(
                f"DTDC cancellation of AWB {awb_number} for shipment "
                f"{shipment_id} failed: {e.detail}"
            )
            return False
        return awb_number in result.cancelled_awbs

    async def _apply_tracking(
        self, shipment: Shipment, tracking: TrackingResult
    ) -> ShipmentStatus:
        new_status = status_after_tracking(shipment.status, tracking.current_status)
        await self.db.shipment.update(
            where={"id": shipment.id},
            data={
                "status": new_status,
                "courierStatus": tracking.current_status.value,
                "lastTrackedAt": datetime.now(timezone.utc),
            },
        )

        if new_status != shipment.status:
            box_status = (
                BoxStatus.DELIVERED
                if new_status == ShipmentStatus.DELIVERED
                else BoxStatus.IN_TRANSIT
            )
            await self.db.box.update_many(
                where={"shipmentId": shipment.id}, data={"status": box_status}
            )
            logger.info(f"Shipment {shipment.id} moved to {new_status}")

        if (
            new_status == ShipmentStatus.DELIVERED
            and shipment.status != ShipmentStatus.DELIVERED
        ):
            notifications = NotificationService(self.db)
            for user_id in (shipment.brandId, shipment.recipientId):
                await notifications.create(
                    user_id,
                    NotificationType.SHIPMENT_STATUS,
                    title="Shipment Delivered",
                    message=f"Shipment {shipment.id[-8:]} (AWB {shipment.awbNumber}) "
                    "has been delivered.",
                    data={"shipmentId": shipment.id, "status": new_status.value},
                    action_url=f"/shipments/{shipment.id}",
                )
        return new_status

    async def _notify_created(
        self, brand: User, shipment: Shipment, outcome: CourierOutcome
    ) -> None:
        await NotificationService(self.db).create(
            shipment.recipientId,
            NotificationType.SHIPMENT_CREATED,
            title="New Shipment Incoming",
            message=f"A new shipment from {brand.name} is on its way. "
            f"AWB: {outcome.awb_number or 'Pending'}",
            data={
                "shipmentId": shipment.id,
                "awbNumber": outcome.awb_number,
                "numBoxes": shipment.numBoxes,
                "totalWeight": shipment.totalWeight,
            },
            action_url=f"/shipments/{shipment.id}",
        )
        if not outcome.success:
            await self._notify_awb_failed(shipment, outcome)

    async def _notify_awb_failed(
        self, shipment: Shipment, outcome: CourierOutcome
    ) -> None:
        await NotificationService(self.db).create(
            shipment.brandId,
            NotificationType.AWB_FAILED,
            title="AWB Generation Pending",
            message=f"DTDC booking for shipment {shipment.id[-8:]} failed: "
            f"{outcome.error}. Retry from the shipment page.",
            data={"shipmentId": shipment.id, "error": outcome.error},
            priority=NotificationPriority.HIGH,
            action_url=f"/shipments/{shipment.id}",
        )

    async def _notify_low_stock(self, brand_id: str, part_ids: List[str]) -> None:
        low = await InventoryService(self.db).low_stock(brand_id, part_ids)
        notifications = NotificationService(self.db)
        for item in low:
            await notifications.create(
                brand_id,
                NotificationType.LOW_STOCK,
                title="Low Stock Alert",
                message=f"{item.partName or item.partId} is down to "
                f"{item.availableQuantity} available "
                f"(minimum {item.minStockLevel}).",
                data={
                    "partId": item.partId,
                    "available": item.availableQuantity,
                    "minStockLevel": item.minStockLevel,
                },
                priority=NotificationPriority.HIGH,
                action_url="/inventory",
            )

    async def _load(self, shipment_id: str) -> Shipment:
        shipment = await self.db.shipment.find_unique(
            where={"id": shipment_id},
            include=_BOX_INCLUDE,  # type: ignore[arg-type]
        )
        if not shipment:
            raise ShipmentNotFoundError()
        return shipment

    async def _get_owned(self, user: User, shipment_id: str) -> Shipment:
        shipment = await self._load(shipment_id)
        if user.role != UserRole.SUPER_ADMIN and shipment.brandId != user.id:
            raise NotAuthorizedError()
        return shipment
