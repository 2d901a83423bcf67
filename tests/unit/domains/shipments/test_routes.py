"""
Tests for shipment routes in spareflow/domains/shipments/routes.py

Route functions are called directly with ShipmentService patched; the
permission system is tested separately.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import HTTPException
from prisma.enums import RecipientType

from spareflow.domains.boxes.models import PartQuantity
from spareflow.domains.shipments.models import (
    CancelShipmentRequest,
    ShipmentCreateRequest,
    TrackingRefreshResponse,
)

SERVICE_PATH = "spareflow.domains.shipments.routes.ShipmentService"


@pytest.fixture
def create_request() -> ShipmentCreateRequest:
    return ShipmentCreateRequest(
        recipient_id="distributor-id-123",
        recipient_type=RecipientType.DISTRIBUTOR,
        parts=[PartQuantity(part_id="part-1", quantity=2)],
    )


class TestCreateShipmentRoute:
    @pytest.mark.asyncio
    async def test_brand_creates_for_itself(
        self, mock_brand: Mock, create_request: ShipmentCreateRequest
    ) -> None:
        from spareflow.domains.shipments.routes import create_shipment

        with patch(SERVICE_PATH) as mock_service_class:
            mock_service = mock_service_class.return_value
            mock_service.create_shipment = AsyncMock(return_value="created")
            mock_db, mock_courier = Mock(), Mock()

            result = await create_shipment(
                request=create_request,
                brand_id="ignored-brand",
                user=mock_brand,
                db=mock_db,
                courier=mock_courier,
                storage=None,
            )

            assert result == "created"
            mock_service_class.assert_called_once_with(mock_db, mock_courier, None)
            mock_service.create_shipment.assert_called_once_with(
                "brand-id-123", create_request, created_by="brand-id-123"
            )

    @pytest.mark.asyncio
    async def test_admin_must_name_brand(
        self, mock_admin: Mock, create_request: ShipmentCreateRequest
    ) -> None:
        from spareflow.domains.shipments.routes import create_shipment

        with patch(SERVICE_PATH) as mock_service_class:
            with pytest.raises(HTTPException) as exc_info:
                await create_shipment(
                    request=create_request,
                    brand_id=None,
                    user=mock_admin,
                    db=Mock(),
                    courier=Mock(),
                    storage=None,
                )

            assert exc_info.value.status_code == 400
            mock_service_class.return_value.create_shipment.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_acts_on_named_brand(
        self, mock_admin: Mock, create_request: ShipmentCreateRequest
    ) -> None:
        from spareflow.domains.shipments.routes import create_shipment

        with patch(SERVICE_PATH) as mock_service_class:
            mock_service = mock_service_class.return_value
            mock_service.create_shipment = AsyncMock(return_value="created")

            await create_shipment(
                request=create_request,
                brand_id="brand-id-123",
                user=mock_admin,
                db=Mock(),
                courier=Mock(),
                storage=None,
            )

            mock_service.create_shipment.assert_called_once_with(
                "brand-id-123", create_request, created_by="admin-id-123"
            )


class TestShipmentLifecycleRoutes:
    @pytest.mark.asyncio
    async def test_cancel_passes_reason(self, mock_brand: Mock) -> None:
        from spareflow.domains.shipments.routes import cancel_shipment

        with patch(SERVICE_PATH) as mock_service_class:
            mock_service = mock_service_class.return_value
            mock_service.cancel_shipment = AsyncMock(return_value="cancelled")

            result = await cancel_shipment(
                shipment_id="shipment-1",
                request=CancelShipmentRequest(reason="Duplicate order"),
                user=mock_brand,
                db=Mock(),
                courier=Mock(),
            )

            assert result == "cancelled"
            mock_service.cancel_shipment.assert_called_once_with(
                mock_brand, "shipment-1", "Duplicate order"
            )

    @pytest.mark.asyncio
    async def test_list_passes_filters(self, mock_distributor: Mock) -> None:
        from spareflow.domains.shipments.routes import get_shipments

        with patch(SERVICE_PATH) as mock_service_class:
            mock_service = mock_service_class.return_value
            mock_service.list_shipments = AsyncMock(return_value="page")

            await get_shipments(
                page=2,
                limit=10,
                status=None,
                search="D123",
                brand_id=None,
                user=mock_distributor,
                db=Mock(),
            )

            mock_service.list_shipments.assert_called_once_with(
                mock_distributor,
                page=2,
                limit=10,
                status=None,
                search="D123",
                brand_id=None,
            )

    @pytest.mark.asyncio
    async def test_refresh_active_shipments(self, mock_admin: Mock) -> None:
        from spareflow.domains.shipments.routes import refresh_active_shipments

        summary = TrackingRefreshResponse(checked=3, updated=1, delivered=1, failed=0)
        with patch(SERVICE_PATH) as mock_service_class:
            mock_service = mock_service_class.return_value
            mock_service.refresh_active_shipments = AsyncMock(return_value=summary)

            result = await refresh_active_shipments(
                user=mock_admin, db=Mock(), courier=Mock()
            )

            assert result.checked == 3
            assert result.delivered == 1
