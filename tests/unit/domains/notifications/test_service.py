"""
Tests for NotificationService in spareflow/domains/notifications/service.py
"""

from datetime import datetime
from unittest.mock import Mock

import pytest
from fastapi import HTTPException
from prisma import Json
from prisma.enums import NotificationPriority, NotificationType
from prisma.models import Notification

from spareflow.domains.notifications.service import NotificationService


def make_notification(notification_id: str = "n-1", is_read: bool = False) -> Mock:
    notification = Mock(spec=Notification)
    notification.id = notification_id
    notification.userId = "brand-id-123"
    notification.type = NotificationType.SHIPMENT_CREATED
    notification.priority = NotificationPriority.MEDIUM
    notification.title = "New Shipment Incoming"
    notification.message = "A new shipment is on its way."
    notification.data = {"shipmentId": "shipment-1"}
    notification.actionUrl = "/shipments/shipment-1"
    notification.isRead = is_read
    notification.readAt = None
    notification.createdAt = datetime(2024, 1, 15, 9, 0, 0)
    return notification


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_wraps_data_in_json(self, mock_prisma: Mock):
        mock_prisma.notification.create.return_value = make_notification()

        await NotificationService(mock_prisma).create(
            "brand-id-123",
            NotificationType.LOW_STOCK,
            title="Low Stock Alert",
            message="Compressor Relay is down to 2 available",
            data={"partId": "part-1"},
            priority=NotificationPriority.HIGH,
        )

        data = mock_prisma.notification.create.call_args[1]["data"]
        assert data["userId"] == "brand-id-123"
        assert data["type"] == NotificationType.LOW_STOCK
        assert data["priority"] == NotificationPriority.HIGH
        assert isinstance(data["data"], Json)

    @pytest.mark.asyncio
    async def test_create_without_data(self, mock_prisma: Mock):
        mock_prisma.notification.create.return_value = make_notification()

        await NotificationService(mock_prisma).create(
            "brand-id-123", NotificationType.WALLET_CREDIT, "Wallet", "Credited"
        )

        data = mock_prisma.notification.create.call_args[1]["data"]
        assert "data" not in data


class TestListAndRead:
    @pytest.mark.asyncio
    async def test_list_unread_only(self, mock_prisma: Mock):
        mock_prisma.notification.find_many.return_value = [make_notification()]
        mock_prisma.notification.count.side_effect = [1, 3]

        result = await NotificationService(mock_prisma).list_notifications(
            "brand-id-123", unread_only=True
        )

        assert len(result.notifications) == 1
        assert result.pagination.total == 1
        assert result.unread_count == 3
        where = mock_prisma.notification.find_many.call_args[1]["where"]
        assert where == {"userId": "brand-id-123", "isRead": False}

    @pytest.mark.asyncio
    async def test_mark_as_read(self, mock_prisma: Mock):
        mock_prisma.notification.find_first.return_value = make_notification()
        mock_prisma.notification.update.return_value = make_notification(
            is_read=True
        )

        result = await NotificationService(mock_prisma).mark_as_read(
            "brand-id-123", "n-1"
        )

        assert result.isRead is True
        assert mock_prisma.notification.update.call_args[1]["data"]["isRead"] is True

    @pytest.mark.asyncio
    async def test_mark_as_read_already_read_skips_update(self, mock_prisma: Mock):
        mock_prisma.notification.find_first.return_value = make_notification(
            is_read=True
        )

        await NotificationService(mock_prisma).mark_as_read("brand-id-123", "n-1")

        mock_prisma.notification.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_mark_as_read_other_users_notification(self, mock_prisma: Mock):
        mock_prisma.notification.find_first.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            await NotificationService(mock_prisma).mark_as_read("someone", "n-1")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_as_read(self, mock_prisma: Mock):
        mock_prisma.notification.update_many.return_value = 5

        result = await NotificationService(mock_prisma).mark_all_as_read(
            "brand-id-123"
        )

        assert result.updated == 5
