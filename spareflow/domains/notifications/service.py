from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from prisma.enums import NotificationPriority, NotificationType
from prisma.models import Notification
from prisma.types import NotificationWhereInput

from prisma import Json, Prisma
from spareflow.domains.notifications.models import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from spareflow.shared.models import PaginationMetadata


class NotificationService:
    """Service for in-app notifications"""

    def __init__(self, db: Prisma):
        self.db = db

    async def create(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        action_url: Optional[str] = None,
    ) -> Notification:
        payload: Dict[str, Any] = {
            "userId": user_id,
            "type": type,
            "priority": priority,
            "title": title,
            "message": message,
            "actionUrl": action_url,
        }
        if data is not None:
            payload["data"] = Json(data)
        return await self.db.notification.create(data=payload)  # type: ignore[arg-type]

    async def list_notifications(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
    ) -> NotificationListResponse:
        """
        List a user's notifications, newest first

        Args:
            user_id: Owner of the notifications
            page: Page number (1-based)
            limit: Number of records per page
            unread_only: Only return unread notifications
            type: Filter by notification type

        Returns:
            NotificationListResponse with pagination and the unread count
        """
        where_input: NotificationWhereInput = {"userId": user_id}
        if unread_only:
            where_input["isRead"] = False
        if type:
            where_input["type"] = type

        notifications = await self.db.notification.find_many(
            where=where_input,
            skip=(page - 1) * limit,
            take=limit,
            order={"createdAt": "desc"},
        )
        total = await self.db.notification.count(where=where_input)

        return NotificationListResponse(
            notifications=[NotificationResponse.from_prisma(n) for n in notifications],
            pagination=PaginationMetadata.build(page, limit, total),
            unread_count=await self.unread_count(user_id),
        )

    async def unread_count(self, user_id: str) -> int:
        return await self.db.notification.count(
            where={"userId": user_id, "isRead": False}
        )

    async def mark_as_read(
        self, user_id: str, notification_id: str
    ) -> NotificationResponse:
        notification = await self.db.notification.find_first(
            where={"id": notification_id, "userId": user_id}
        )
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found",
            )
        if notification.isRead:
            return NotificationResponse.from_prisma(notification)

        updated = await self.db.notification.update(
            where={"id": notification_id},
            data={"isRead": True, "readAt": datetime.now(timezone.utc)},
        )
        return NotificationResponse.from_prisma(updated or notification)

    async def mark_all_as_read(self, user_id: str) -> MarkReadResponse:
        count = await self.db.notification.update_many(
            where={"userId": user_id, "isRead": False},
            data={"isRead": True, "readAt": datetime.now(timezone.utc)},
        )
        return MarkReadResponse(updated=count)
