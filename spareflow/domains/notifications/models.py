# spareflow/domains/notifications/models.py
from datetime import datetime
from typing import Any, List, Optional

from prisma.enums import NotificationPriority, NotificationType
from prisma.models import Notification
from pydantic import BaseModel

from spareflow.shared.models import PaginationMetadata


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    data: Optional[Any] = None
    actionUrl: Optional[str] = None
    isRead: bool
    readAt: Optional[datetime] = None
    createdAt: datetime

    @classmethod
    def from_prisma(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            type=notification.type,
            priority=notification.priority,
            title=notification.title,
            message=notification.message,
            data=notification.data,
            actionUrl=notification.actionUrl,
            isRead=notification.isRead,
            readAt=notification.readAt,
            createdAt=notification.createdAt,
        )


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    pagination: PaginationMetadata
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadResponse(BaseModel):
    updated: int
