from typing import Optional

from fastapi import APIRouter, Depends, Query
from prisma.enums import NotificationType
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.auth.dependencies import get_current_user
from spareflow.domains.notifications.models import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from spareflow.domains.notifications.service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    operation_id="getNotifications",
)
async def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    type: Optional[NotificationType] = Query(None),
    user: User = Depends(get_current_user),
    db: Prisma = Depends(get_db),
) -> NotificationListResponse:
    service = NotificationService(db)
    return await service.list_notifications(
        user.id, page=page, limit=limit, unread_only=unread_only, type=type
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    operation_id="getUnreadNotificationCount",
)
async def get_unread_count(
    user: User = Depends(get_current_user),
    db: Prisma = Depends(get_db),
) -> UnreadCountResponse:
    service = NotificationService(db)
    return UnreadCountResponse(unread_count=await service.unread_count(user.id))


@router.post(
    "/read-all",
    response_model=MarkReadResponse,
    operation_id="markAllNotificationsRead",
)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: Prisma = Depends(get_db),
) -> MarkReadResponse:
    service = NotificationService(db)
    return await service.mark_all_as_read(user.id)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    operation_id="markNotificationRead",
)
async def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    db: Prisma = Depends(get_db),
) -> NotificationResponse:
    service = NotificationService(db)
    return await service.mark_as_read(user.id, notification_id)
