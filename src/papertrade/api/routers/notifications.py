"""In-app notification endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from papertrade.api.deps import get_current_owner, get_notification_service
from papertrade.api.schemas import (
    NotificationResponse,
    NotificationListResponse,
    PaginationResponse,
    UnreadCountResponse,
    MarkReadRequest,
    MarkReadResponse,
)
from papertrade.domain.models import NotificationType
from papertrade.services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[NotificationType] = Query(None, description="Filter by type"),
    read: Optional[bool] = Query(None, description="Filter by read state"),
    owner_id: str = Depends(get_current_owner),
    notifications: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """List unexpired notifications, newest first."""
    result = notifications.list_notifications(
        owner_id,
        page=page,
        limit=limit,
        notification_type=type,
        read=read,
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result.notifications],
        unread_count=result.unread_count,
        pagination=PaginationResponse(page=result.page, limit=result.limit, total=result.total),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    owner_id: str = Depends(get_current_owner),
    notifications: NotificationService = Depends(get_notification_service),
) -> UnreadCountResponse:
    """Count unread, unexpired notifications."""
    return UnreadCountResponse(unread_count=notifications.unread_count(owner_id))


@router.post("/read", response_model=MarkReadResponse)
def mark_read(
    data: MarkReadRequest,
    owner_id: str = Depends(get_current_owner),
    notifications: NotificationService = Depends(get_notification_service),
) -> MarkReadResponse:
    """Mark the given notifications as read."""
    return MarkReadResponse(updated=notifications.mark_read(owner_id, data.notification_ids))
