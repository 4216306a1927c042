"""Pydantic schemas for notification endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from papertrade.domain.models.enums import NotificationType, NotificationPriority


class NotificationResponse(BaseModel):
    """Response schema for a single notification."""

    model_config = {"from_attributes": True}

    notification_id: str
    title: str
    body: str
    type: NotificationType
    priority: NotificationPriority
    data: dict[str, Any] = Field(default_factory=dict)
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    expires_at: datetime


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int


class NotificationListResponse(BaseModel):
    """Response schema for a page of notifications."""

    notifications: list[NotificationResponse]
    unread_count: int
    pagination: PaginationResponse


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadRequest(BaseModel):
    """Request schema for marking notifications read."""

    notification_ids: list[str] = Field(..., min_length=1, max_length=100)


class MarkReadResponse(BaseModel):
    updated: int
