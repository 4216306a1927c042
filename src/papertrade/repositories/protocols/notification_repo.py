"""Notification repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from papertrade.domain.models import Notification, NotificationType


class NotificationRepository(Protocol):
    """Interface for in-app notification data access."""

    def add(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        ...

    def list_for_owner(
        self,
        owner_id: str,
        now: datetime,
        page: int = 1,
        limit: int = 20,
        notification_type: Optional[NotificationType] = None,
        read: Optional[bool] = None,
    ) -> list[Notification]:
        """List unexpired notifications, newest first."""
        ...

    def count_for_owner(self, owner_id: str, now: datetime) -> int:
        """Count unexpired notifications."""
        ...

    def count_unread(self, owner_id: str, now: datetime) -> int:
        """Count unexpired unread notifications."""
        ...

    def mark_read(self, owner_id: str, notification_ids: list[str], read_at: datetime) -> int:
        """Mark the owner's notifications read; returns how many changed."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Remove expired notifications; returns how many were deleted."""
        ...
