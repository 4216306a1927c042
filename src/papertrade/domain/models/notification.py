"""In-app notification domain model."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from papertrade.domain.models.enums import NotificationType, NotificationPriority

# How long each notification type is kept before it expires. Trades emit
# TRADE_EXECUTION and gamification emits ACHIEVEMENT; the other types are
# reserved for producers outside trading such as alerts and announcements.
RETENTION_BY_TYPE: dict[NotificationType, timedelta] = {
    NotificationType.PRICE_ALERT: timedelta(days=7),
    NotificationType.TRADE_EXECUTION: timedelta(days=7),
    NotificationType.ACHIEVEMENT: timedelta(days=30),
    NotificationType.COURSE_PROGRESS: timedelta(days=30),
    NotificationType.DAILY_STREAK: timedelta(days=30),
    NotificationType.SYSTEM: timedelta(days=90),
}
DEFAULT_RETENTION = timedelta(days=14)


def expiry_for(notification_type: NotificationType, created_at: datetime) -> datetime:
    """Return when a notification of this type created at ``created_at`` expires."""
    return created_at + RETENTION_BY_TYPE.get(notification_type, DEFAULT_RETENTION)


@dataclass
class Notification:
    """A message shown in the owner's notification center."""

    notification_id: str
    owner_id: str
    title: str
    body: str
    type: NotificationType
    created_at: datetime
    expires_at: datetime
    data: dict[str, Any] = field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL
    read: bool = False
    read_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            self.type = NotificationType(self.type)
        if isinstance(self.priority, str):
            self.priority = NotificationPriority(self.priority)

