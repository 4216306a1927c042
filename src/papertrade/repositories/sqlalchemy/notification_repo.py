"""SQLAlchemy implementation of NotificationRepository."""

import json
from datetime import datetime
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from papertrade.core.timezone import to_eastern
from papertrade.domain.models import Notification, NotificationType
from papertrade.repositories.sqlalchemy.orm_models import NotificationORM


class SqlAlchemyNotificationRepository:
    """SQLAlchemy-backed notification repository."""

    def __init__(self, db: Session):
        self._db = db

    def add(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        orm = NotificationORM(
            notification_id=notification.notification_id,
            owner_id=notification.owner_id,
            title=notification.title,
            body=notification.body,
            type=notification.type,
            data_json=json.dumps(notification.data, default=str) if notification.data else None,
            priority=notification.priority,
            read=notification.read,
            read_at=notification.read_at,
            created_at=notification.created_at,
            expires_at=notification.expires_at,
        )
        self._db.add(orm)
        self._db.commit()
        self._db.refresh(orm)
        return self._to_domain(orm)

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
        conditions = [
            NotificationORM.owner_id == owner_id,
            NotificationORM.expires_at > now,
        ]
        if notification_type is not None:
            conditions.append(NotificationORM.type == notification_type)
        if read is not None:
            conditions.append(NotificationORM.read == read)

        rows = (
            self._db.query(NotificationORM)
            .filter(and_(*conditions))
            .order_by(NotificationORM.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def count_for_owner(self, owner_id: str, now: datetime) -> int:
        """Count unexpired notifications."""
        return (
            self._db.query(NotificationORM)
            .filter(
                NotificationORM.owner_id == owner_id,
                NotificationORM.expires_at > now,
            )
            .count()
        )

    def count_unread(self, owner_id: str, now: datetime) -> int:
        """Count unexpired unread notifications."""
        return (
            self._db.query(NotificationORM)
            .filter(
                NotificationORM.owner_id == owner_id,
                NotificationORM.read == False,  # noqa: E712
                NotificationORM.expires_at > now,
            )
            .count()
        )

    def mark_read(self, owner_id: str, notification_ids: list[str], read_at: datetime) -> int:
        """Mark the owner's notifications read; returns how many changed."""
        if not notification_ids:
            return 0
        updated = (
            self._db.query(NotificationORM)
            .filter(
                NotificationORM.owner_id == owner_id,
                NotificationORM.notification_id.in_(notification_ids),
                NotificationORM.read == False,  # noqa: E712
            )
            .update({"read": True, "read_at": read_at}, synchronize_session=False)
        )
        self._db.commit()
        return updated

    def delete_expired(self, now: datetime) -> int:
        """Remove expired notifications; returns how many were deleted."""
        deleted = (
            self._db.query(NotificationORM)
            .filter(NotificationORM.expires_at <= now)
            .delete(synchronize_session=False)
        )
        self._db.commit()
        return deleted

    @staticmethod
    def _to_domain(orm: NotificationORM) -> Notification:
        return Notification(
            notification_id=orm.notification_id,
            owner_id=orm.owner_id,
            title=orm.title,
            body=orm.body,
            type=orm.type,
            created_at=to_eastern(orm.created_at),
            expires_at=to_eastern(orm.expires_at),
            data=json.loads(orm.data_json) if orm.data_json else {},
            priority=orm.priority,
            read=bool(orm.read),
            read_at=to_eastern(orm.read_at),
        )
