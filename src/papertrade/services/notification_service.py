"""In-app notification service."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from papertrade.core.exceptions import ValidationError
from papertrade.core.timezone import now_eastern
from papertrade.domain.models import (
    Notification,
    NotificationPriority,
    NotificationType,
    Order,
    expiry_for,
)
from papertrade.repositories.protocols import NotificationRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass
class NotificationPage:
    """One page of an owner's notifications."""

    notifications: list[Notification]
    unread_count: int
    page: int
    limit: int
    total: int


class NotificationService:
    """
    Creates and queries in-app notifications.

    Expired notifications are never returned; ``purge_expired`` removes
    them from storage.
    """

    def __init__(self, notification_repo: NotificationRepository):
        self._repo = notification_repo

    def on_order_settled(self, order: Order) -> None:
        """Notify the owner that their order was executed."""
        self.notify_trade_executed(order)

    def notify_trade_executed(self, order: Order) -> Notification:
        return self.notify(
            owner_id=order.owner_id,
            title="Trade Executed",
            body=(
                f"Your {order.side.value} order for {order.quantity} {order.symbol} "
                f"at ${order.price} has been executed"
            ),
            notification_type=NotificationType.TRADE_EXECUTION,
            data={
                "order_id": order.order_id,
                "symbol": order.symbol,
                "side": order.side.value,
                "quantity": str(order.quantity),
                "price": str(order.price),
            },
        )

    def notify(
        self,
        owner_id: str,
        title: str,
        body: str,
        notification_type: NotificationType,
        data: Optional[dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> Notification:
        """Store a notification with its type-based expiry."""
        created = now_eastern()
        notification = Notification(
            notification_id=str(uuid.uuid4()),
            owner_id=owner_id,
            title=title,
            body=body,
            type=notification_type,
            created_at=created,
            expires_at=expiry_for(NotificationType(notification_type), created),
            data=data or {},
            priority=priority,
        )
        saved = self._repo.add(notification)
        logger.debug("Stored %s notification for %s", saved.type.value, owner_id)
        return saved

    def list_notifications(
        self,
        owner_id: str,
        page: int = 1,
        limit: int = 20,
        notification_type: Optional[NotificationType] = None,
        read: Optional[bool] = None,
    ) -> NotificationPage:
        if page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        now = now_eastern()
        return NotificationPage(
            notifications=self._repo.list_for_owner(
                owner_id,
                now,
                page=page,
                limit=limit,
                notification_type=notification_type,
                read=read,
            ),
            unread_count=self._repo.count_unread(owner_id, now),
            page=page,
            limit=limit,
            total=self._repo.count_for_owner(owner_id, now),
        )

    def unread_count(self, owner_id: str) -> int:
        return self._repo.count_unread(owner_id, now_eastern())

    def mark_read(self, owner_id: str, notification_ids: list[str]) -> int:
        """Mark notifications read; ids belonging to other owners are ignored."""
        return self._repo.mark_read(owner_id, notification_ids, now_eastern())

    def purge_expired(self) -> int:
        removed = self._repo.delete_expired(now_eastern())
        if removed:
            logger.info("Purged %d expired notifications", removed)
        return removed


class NotificationPurger:
    """
    Removes expired notifications every ``interval_seconds`` in the background.

    ``purge`` runs in a worker thread and returns how many rows it removed.
    """

    def __init__(self, purge: Callable[[], int], interval_seconds: float = 3600.0) -> None:
        self._purge = purge
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run(), name="notification-purger")
        logger.info("Notification purger started (every %ss)", self._interval)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

    async def purge_once(self) -> int:
        return await asyncio.to_thread(self._purge)

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await self.purge_once()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Purging expired notifications failed")
