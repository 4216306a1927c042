"""Gamification service: trading statistics, points, levels and badges."""

import logging
from typing import Optional

from papertrade.core.timezone import now_eastern
from papertrade.domain.models import NotificationType, Order, UserProgress
from papertrade.repositories.protocols import ProgressRepository
from papertrade.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10


class GamificationService:
    """
    Tracks per-owner trading stats and awards points for trades.

    When a trade earns a badge or a new level and ``notifications`` is
    given, an achievement notification is stored for the owner.
    """

    def __init__(
        self,
        progress_repo: ProgressRepository,
        notifications: Optional[NotificationService] = None,
    ):
        self._progress_repo = progress_repo
        self._notifications = notifications

    def on_order_settled(self, order: Order) -> None:
        """Count a settled order toward the owner's stats."""
        self.record_trade(order)

    def record_trade(self, order: Order) -> UserProgress:
        progress = self.get_progress(order.owner_id)
        previous_level = progress.level
        earned = progress.record_trade(order.profit_loss)
        progress.updated_at = now_eastern()
        new_badges = progress.award_badges(progress.updated_at)
        saved = self._progress_repo.save(progress)

        logger.info(
            "Awarded %d points to %s for order %s", earned, order.owner_id, order.order_id
        )
        for badge in new_badges:
            logger.info("%s earned badge %s", order.owner_id, badge.name)
            self._notify(
                order.owner_id,
                title="Achievement Unlocked!",
                body=f'Congratulations! You\'ve earned the "{badge.name}" badge',
                data={"badge": badge.name, "description": badge.description, "points": saved.points},
            )
        if saved.level > previous_level:
            logger.info("%s reached level %d", order.owner_id, saved.level)
            self._notify(
                order.owner_id,
                title="Level Up!",
                body=f"You reached level {saved.level}",
                data={"level": saved.level, "points": saved.points},
            )
        return saved

    def _notify(self, owner_id: str, title: str, body: str, data: dict) -> None:
        if self._notifications is None:
            return
        self._notifications.notify(
            owner_id=owner_id,
            title=title,
            body=body,
            notification_type=NotificationType.ACHIEVEMENT,
            data=data,
        )

    def get_progress(self, owner_id: str) -> UserProgress:
        """The owner's progress; a fresh record if they have never traded."""
        return self._progress_repo.get_by_owner(owner_id) or UserProgress(owner_id=owner_id)

    def leaderboard(self, limit: int = LEADERBOARD_SIZE) -> list[UserProgress]:
        return self._progress_repo.top_by_points(limit)
