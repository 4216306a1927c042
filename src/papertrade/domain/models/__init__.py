"""Domain models package."""

from papertrade.domain.models.enums import (
    OrderSide,
    OrderType,
    OrderStatus,
    NotificationType,
    NotificationPriority,
)
from papertrade.domain.models.order import Order
from papertrade.domain.models.ledger import (
    Ledger,
    Holding,
    HoldingSnapshot,
    HistoryEntry,
    HISTORY_LIMIT,
)
from papertrade.domain.models.progress import (
    UserProgress,
    Badge,
    BadgeRule,
    BADGE_RULES,
    LEVEL_THRESHOLDS,
    POINTS,
    level_for_points,
    next_level_threshold,
)
from papertrade.domain.models.notification import Notification, expiry_for
from papertrade.domain.models.watchlist import WatchlistItem

__all__ = [
    "OrderSide",
    "OrderType",
    "OrderStatus",
    "NotificationType",
    "NotificationPriority",
    "Order",
    "Ledger",
    "Holding",
    "HoldingSnapshot",
    "HistoryEntry",
    "HISTORY_LIMIT",
    "UserProgress",
    "Badge",
    "BadgeRule",
    "BADGE_RULES",
    "LEVEL_THRESHOLDS",
    "POINTS",
    "level_for_points",
    "next_level_threshold",
    "Notification",
    "expiry_for",
    "WatchlistItem",
]
