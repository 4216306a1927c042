"""Domain layer - business models with no persistence or transport concerns."""

from papertrade.domain.models import (
    Ledger,
    Holding,
    HistoryEntry,
    Order,
    OrderSide,
    OrderType,
    OrderStatus,
    UserProgress,
    Notification,
    NotificationType,
    WatchlistItem,
)

__all__ = [
    "Ledger",
    "Holding",
    "HistoryEntry",
    "Order",
    "OrderSide",
    "OrderType",
    "OrderStatus",
    "UserProgress",
    "Notification",
    "NotificationType",
    "WatchlistItem",
]
