"""Enumerations for domain models."""

from enum import Enum


class OrderSide(str, Enum):
    """Direction of an order."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """How an order is priced."""

    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(str, Enum):
    """Order lifecycle states.

    Settlement is synchronous, so orders are persisted as COMPLETED; the
    other states are kept for records imported from elsewhere.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class NotificationType(str, Enum):
    """Categories of in-app notifications."""

    PRICE_ALERT = "price_alert"
    TRADE_EXECUTION = "trade_execution"
    ACHIEVEMENT = "achievement"
    COURSE_PROGRESS = "course_progress"
    DAILY_STREAK = "daily_streak"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    """Delivery priority of a notification."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
