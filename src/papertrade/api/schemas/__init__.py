"""Pydantic schemas for API request/response."""

from papertrade.api.schemas.trading import (
    TradeExecuteRequest,
    TradeExecuteResponse,
    OrderResponse,
    OrderListResponse,
    HoldingResponse,
    PortfolioResponse,
    PerformancePointResponse,
    PerformanceResponse,
    WatchlistAddRequest,
    WatchlistEntryResponse,
    WatchlistResponse,
)
from papertrade.api.schemas.progress import (
    BadgeResponse,
    ProgressResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
)
from papertrade.api.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    PaginationResponse,
    UnreadCountResponse,
    MarkReadRequest,
    MarkReadResponse,
)

__all__ = [
    "TradeExecuteRequest",
    "TradeExecuteResponse",
    "OrderResponse",
    "OrderListResponse",
    "HoldingResponse",
    "PortfolioResponse",
    "PerformancePointResponse",
    "PerformanceResponse",
    "WatchlistAddRequest",
    "WatchlistEntryResponse",
    "WatchlistResponse",
    "BadgeResponse",
    "ProgressResponse",
    "LeaderboardEntryResponse",
    "LeaderboardResponse",
    "NotificationResponse",
    "NotificationListResponse",
    "PaginationResponse",
    "UnreadCountResponse",
    "MarkReadRequest",
    "MarkReadResponse",
]
