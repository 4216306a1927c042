"""Repository layer - data access abstractions and implementations."""

from papertrade.repositories.protocols import (
    LedgerRepository,
    OrderRepository,
    ProgressRepository,
    NotificationRepository,
    WatchlistRepository,
    UnitOfWork,
)

__all__ = [
    "LedgerRepository",
    "OrderRepository",
    "ProgressRepository",
    "NotificationRepository",
    "WatchlistRepository",
    "UnitOfWork",
]
