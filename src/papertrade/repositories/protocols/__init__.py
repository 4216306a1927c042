"""Repository protocol definitions (interfaces)."""

from papertrade.repositories.protocols.ledger_repo import LedgerRepository
from papertrade.repositories.protocols.order_repo import OrderRepository
from papertrade.repositories.protocols.progress_repo import ProgressRepository
from papertrade.repositories.protocols.notification_repo import NotificationRepository
from papertrade.repositories.protocols.watchlist_repo import WatchlistRepository
from papertrade.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "LedgerRepository",
    "OrderRepository",
    "ProgressRepository",
    "NotificationRepository",
    "WatchlistRepository",
    "UnitOfWork",
]
