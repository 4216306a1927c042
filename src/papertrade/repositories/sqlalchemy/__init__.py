"""SQLAlchemy repository implementations."""

from papertrade.repositories.sqlalchemy.database import (
    create_db_engine,
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    reset_database,
    Base,
)
from papertrade.repositories.sqlalchemy.ledger_repo import SqlAlchemyLedgerRepository
from papertrade.repositories.sqlalchemy.order_repo import SqlAlchemyOrderRepository
from papertrade.repositories.sqlalchemy.progress_repo import SqlAlchemyProgressRepository
from papertrade.repositories.sqlalchemy.notification_repo import SqlAlchemyNotificationRepository
from papertrade.repositories.sqlalchemy.watchlist_repo import SqlAlchemyWatchlistRepository
from papertrade.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyLedgerRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyProgressRepository",
    "SqlAlchemyNotificationRepository",
    "SqlAlchemyWatchlistRepository",
    "SqlAlchemyUnitOfWork",
]
