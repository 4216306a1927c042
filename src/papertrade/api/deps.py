"""Dependency injection for FastAPI."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from papertrade.config.settings import get_settings
from papertrade.core.exceptions import AuthenticationError
from papertrade.core.locks import OwnerLockRegistry
from papertrade.core.security import verify_access_token
from papertrade.providers import create_quote_provider
from papertrade.repositories.sqlalchemy.database import get_db, get_session
from papertrade.repositories.sqlalchemy import (
    SqlAlchemyLedgerRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProgressRepository,
    SqlAlchemyNotificationRepository,
    SqlAlchemyWatchlistRepository,
    SqlAlchemyUnitOfWork,
)
from papertrade.services import (
    QuoteService,
    SettlementService,
    PortfolioService,
    GamificationService,
    NotificationService,
    NotificationPurger,
    PriceFeed,
)

_bearer = HTTPBearer(auto_error=False)


# Process-wide singletons


@lru_cache(maxsize=1)
def get_quote_service() -> QuoteService:
    """Provide the shared QuoteService instance."""
    settings = get_settings()
    return QuoteService(
        provider=create_quote_provider(settings),
        ttl_seconds=settings.quote_cache_ttl_seconds,
        max_entries=settings.quote_cache_max_entries,
    )


@lru_cache(maxsize=1)
def get_lock_registry() -> OwnerLockRegistry:
    """Provide the shared per-owner lock registry."""
    return OwnerLockRegistry()


@lru_cache(maxsize=1)
def get_price_feed() -> PriceFeed:
    """Provide the shared PriceFeed instance."""
    return PriceFeed(
        quote_service=get_quote_service(),
        tick_seconds=get_settings().price_tick_seconds,
    )


def purge_expired_notifications() -> int:
    """Delete expired notifications using a fresh session."""
    session = get_session()
    try:
        return NotificationService(SqlAlchemyNotificationRepository(session)).purge_expired()
    finally:
        session.close()


@lru_cache(maxsize=1)
def get_notification_purger() -> NotificationPurger:
    """Provide the shared background notification purger."""
    return NotificationPurger(
        purge=purge_expired_notifications,
        interval_seconds=get_settings().notification_purge_interval_seconds,
    )


def reset_singletons() -> None:
    """Forget cached singletons (after settings change)."""
    get_quote_service.cache_clear()
    get_lock_registry.cache_clear()
    get_price_feed.cache_clear()
    get_notification_purger.cache_clear()


# Authentication


def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    """Resolve the caller's owner id from the bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not authorized, no token")
    return verify_access_token(credentials.credentials, get_settings().auth_secret_key)


# Repositories


def get_ledger_repo(db: Session = Depends(get_db)) -> SqlAlchemyLedgerRepository:
    """Provide LedgerRepository instance."""
    return SqlAlchemyLedgerRepository(db)


def get_order_repo(db: Session = Depends(get_db)) -> SqlAlchemyOrderRepository:
    """Provide OrderRepository instance."""
    return SqlAlchemyOrderRepository(db)


def get_progress_repo(db: Session = Depends(get_db)) -> SqlAlchemyProgressRepository:
    """Provide ProgressRepository instance."""
    return SqlAlchemyProgressRepository(db)


def get_notification_repo(db: Session = Depends(get_db)) -> SqlAlchemyNotificationRepository:
    """Provide NotificationRepository instance."""
    return SqlAlchemyNotificationRepository(db)


def get_watchlist_repo(db: Session = Depends(get_db)) -> SqlAlchemyWatchlistRepository:
    """Provide WatchlistRepository instance."""
    return SqlAlchemyWatchlistRepository(db)


def get_unit_of_work(db: Session = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    """Provide a unit of work bound to the request session."""
    return SqlAlchemyUnitOfWork(db)


# Services


def get_notification_service(
    notification_repo: SqlAlchemyNotificationRepository = Depends(get_notification_repo),
) -> NotificationService:
    """Provide NotificationService instance."""
    return NotificationService(notification_repo=notification_repo)


def get_gamification_service(
    progress_repo: SqlAlchemyProgressRepository = Depends(get_progress_repo),
    notifications: NotificationService = Depends(get_notification_service),
) -> GamificationService:
    """Provide GamificationService instance."""
    return GamificationService(progress_repo=progress_repo, notifications=notifications)


def get_settlement_service(
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    quote_service: QuoteService = Depends(get_quote_service),
    locks: OwnerLockRegistry = Depends(get_lock_registry),
    gamification: GamificationService = Depends(get_gamification_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> SettlementService:
    """Provide SettlementService instance."""
    settings = get_settings()
    return SettlementService(
        uow=uow,
        quote_service=quote_service,
        locks=locks,
        initial_cash=settings.initial_cash,
        order_fee=settings.order_fee,
        max_attempts=settings.settlement_max_attempts,
        listeners=[gamification, notifications],
    )


def get_portfolio_service(
    ledger_repo: SqlAlchemyLedgerRepository = Depends(get_ledger_repo),
    order_repo: SqlAlchemyOrderRepository = Depends(get_order_repo),
    watchlist_repo: SqlAlchemyWatchlistRepository = Depends(get_watchlist_repo),
    quote_service: QuoteService = Depends(get_quote_service),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    settings = get_settings()
    return PortfolioService(
        ledger_repo=ledger_repo,
        order_repo=order_repo,
        watchlist_repo=watchlist_repo,
        quote_service=quote_service,
        initial_cash=settings.initial_cash,
        order_history_limit=settings.order_history_limit,
    )
