"""
Pytest configuration and fixtures for paper trading ledger tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic and failing quote providers
- Repository, unit of work and service fixtures
- A trade factory for settling orders at chosen prices
- API test client with bearer-token helpers
"""

import os
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

# Must be set before the app module reads settings
os.environ.setdefault("PAPERTRADE_DATABASE_URL", "sqlite://")
os.environ.setdefault("PAPERTRADE_PRICE_FEED_ENABLED", "false")

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from papertrade.main import app
from papertrade.api.deps import get_quote_service, get_lock_registry, get_price_feed
from papertrade.repositories.sqlalchemy.database import Base, get_db
# Import ORM models to register them with Base before creating tables
from papertrade.repositories.sqlalchemy import orm_models  # noqa: F401
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
    PriceFeed,
    TradeRequest,
)
from papertrade.core.locks import OwnerLockRegistry
from papertrade.core.security import create_access_token
from papertrade.core.timezone import EASTERN_TZ
from papertrade.config.settings import get_settings, reset_settings
from papertrade.domain.models import Order, OrderSide, OrderType
from papertrade.domain.views import Quote, SettlementResult


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def ledger_repo(test_session) -> SqlAlchemyLedgerRepository:
    """Provide test LedgerRepository."""
    return SqlAlchemyLedgerRepository(test_session)


@pytest.fixture
def order_repo(test_session) -> SqlAlchemyOrderRepository:
    """Provide test OrderRepository."""
    return SqlAlchemyOrderRepository(test_session)


@pytest.fixture
def progress_repo(test_session) -> SqlAlchemyProgressRepository:
    """Provide test ProgressRepository."""
    return SqlAlchemyProgressRepository(test_session)


@pytest.fixture
def notification_repo(test_session) -> SqlAlchemyNotificationRepository:
    """Provide test NotificationRepository."""
    return SqlAlchemyNotificationRepository(test_session)


@pytest.fixture
def watchlist_repo(test_session) -> SqlAlchemyWatchlistRepository:
    """Provide test WatchlistRepository."""
    return SqlAlchemyWatchlistRepository(test_session)


@pytest.fixture
def unit_of_work(test_session) -> SqlAlchemyUnitOfWork:
    """Provide a unit of work on the test session."""
    return SqlAlchemyUnitOfWork(test_session)


# =============================================================================
# QUOTE PROVIDER FIXTURES
# =============================================================================


class DeterministicQuoteProvider:
    """
    Deterministic quote provider for testing.

    Serves fixed quotes that tests can move with ``set_price``.
    Unknown symbols raise, like a real provider would.
    """

    FIXED_QUOTES = {
        "AAPL": (Decimal("150.00"), Decimal("1.25"), 1_000_000),
        "GOOGL": (Decimal("142.75"), Decimal("1.25"), 500_000),
        "MSFT": (Decimal("378.25"), Decimal("1.45"), 750_000),
        "TSLA": (Decimal("248.75"), Decimal("-1.35"), 2_000_000),
        "SPY": (Decimal("485.25"), Decimal("1.15"), 3_000_000),
    }

    def __init__(self, as_of: Optional[datetime] = None):
        self._as_of = as_of or eastern_datetime(2024, 6, 15, 16, 0, 0)
        self._quotes = dict(self.FIXED_QUOTES)
        self.calls: list[str] = []

    def set_price(self, symbol: str, price: Decimal) -> None:
        _, change, volume = self._quotes.get(symbol.upper(), (None, Decimal("0"), 0))
        self._quotes[symbol.upper()] = (Decimal(price), change, volume)

    def get_quote(self, symbol: str) -> Quote:
        """Return the deterministic quote for ``symbol``."""
        symbol = symbol.upper()
        self.calls.append(symbol)
        if symbol not in self._quotes:
            raise LookupError(f"No quote for {symbol}")
        price, change, volume = self._quotes[symbol]
        return Quote(symbol=symbol, price=price, change=change, volume=volume, as_of=self._as_of)


class FailingQuoteProvider:
    """Quote provider that always raises an exception."""

    def __init__(self):
        self.calls = 0

    def get_quote(self, symbol: str) -> Quote:
        self.calls += 1
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider(fixed_now) -> DeterministicQuoteProvider:
    """Provide deterministic quote provider."""
    return DeterministicQuoteProvider(as_of=fixed_now)


@pytest.fixture
def failing_provider() -> FailingQuoteProvider:
    """Provide a quote provider that always fails."""
    return FailingQuoteProvider()


@pytest.fixture
def quote_service(deterministic_provider) -> QuoteService:
    """
    Provide QuoteService over the deterministic provider.

    TTL is zero so every lookup sees prices moved with ``set_price``.
    """
    return QuoteService(provider=deterministic_provider, ttl_seconds=0, max_entries=100)


# =============================================================================
# LISTENER HELPERS
# =============================================================================


class RecordingListener:
    """Collects settled orders."""

    def __init__(self):
        self.orders: list[Order] = []

    def on_order_settled(self, order: Order) -> None:
        self.orders.append(order)


class ExplodingListener:
    """Listener that always fails."""

    def on_order_settled(self, order: Order) -> None:
        raise RuntimeError("listener down")


@pytest.fixture
def recording_listener() -> RecordingListener:
    return RecordingListener()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def lock_registry() -> OwnerLockRegistry:
    """Provide a fresh per-owner lock registry."""
    return OwnerLockRegistry()


@pytest.fixture
def gamification_service(progress_repo) -> GamificationService:
    """Provide test GamificationService."""
    return GamificationService(progress_repo=progress_repo)


@pytest.fixture
def notification_service(notification_repo) -> NotificationService:
    """Provide test NotificationService."""
    return NotificationService(notification_repo=notification_repo)


@pytest.fixture
def settlement_service(
    unit_of_work,
    quote_service,
    lock_registry,
    recording_listener,
) -> SettlementService:
    """Provide test SettlementService with a recording listener."""
    return SettlementService(
        uow=unit_of_work,
        quote_service=quote_service,
        locks=lock_registry,
        initial_cash=Decimal("100000"),
        listeners=[recording_listener],
    )


@pytest.fixture
def portfolio_service(ledger_repo, order_repo, watchlist_repo, quote_service) -> PortfolioService:
    """Provide test PortfolioService."""
    return PortfolioService(
        ledger_repo=ledger_repo,
        order_repo=order_repo,
        watchlist_repo=watchlist_repo,
        quote_service=quote_service,
        initial_cash=Decimal("100000"),
    )


@pytest.fixture
def price_feed(quote_service) -> PriceFeed:
    """Provide a PriceFeed that is never started; tests drive ``tick`` directly."""
    return PriceFeed(quote_service=quote_service, tick_seconds=0.01)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def trade(settlement_service, deterministic_provider) -> Callable[..., SettlementResult]:
    """Factory that settles a trade at a chosen market price."""

    def _trade(
        side: str,
        symbol: str,
        quantity,
        price=None,
        owner_id: str = "trader-1",
        order_type: OrderType = OrderType.MARKET,
        limit_price: Optional[Decimal] = None,
    ) -> SettlementResult:
        if price is not None:
            deterministic_provider.set_price(symbol, Decimal(str(price)))
        return settlement_service.execute_trade(
            TradeRequest(
                owner_id=owner_id,
                side=OrderSide(side),
                symbol=symbol,
                quantity=Decimal(str(quantity)),
                order_type=order_type,
                limit_price=limit_price,
            )
        )

    return _trade


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


def make_token(owner_id: str) -> str:
    """Mint a bearer token valid under the current settings."""
    settings = get_settings()
    return create_access_token(owner_id, settings.auth_secret_key, settings.auth_token_ttl_seconds)


def auth_header(owner_id: str = "trader-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(owner_id)}"}


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization header for the default test owner."""
    return auth_header("trader-1")


@pytest.fixture
def client(test_engine, quote_service) -> TestClient:
    """Provide FastAPI test client with test database and deterministic quotes."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    locks = OwnerLockRegistry()
    feed = PriceFeed(quote_service=quote_service, tick_seconds=60)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_service] = lambda: quote_service
    app.dependency_overrides[get_lock_registry] = lambda: locks
    app.dependency_overrides[get_price_feed] = lambda: feed
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(Decimal(str(actual)) - Decimal(str(expected)))
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


def unique_owner() -> str:
    return f"owner-{uuid.uuid4().hex[:8]}"
