"""
Integration tests for SQLAlchemy repositories with SQLite.

Tests cover:
- Ledger get-or-create, holdings and history persistence
- Optimistic version checks across sessions
- Order repository queries
- Progress upsert
- Watchlist idempotency
- Unit of work commit/rollback
"""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from papertrade.core.exceptions import ConcurrencyConflictError, NotFoundError
from papertrade.domain.models import (
    HISTORY_LIMIT,
    Ledger,
    Order,
    OrderSide,
    OrderType,
    UserProgress,
    WatchlistItem,
)
from papertrade.repositories.sqlalchemy import (
    Base,
    SqlAlchemyLedgerRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProgressRepository,
    SqlAlchemyUnitOfWork,
    SqlAlchemyWatchlistRepository,
)

from tests.conftest import eastern_datetime

AT = eastern_datetime(2024, 6, 15, 10, 0)


def _order(owner_id: str, side: OrderSide, symbol: str, quantity: str, price: str, minute: int = 0) -> Order:
    return Order.create(
        owner_id=owner_id,
        side=side,
        symbol=symbol,
        quantity=Decimal(quantity),
        price=Decimal(price),
        executed_at=eastern_datetime(2024, 6, 15, 10, minute),
    )


def _settle(ledger: Ledger, order: Order) -> None:
    ledger.apply_order(order, AT)
    prices = {order.symbol: order.price}
    ledger.revalue(prices)
    ledger.record_snapshot(prices, AT)


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite so separate sessions see each other's commits."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


# =============================================================================
# LEDGER REPOSITORY TESTS
# =============================================================================


class TestLedgerRepository:
    """Tests for SqlAlchemyLedgerRepository."""

    def test_get_or_create_opens_once(self, ledger_repo: SqlAlchemyLedgerRepository):
        """
        GIVEN no ledger for trader-1
        WHEN get_or_create is called twice
        THEN one ledger with the initial cash is returned both times
        """
        first = ledger_repo.get_or_create("trader-1", Decimal("100000"))
        second = ledger_repo.get_or_create("trader-1", Decimal("5"))

        assert first.ledger_id == second.ledger_id
        assert second.cash == Decimal("100000")
        assert second.initial_cash == Decimal("100000")
        assert second.holdings == []
        assert second.history == []

    def test_get_by_owner_missing(self, ledger_repo):
        assert ledger_repo.get_by_owner("nobody") is None

    def test_save_persists_holdings_and_history(self, ledger_repo):
        """
        GIVEN a fresh ledger
        WHEN a buy is applied, snapshotted and saved
        THEN reading it back returns the holding, the cash and the snapshot
        """
        ledger = ledger_repo.get_or_create("trader-1", Decimal("100000"))
        _settle(ledger, _order("trader-1", OrderSide.BUY, "AAPL", "10", "150"))

        ledger_repo.save(ledger)
        loaded = ledger_repo.get_by_owner("trader-1")

        assert loaded.cash == Decimal("98500")
        assert loaded.get_holding("AAPL").quantity == Decimal("10")
        assert loaded.get_holding("AAPL").average_cost == Decimal("150")
        assert len(loaded.history) == 1
        entry = loaded.history[0]
        assert entry.entry_id is not None
        assert entry.total_value == Decimal("100000")
        assert entry.holdings[0].symbol == "AAPL"
        assert entry.holdings[0].value == Decimal("1500")
        assert loaded.version > ledger.version

    def test_closed_holding_is_deleted(self, ledger_repo):
        ledger = ledger_repo.get_or_create("trader-1", Decimal("100000"))
        _settle(ledger, _order("trader-1", OrderSide.BUY, "AAPL", "10", "150"))
        ledger = ledger_repo.save(ledger)

        _settle(ledger, _order("trader-1", OrderSide.SELL, "AAPL", "10", "170"))
        ledger_repo.save(ledger)

        loaded = ledger_repo.get_by_owner("trader-1")
        assert loaded.holdings == []
        assert loaded.cash == Decimal("100200")
        assert len(loaded.history) == 2

    def test_evicted_history_rows_are_deleted(self, ledger_repo):
        """
        GIVEN a ledger with a full history
        WHEN one more snapshot is recorded and saved
        THEN the stored history stays at the cap, oldest entry dropped
        """
        ledger = ledger_repo.get_or_create("trader-1", Decimal("100000"))
        for i in range(HISTORY_LIMIT):
            ledger.cash = Decimal(i)
            ledger.record_snapshot({}, AT)
        ledger = ledger_repo.save(ledger)

        ledger.cash = Decimal("99999")
        ledger.record_snapshot({}, AT)
        ledger_repo.save(ledger)

        loaded = ledger_repo.get_by_owner("trader-1")
        assert len(loaded.history) == HISTORY_LIMIT
        assert loaded.history[0].cash == Decimal("1")
        assert loaded.history[-1].cash == Decimal("99999")

    def test_save_unknown_ledger_raises(self, ledger_repo):
        ledger = Ledger(
            ledger_id="ghost",
            owner_id="ghost",
            cash=Decimal("1"),
            initial_cash=Decimal("1"),
            total_value=Decimal("1"),
        )

        with pytest.raises(NotFoundError):
            ledger_repo.save(ledger)

    def test_stale_write_is_rejected(self, file_engine):
        """
        GIVEN two sessions that read the same ledger
        WHEN the second saves first and then the first saves
        THEN the first write raises ConcurrencyConflictError and the second wins
        """
        Session = sessionmaker(bind=file_engine, autoflush=False)
        first_session, second_session = Session(), Session()
        try:
            first_repo = SqlAlchemyLedgerRepository(first_session)
            second_repo = SqlAlchemyLedgerRepository(second_session)
            first_repo.get_or_create("trader-1", Decimal("100000"))

            mine = first_repo.get_by_owner("trader-1")
            theirs = second_repo.get_by_owner("trader-1")

            _settle(theirs, _order("trader-1", OrderSide.BUY, "MSFT", "1", "300"))
            second_repo.save(theirs)

            _settle(mine, _order("trader-1", OrderSide.BUY, "AAPL", "1", "150"))
            with pytest.raises(ConcurrencyConflictError):
                first_repo.save(mine)
        finally:
            first_session.close()
            second_session.close()

        check = Session()
        try:
            loaded = SqlAlchemyLedgerRepository(check).get_by_owner("trader-1")
            assert [h.symbol for h in loaded.holdings] == ["MSFT"]
            assert loaded.cash == Decimal("99700")
        finally:
            check.close()


# =============================================================================
# ORDER REPOSITORY TESTS
# =============================================================================


class TestOrderRepository:
    """Tests for SqlAlchemyOrderRepository."""

    def test_add_and_get(self, order_repo: SqlAlchemyOrderRepository):
        order = Order.create(
            owner_id="trader-1",
            side=OrderSide.BUY,
            symbol="AAPL",
            quantity=Decimal("2"),
            price=Decimal("150.25"),
            executed_at=AT,
            order_type=OrderType.LIMIT,
            limit_price=Decimal("151"),
            stop_loss=Decimal("140"),
        )

        order_repo.add(order)
        loaded = order_repo.get_by_id(order.order_id)

        assert loaded.order_type == OrderType.LIMIT
        assert loaded.limit_price == Decimal("151")
        assert loaded.stop_loss == Decimal("140")
        assert loaded.take_profit is None
        assert loaded.total_amount == Decimal("300.5")
        assert loaded.executed_at == AT

    def test_get_missing(self, order_repo):
        assert order_repo.get_by_id("missing") is None

    def test_list_recent_newest_first_per_owner(self, order_repo):
        for minute in range(3):
            order_repo.add(_order("trader-1", OrderSide.BUY, "AAPL", "1", "150", minute=minute))
        order_repo.add(_order("trader-2", OrderSide.BUY, "AAPL", "1", "150", minute=5))

        recent = order_repo.list_recent("trader-1", limit=2)

        assert [o.created_at.minute for o in recent] == [2, 1]
        assert order_repo.count_by_owner("trader-1") == 3
        assert order_repo.count_by_owner("nobody") == 0


# =============================================================================
# PROGRESS AND WATCHLIST REPOSITORY TESTS
# =============================================================================


class TestProgressRepository:

    def test_save_is_an_upsert(self, progress_repo: SqlAlchemyProgressRepository):
        progress_repo.save(UserProgress(owner_id="trader-1", points=5, total_trades=1))
        progress_repo.save(
            UserProgress(
                owner_id="trader-1",
                points=30,
                total_trades=2,
                successful_trades=1,
                profit_loss=Decimal("100"),
                win_rate=Decimal("50"),
            )
        )

        loaded = progress_repo.get_by_owner("trader-1")
        assert loaded.points == 30
        assert loaded.win_rate == Decimal("50")
        assert loaded.profit_loss == Decimal("100")
        assert len(progress_repo.top_by_points()) == 1

    def test_leaderboard_ties_break_by_owner(self, progress_repo):
        progress_repo.save(UserProgress(owner_id="bob", points=10))
        progress_repo.save(UserProgress(owner_id="alice", points=10))

        assert [p.owner_id for p in progress_repo.top_by_points()] == ["alice", "bob"]


class TestWatchlistRepository:

    def test_add_is_idempotent(self, watchlist_repo: SqlAlchemyWatchlistRepository):
        watchlist_repo.add(WatchlistItem(owner_id="trader-1", symbol="AAPL"))
        watchlist_repo.add(WatchlistItem(owner_id="trader-1", symbol="AAPL"))
        watchlist_repo.add(WatchlistItem(owner_id="trader-1", symbol="MSFT"))

        items = watchlist_repo.list_for_owner("trader-1")

        assert [i.symbol for i in items] == ["AAPL", "MSFT"]
        assert items[0].added_at is not None

    def test_remove(self, watchlist_repo):
        watchlist_repo.add(WatchlistItem(owner_id="trader-1", symbol="AAPL"))

        assert watchlist_repo.remove("trader-1", "AAPL") is True
        assert watchlist_repo.remove("trader-1", "AAPL") is False
        assert watchlist_repo.list_for_owner("trader-1") == []


# =============================================================================
# UNIT OF WORK TESTS
# =============================================================================


class TestUnitOfWork:
    """Order and ledger writes commit or roll back together."""

    def test_rollback_discards_order_and_ledger(self, test_session, ledger_repo, order_repo):
        """
        GIVEN a unit of work that added an order and updated a ledger
        WHEN it is rolled back instead of committed
        THEN neither change is visible
        """
        with pytest.raises(RuntimeError):
            with SqlAlchemyUnitOfWork(test_session) as uow:
                ledger = uow.ledgers.get_or_create("trader-1", Decimal("100000"))
                order = _order("trader-1", OrderSide.BUY, "AAPL", "1", "150")
                _settle(ledger, order)
                uow.orders.add(order)
                uow.ledgers.save(ledger)
                raise RuntimeError("abort")

        assert ledger_repo.get_by_owner("trader-1") is None
        assert order_repo.count_by_owner("trader-1") == 0

    def test_commit_persists_both(self, test_session, ledger_repo, order_repo):
        with SqlAlchemyUnitOfWork(test_session) as uow:
            ledger = uow.ledgers.get_or_create("trader-1", Decimal("100000"))
            order = _order("trader-1", OrderSide.BUY, "AAPL", "1", "150")
            _settle(ledger, order)
            uow.orders.add(order)
            uow.ledgers.save(ledger)
            uow.commit()

        assert ledger_repo.get_by_owner("trader-1").cash == Decimal("99850")
        assert order_repo.count_by_owner("trader-1") == 1
