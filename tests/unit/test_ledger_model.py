"""
Unit tests for the Ledger and Order domain models.

Tests cover:
- Order creation (total amount, cash impact)
- Buy/sell pre-checks
- Weighted average cost
- Holding removal at zero
- Revaluation and returns
- Bounded history (FIFO eviction)
"""

from decimal import Decimal

import pytest

from papertrade.core.exceptions import InsufficientFundsError, InsufficientHoldingsError
from papertrade.domain.models import (
    HISTORY_LIMIT,
    Ledger,
    Order,
    OrderSide,
    OrderStatus,
    OrderType,
)

from tests.conftest import eastern_datetime


def _ledger(cash: str = "100000") -> Ledger:
    return Ledger(
        ledger_id="ledger-1",
        owner_id="trader-1",
        cash=Decimal(cash),
        initial_cash=Decimal("100000"),
        total_value=Decimal(cash),
    )


def _order(side: OrderSide, symbol: str, quantity: str, price: str, fees: str = "0") -> Order:
    return Order.create(
        owner_id="trader-1",
        side=side,
        symbol=symbol,
        quantity=Decimal(quantity),
        price=Decimal(price),
        executed_at=eastern_datetime(2024, 6, 15),
        fees=Decimal(fees),
    )


AT = eastern_datetime(2024, 6, 15)


# =============================================================================
# ORDER TESTS
# =============================================================================


class TestOrderCreate:
    """Tests for Order.create."""

    def test_total_amount_includes_fees(self):
        """
        GIVEN a buy of 10 @ 150 with 4.95 fees
        WHEN the order is created
        THEN total_amount = 10*150 + 4.95 and status is completed
        """
        order = _order(OrderSide.BUY, "aapl", "10", "150", fees="4.95")

        assert order.total_amount == Decimal("1504.95")
        assert order.status == OrderStatus.COMPLETED
        assert order.order_type == OrderType.MARKET
        assert order.symbol == "AAPL"
        assert order.created_at == order.executed_at

    def test_net_cash_impact_by_side(self):
        """
        GIVEN a buy and a sell with fees
        WHEN net_cash_impact is read
        THEN buy removes gross + fees and sell adds gross - fees
        """
        buy = _order(OrderSide.BUY, "AAPL", "10", "150", fees="1")
        sell = _order(OrderSide.SELL, "AAPL", "10", "150", fees="1")

        assert buy.net_cash_impact == Decimal("-1501")
        assert sell.net_cash_impact == Decimal("1499")

    def test_order_is_immutable(self):
        """
        GIVEN a created order
        WHEN a field is assigned
        THEN the assignment is rejected
        """
        order = _order(OrderSide.BUY, "AAPL", "1", "150")

        with pytest.raises(Exception):
            order.price = Decimal("1")

    def test_enum_strings_are_coerced(self):
        """
        GIVEN an Order built with string enum values
        WHEN it is constructed
        THEN the fields hold enum members
        """
        order = Order(
            order_id="o-1",
            owner_id="trader-1",
            side="sell",
            symbol="AAPL",
            quantity=Decimal("1"),
            price=Decimal("1"),
            order_type="limit",
            status="pending",
        )

        assert order.side is OrderSide.SELL
        assert order.order_type is OrderType.LIMIT
        assert order.status is OrderStatus.PENDING


# =============================================================================
# SETTLEMENT MATH TESTS
# =============================================================================


class TestApplyOrder:
    """Tests for Ledger.apply_order."""

    def test_buy_debits_cash_and_opens_holding(self):
        """
        GIVEN a ledger with 100000 cash
        WHEN 10 AAPL are bought at 150
        THEN cash is 98500 and the holding has quantity 10, average cost 150
        """
        ledger = _ledger()

        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)

        assert ledger.cash == Decimal("98500")
        holding = ledger.get_holding("AAPL")
        assert holding.quantity == Decimal("10")
        assert holding.average_cost == Decimal("150")

    def test_second_buy_uses_weighted_average(self):
        """
        GIVEN 10 AAPL at average cost 150
        WHEN 5 more are bought at 180
        THEN average cost is (10*150 + 5*180)/15 = 160 and cash is 97600
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)

        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "5", "180"), AT)

        holding = ledger.get_holding("AAPL")
        assert holding.quantity == Decimal("15")
        assert holding.average_cost == Decimal("160")
        assert ledger.cash == Decimal("97600")

    def test_sell_to_zero_removes_holding(self):
        """
        GIVEN 15 AAPL at average cost 160 and 97600 cash
        WHEN all 15 are sold at 170
        THEN the holding is gone and cash is 100150
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "5", "180"), AT)

        ledger.apply_order(_order(OrderSide.SELL, "AAPL", "15", "170"), AT)

        assert ledger.get_holding("AAPL") is None
        assert ledger.holdings == []
        assert ledger.cash == Decimal("100150")

    def test_partial_sell_keeps_average_cost(self):
        """
        GIVEN 10 AAPL at 150
        WHEN 4 are sold at 200
        THEN 6 remain at average cost 150
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)

        ledger.apply_order(_order(OrderSide.SELL, "AAPL", "4", "200"), AT)

        holding = ledger.get_holding("AAPL")
        assert holding.quantity == Decimal("6")
        assert holding.average_cost == Decimal("150")
        assert ledger.cash == Decimal("99300")

    def test_buy_over_cash_is_rejected_without_mutation(self):
        """
        GIVEN a ledger with 1000 cash
        WHEN 10 shares at 150 are bought
        THEN InsufficientFundsError is raised and nothing changes
        """
        ledger = _ledger(cash="1000")

        with pytest.raises(InsufficientFundsError):
            ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)

        assert ledger.cash == Decimal("1000")
        assert ledger.holdings == []

    def test_fees_count_toward_funds_check(self):
        """
        GIVEN exactly enough cash for the shares but not the fee
        WHEN the buy is checked
        THEN InsufficientFundsError is raised
        """
        ledger = _ledger(cash="1500")

        with pytest.raises(InsufficientFundsError):
            ledger.ensure_can_buy(Decimal("10"), Decimal("150"), Decimal("0.01"))

    def test_buy_spending_all_cash_is_allowed(self):
        """
        GIVEN 1500 cash
        WHEN 10 shares at 150 are bought
        THEN cash reaches exactly zero
        """
        ledger = _ledger(cash="1500")

        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)

        assert ledger.cash == Decimal("0")

    def test_sell_without_holding_is_rejected(self):
        """
        GIVEN no MSFT holding
        WHEN MSFT is sold
        THEN InsufficientHoldingsError is raised
        """
        ledger = _ledger()

        with pytest.raises(InsufficientHoldingsError) as exc_info:
            ledger.apply_order(_order(OrderSide.SELL, "MSFT", "1", "300"), AT)

        assert exc_info.value.code == "INSUFFICIENT_HOLDINGS"
        assert ledger.cash == Decimal("100000")

    def test_sell_more_than_held_is_rejected(self):
        """
        GIVEN 5 AAPL
        WHEN 6 are sold
        THEN InsufficientHoldingsError is raised and 5 remain
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "5", "150"), AT)

        with pytest.raises(InsufficientHoldingsError):
            ledger.apply_order(_order(OrderSide.SELL, "AAPL", "6", "150"), AT)

        assert ledger.get_holding("AAPL").quantity == Decimal("5")


# =============================================================================
# VALUATION TESTS
# =============================================================================


class TestRevalue:
    """Tests for revaluation and returns."""

    def test_revalue_uses_prices_and_falls_back_to_average_cost(self):
        """
        GIVEN 10 AAPL @150 and 2 MSFT @300
        WHEN revalued with a price for AAPL only
        THEN AAPL uses the price and MSFT its average cost
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)
        ledger.apply_order(_order(OrderSide.BUY, "MSFT", "2", "300"), AT)

        total = ledger.revalue({"AAPL": Decimal("160")})

        # cash 97900 + 10*160 + 2*300
        assert total == Decimal("100100")
        assert ledger.total_value == Decimal("100100")
        assert ledger.total_return == Decimal("0.1")

    def test_daily_return_compares_with_previous_total(self):
        """
        GIVEN a ledger last valued at 100000
        WHEN it is revalued at 101000
        THEN daily_return is 1%
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "100"), AT)

        ledger.revalue({"AAPL": Decimal("200")})

        assert ledger.daily_return == Decimal("1")

    def test_market_value_does_not_mutate(self):
        """
        GIVEN a ledger with a holding
        WHEN market_value is computed
        THEN stored totals are unchanged
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "100"), AT)

        assert ledger.market_value({"AAPL": Decimal("200")}) == Decimal("101000")
        assert ledger.total_value == Decimal("100000")


class TestHistory:
    """Tests for bounded performance history."""

    def test_snapshot_records_holding_values(self):
        """
        GIVEN 10 AAPL
        WHEN a snapshot is recorded at price 160
        THEN it carries the total, the cash and AAPL valued at 1600
        """
        ledger = _ledger()
        ledger.apply_order(_order(OrderSide.BUY, "AAPL", "10", "150"), AT)
        prices = {"AAPL": Decimal("160")}
        ledger.revalue(prices)

        entry = ledger.record_snapshot(prices, AT)

        assert entry.total_value == Decimal("100100")
        assert entry.cash == Decimal("98500")
        assert [(s.symbol, s.value) for s in entry.holdings] == [("AAPL", Decimal("1600"))]
        assert ledger.history[-1] is entry

    def test_history_is_capped_with_fifo_eviction(self):
        """
        GIVEN a ledger
        WHEN HISTORY_LIMIT + 5 snapshots are recorded
        THEN only the newest HISTORY_LIMIT remain, oldest first
        """
        ledger = _ledger()

        for i in range(HISTORY_LIMIT + 5):
            ledger.cash = Decimal(i)
            ledger.record_snapshot({}, AT)

        assert len(ledger.history) == HISTORY_LIMIT
        assert ledger.history[0].cash == Decimal(5)
        assert ledger.history[-1].cash == Decimal(HISTORY_LIMIT + 4)
