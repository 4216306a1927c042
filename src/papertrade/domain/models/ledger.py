"""Portfolio ledger domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

from papertrade.core.exceptions import InsufficientFundsError, InsufficientHoldingsError
from papertrade.domain.models.enums import OrderSide
from papertrade.domain.models.order import Order

DEFAULT_INITIAL_CASH = Decimal("100000")

# Maximum number of performance snapshots kept per ledger
HISTORY_LIMIT = 365

ZERO = Decimal("0")


@dataclass
class Holding:
    """Quantity and average cost basis for one symbol."""

    symbol: str
    quantity: Decimal
    average_cost: Decimal
    last_updated: Optional[datetime] = None

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.average_cost


@dataclass
class HoldingSnapshot:
    """A holding's quantity and value at the time of a history entry."""

    symbol: str
    quantity: Decimal
    value: Decimal


@dataclass
class HistoryEntry:
    """Point-in-time valuation of a ledger."""

    timestamp: datetime
    total_value: Decimal
    cash: Decimal
    holdings: list[HoldingSnapshot] = field(default_factory=list)
    entry_id: Optional[int] = None  # assigned on persist


@dataclass
class Ledger:
    """
    Per-owner record of cash, holdings and performance history.

    Invariants:
    - ``cash`` never goes negative through ``apply_order``.
    - ``holdings`` holds at most one entry per symbol and never a
      zero or negative quantity.
    - ``history`` holds at most ``HISTORY_LIMIT`` entries, oldest first.
    """

    ledger_id: str
    owner_id: str
    cash: Decimal = field(default_factory=lambda: DEFAULT_INITIAL_CASH)
    initial_cash: Decimal = field(default_factory=lambda: DEFAULT_INITIAL_CASH)
    holdings: list[Holding] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    total_value: Decimal = field(default_factory=lambda: DEFAULT_INITIAL_CASH)
    total_return: Decimal = field(default_factory=lambda: ZERO)
    daily_return: Decimal = field(default_factory=lambda: ZERO)
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def get_holding(self, symbol: str) -> Optional[Holding]:
        """Return the holding for ``symbol`` or None."""
        symbol = symbol.upper()
        for holding in self.holdings:
            if holding.symbol == symbol:
                return holding
        return None

    def ensure_can_buy(self, quantity: Decimal, price: Decimal, fees: Decimal = ZERO) -> None:
        """Raise InsufficientFundsError if the purchase exceeds available cash."""
        cost = quantity * price + fees
        if cost > self.cash:
            raise InsufficientFundsError(str(cost), str(self.cash))

    def ensure_can_sell(self, symbol: str, quantity: Decimal) -> Holding:
        """Return the holding to sell from, or raise InsufficientHoldingsError."""
        holding = self.get_holding(symbol)
        available = holding.quantity if holding else ZERO
        if holding is None or available < quantity:
            raise InsufficientHoldingsError(symbol.upper(), str(quantity), str(available))
        return holding

    def add_holding(self, symbol: str, quantity: Decimal, price: Decimal, at: datetime) -> Holding:
        """Add shares at ``price``, folding them into the weighted average cost."""
        holding = self.get_holding(symbol)
        if holding is None:
            holding = Holding(
                symbol=symbol.upper(),
                quantity=quantity,
                average_cost=price,
                last_updated=at,
            )
            self.holdings.append(holding)
            return holding

        total_quantity = holding.quantity + quantity
        holding.average_cost = (
            holding.quantity * holding.average_cost + quantity * price
        ) / total_quantity
        holding.quantity = total_quantity
        holding.last_updated = at
        return holding

    def remove_holding(self, symbol: str, quantity: Decimal, at: datetime) -> None:
        """Remove shares; the entry is dropped once its quantity reaches zero."""
        holding = self.ensure_can_sell(symbol, quantity)
        remaining = holding.quantity - quantity
        if remaining <= ZERO:
            self.holdings.remove(holding)
        else:
            holding.quantity = remaining
            holding.last_updated = at

    def apply_order(self, order: Order, at: datetime) -> None:
        """Apply an order's cash and holding effects."""
        if order.side == OrderSide.BUY:
            self.ensure_can_buy(order.quantity, order.price, order.fees)
            self.cash += order.net_cash_impact
            self.add_holding(order.symbol, order.quantity, order.price, at)
        else:
            self.ensure_can_sell(order.symbol, order.quantity)
            self.cash += order.net_cash_impact
            self.remove_holding(order.symbol, order.quantity, at)
        self.updated_at = at

    def price_for(self, holding: Holding, prices: Mapping[str, Decimal]) -> Decimal:
        """Current price for a holding, falling back to its average cost."""
        price = prices.get(holding.symbol)
        return price if price is not None else holding.average_cost

    def market_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Cash plus holdings valued at ``prices``, without changing the ledger."""
        holdings_value = sum(
            (h.quantity * self.price_for(h, prices) for h in self.holdings),
            ZERO,
        )
        return self.cash + holdings_value

    def revalue(self, prices: Mapping[str, Decimal]) -> Decimal:
        """
        Recompute total value and returns against ``prices``.

        Symbols missing from ``prices`` are valued at average cost.
        """
        total = self.market_value(prices)

        previous = self.total_value
        self.total_value = total
        if self.initial_cash:
            self.total_return = (total - self.initial_cash) / self.initial_cash * 100
        if previous:
            self.daily_return = (total - previous) / previous * 100
        return total

    def record_snapshot(self, prices: Mapping[str, Decimal], at: datetime) -> HistoryEntry:
        """Append a history entry for the current state, evicting the oldest past the limit."""
        entry = HistoryEntry(
            timestamp=at,
            total_value=self.total_value,
            cash=self.cash,
            holdings=[
                HoldingSnapshot(
                    symbol=h.symbol,
                    quantity=h.quantity,
                    value=h.quantity * self.price_for(h, prices),
                )
                for h in self.holdings
            ],
        )
        self.history.append(entry)
        if len(self.history) > HISTORY_LIMIT:
            del self.history[: len(self.history) - HISTORY_LIMIT]
        return entry
