"""Portfolio queries: valuation, order history, performance and watchlist."""

import logging
import re
from decimal import Decimal
from typing import Optional

from papertrade.core.exceptions import ValidationError
from papertrade.core.timezone import now_eastern
from papertrade.domain.models import HistoryEntry, Ledger, Order, WatchlistItem
from papertrade.domain.models.ledger import DEFAULT_INITIAL_CASH
from papertrade.domain.views import HoldingView, PortfolioView, Quote, WatchlistEntryView
from papertrade.repositories.protocols import (
    LedgerRepository,
    OrderRepository,
    WatchlistRepository,
)
from papertrade.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

_SYMBOL_RE = re.compile(r"^[A-Z0-9.\-^=]{1,10}$")


def normalize_symbol(symbol: str) -> str:
    """Upper-case and validate a ticker symbol."""
    value = (symbol or "").strip().upper()
    if not _SYMBOL_RE.match(value):
        raise ValidationError(f"Invalid symbol: {symbol!r}")
    return value


class PortfolioService:
    """
    Read-side service for an owner's ledger.

    Nothing here mutates holdings or history; the only write is opening
    a ledger on first access and maintaining the watchlist.
    """

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        order_repo: OrderRepository,
        watchlist_repo: WatchlistRepository,
        quote_service: QuoteService,
        initial_cash: Decimal = DEFAULT_INITIAL_CASH,
        order_history_limit: int = 50,
    ):
        self._ledger_repo = ledger_repo
        self._order_repo = order_repo
        self._watchlist_repo = watchlist_repo
        self._quotes = quote_service
        self._initial_cash = initial_cash
        self._order_history_limit = order_history_limit

    # =========================================================================
    # Portfolio
    # =========================================================================

    def get_ledger(self, owner_id: str) -> Ledger:
        """The owner's ledger, opened with the initial cash on first access."""
        return self._ledger_repo.get_or_create(owner_id, self._initial_cash)

    def get_portfolio(self, owner_id: str) -> PortfolioView:
        """
        Value the owner's ledger at current quotes.

        Quotes are best-effort: a holding without a quote is valued at its
        average cost and flagged ``price_is_stale``. Daily return compares
        against the most recent history snapshot.
        """
        ledger = self.get_ledger(owner_id)
        quotes = self._quotes.get_quotes(h.symbol for h in ledger.holdings)
        prices = {symbol: q.price for symbol, q in quotes.items()}

        total = ledger.market_value(prices)
        total_return = Decimal("0")
        if ledger.initial_cash:
            total_return = (total - ledger.initial_cash) / ledger.initial_cash * 100
        previous = ledger.history[-1].total_value if ledger.history else ledger.initial_cash
        daily_return = (total - previous) / previous * 100 if previous else Decimal("0")

        return PortfolioView(
            owner_id=owner_id,
            cash=ledger.cash,
            total_value=total,
            total_return=total_return,
            daily_return=daily_return,
            holdings=self._holding_views(ledger, prices),
            as_of=now_eastern(),
        )

    def settled_view(self, ledger: Ledger, quote: Quote) -> PortfolioView:
        """
        View of a ledger as a settlement just left it.

        Totals are the ones computed at settlement; holdings are valued with
        the settlement quote and whatever else is cached.
        """
        prices = {}
        for holding in ledger.holdings:
            cached = self._quotes.latest(holding.symbol)
            if cached is not None:
                prices[holding.symbol] = cached.price
        prices[quote.symbol] = quote.price

        return PortfolioView(
            owner_id=ledger.owner_id,
            cash=ledger.cash,
            total_value=ledger.total_value,
            total_return=ledger.total_return,
            daily_return=ledger.daily_return,
            holdings=self._holding_views(ledger, prices),
            as_of=ledger.updated_at or now_eastern(),
        )

    @staticmethod
    def _holding_views(ledger: Ledger, prices: dict[str, Decimal]) -> list[HoldingView]:
        holdings = []
        for holding in ledger.holdings:
            current = ledger.price_for(holding, prices)
            market_value = holding.quantity * current
            holdings.append(
                HoldingView(
                    symbol=holding.symbol,
                    quantity=holding.quantity,
                    average_cost=holding.average_cost,
                    current_price=current,
                    market_value=market_value,
                    unrealized_pnl=market_value - holding.cost_basis,
                    price_is_stale=holding.symbol not in prices,
                    last_updated=holding.last_updated,
                )
            )
        return holdings

    # =========================================================================
    # History
    # =========================================================================

    def list_orders(self, owner_id: str, limit: Optional[int] = None) -> list[Order]:
        """The owner's most recent orders, newest first."""
        if limit is None:
            limit = self._order_history_limit
        if not 1 <= limit <= self._order_history_limit:
            raise ValidationError(
                f"limit must be between 1 and {self._order_history_limit}"
            )
        return self._order_repo.list_recent(owner_id, limit)

    def performance(self, owner_id: str, last: Optional[int] = None) -> list[HistoryEntry]:
        """Performance snapshots, oldest first; optionally only the last ``last``."""
        if last is not None and last < 1:
            raise ValidationError("last must be at least 1")
        ledger = self._ledger_repo.get_by_owner(owner_id)
        if ledger is None:
            return []
        history = ledger.history
        return history[-last:] if last else list(history)

    # =========================================================================
    # Watchlist
    # =========================================================================

    def list_watchlist(self, owner_id: str) -> list[WatchlistEntryView]:
        """Watchlist entries with their latest quotes; price is None when unavailable."""
        items = self._watchlist_repo.list_for_owner(owner_id)
        quotes = self._quotes.get_quotes(i.symbol for i in items)

        entries = []
        for item in items:
            quote = quotes.get(item.symbol)
            entries.append(
                WatchlistEntryView(
                    symbol=item.symbol,
                    added_at=item.added_at,
                    current_price=quote.price if quote else None,
                    change=quote.change if quote else None,
                )
            )
        return entries

    def add_to_watchlist(self, owner_id: str, symbol: str) -> list[WatchlistEntryView]:
        symbol = normalize_symbol(symbol)
        self._watchlist_repo.add(
            WatchlistItem(owner_id=owner_id, symbol=symbol, added_at=now_eastern())
        )
        return self.list_watchlist(owner_id)

    def remove_from_watchlist(self, owner_id: str, symbol: str) -> list[WatchlistEntryView]:
        """Remove a symbol; removing one that is not listed is a no-op."""
        symbol = normalize_symbol(symbol)
        if not self._watchlist_repo.remove(owner_id, symbol):
            logger.debug("%s not on %s's watchlist", symbol, owner_id)
        return self.list_watchlist(owner_id)
