"""View models for quotes, portfolio valuation and settlement outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from papertrade.domain.models import Ledger, Order


@dataclass
class Quote:
    """Market quote for a symbol."""

    symbol: str
    price: Decimal
    change: Decimal = field(default_factory=lambda: Decimal("0"))
    volume: int = 0
    as_of: Optional[datetime] = None


@dataclass
class HoldingView:
    """A holding valued at the latest available price."""

    symbol: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    price_is_stale: bool = False
    last_updated: Optional[datetime] = None


@dataclass
class PortfolioView:
    """A ledger revalued against current quotes."""

    owner_id: str
    cash: Decimal
    total_value: Decimal
    total_return: Decimal
    daily_return: Decimal
    holdings: list[HoldingView] = field(default_factory=list)
    as_of: Optional[datetime] = None


@dataclass
class SettlementResult:
    """Outcome of a settled trade."""

    order: Order
    ledger: Ledger
    quote: Quote


@dataclass
class WatchlistEntryView:
    """A watchlist symbol with its latest quote, when one is available."""

    symbol: str
    added_at: Optional[datetime] = None
    current_price: Optional[Decimal] = None
    change: Optional[Decimal] = None
