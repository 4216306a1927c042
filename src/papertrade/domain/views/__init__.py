"""View models for service outputs."""

from papertrade.domain.views.portfolio import (
    Quote,
    HoldingView,
    PortfolioView,
    SettlementResult,
    WatchlistEntryView,
)

__all__ = [
    "Quote",
    "HoldingView",
    "PortfolioView",
    "SettlementResult",
    "WatchlistEntryView",
]
