"""Service layer - business logic orchestration."""

from papertrade.services.quote_service import QuoteService
from papertrade.services.settlement_service import (
    SettlementService,
    TradeRequest,
    OrderListener,
)
from papertrade.services.portfolio_service import PortfolioService, normalize_symbol
from papertrade.services.gamification_service import GamificationService
from papertrade.services.notification_service import (
    NotificationService,
    NotificationPage,
    NotificationPurger,
)
from papertrade.services.price_feed import PriceFeed, stock_update_message

__all__ = [
    "QuoteService",
    "SettlementService",
    "TradeRequest",
    "OrderListener",
    "PortfolioService",
    "normalize_symbol",
    "GamificationService",
    "NotificationService",
    "NotificationPage",
    "NotificationPurger",
    "PriceFeed",
    "stock_update_message",
]
