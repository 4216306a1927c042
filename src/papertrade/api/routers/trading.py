"""Trading endpoints: execute, portfolio, history, performance and watchlist."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from papertrade.api.deps import (
    get_current_owner,
    get_portfolio_service,
    get_settlement_service,
)
from papertrade.api.schemas import (
    TradeExecuteRequest,
    TradeExecuteResponse,
    OrderResponse,
    OrderListResponse,
    PortfolioResponse,
    PerformancePointResponse,
    PerformanceResponse,
    WatchlistAddRequest,
    WatchlistEntryResponse,
    WatchlistResponse,
)
from papertrade.domain.views import WatchlistEntryView
from papertrade.services import PortfolioService, SettlementService, TradeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trading", tags=["trading"])


@router.post("/execute", response_model=TradeExecuteResponse)
def execute_trade(
    data: TradeExecuteRequest,
    owner_id: str = Depends(get_current_owner),
    settlement: SettlementService = Depends(get_settlement_service),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> TradeExecuteResponse:
    """Settle a buy or sell at the current market price."""
    if data.price is not None:
        logger.debug("Ignoring client price %s for %s", data.price, data.symbol)

    result = settlement.execute_trade(
        TradeRequest(
            owner_id=owner_id,
            side=data.side,
            symbol=data.symbol,
            quantity=data.quantity,
            order_type=data.order_type,
            limit_price=data.limit_price,
            stop_loss=data.stop_loss,
            take_profit=data.take_profit,
        )
    )
    view = portfolio.settled_view(result.ledger, result.quote)
    return TradeExecuteResponse(
        order=OrderResponse.model_validate(result.order),
        portfolio=PortfolioResponse.model_validate(view),
    )


@router.get("/portfolio", response_model=PortfolioResponse)
def get_portfolio(
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioResponse:
    """Get the caller's ledger revalued at current quotes."""
    return PortfolioResponse.model_validate(portfolio.get_portfolio(owner_id))


@router.get("/history", response_model=OrderListResponse)
def get_history(
    limit: int = Query(50, ge=1, le=50, description="Number of orders (max 50)"),
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> OrderListResponse:
    """Get the caller's most recent orders, newest first."""
    orders = portfolio.list_orders(owner_id, limit)
    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        total=len(orders),
    )


@router.get("/performance", response_model=PerformanceResponse)
def get_performance(
    last: Optional[int] = Query(None, ge=1, description="Only the last N snapshots"),
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> PerformanceResponse:
    """Get the caller's performance history, oldest first."""
    history = portfolio.performance(owner_id, last)
    return PerformanceResponse(
        history=[PerformancePointResponse.model_validate(e) for e in history]
    )


def _watchlist_response(entries: list[WatchlistEntryView]) -> WatchlistResponse:
    return WatchlistResponse(
        items=[WatchlistEntryResponse.model_validate(e) for e in entries]
    )


@router.get("/watchlist", response_model=WatchlistResponse)
def get_watchlist(
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> WatchlistResponse:
    """Get the caller's watchlist with current prices."""
    return _watchlist_response(portfolio.list_watchlist(owner_id))


@router.post("/watchlist", response_model=WatchlistResponse)
def add_to_watchlist(
    data: WatchlistAddRequest,
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> WatchlistResponse:
    """Add a symbol to the watchlist (idempotent)."""
    return _watchlist_response(portfolio.add_to_watchlist(owner_id, data.symbol))


@router.delete("/watchlist/{symbol}", response_model=WatchlistResponse)
def remove_from_watchlist(
    symbol: str,
    owner_id: str = Depends(get_current_owner),
    portfolio: PortfolioService = Depends(get_portfolio_service),
) -> WatchlistResponse:
    """Remove a symbol from the watchlist."""
    return _watchlist_response(portfolio.remove_from_watchlist(owner_id, symbol))
