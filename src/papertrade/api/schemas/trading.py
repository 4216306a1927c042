"""Pydantic schemas for trading endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from papertrade.domain.models.enums import OrderSide, OrderType, OrderStatus


class TradeExecuteRequest(BaseModel):
    """Request schema for executing a trade."""

    side: OrderSide = Field(
        ...,
        validation_alias=AliasChoices("side", "type"),
        description="buy or sell",
    )
    symbol: str = Field(..., min_length=1, max_length=10, description="Stock symbol")
    quantity: Decimal = Field(..., ge=1, description="Number of shares")
    order_type: OrderType = Field(default=OrderType.MARKET, description="market or limit")
    limit_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Required for limit orders",
    )
    stop_loss: Optional[Decimal] = Field(default=None, ge=0)
    take_profit: Optional[Decimal] = Field(default=None, ge=0)
    price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Ignored; trades settle at the current quote",
    )

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be blank")
        return v

    @model_validator(mode="after")
    def limit_price_for_limit_orders(self) -> "TradeExecuteRequest":
        if self.order_type == OrderType.LIMIT and self.limit_price is None:
            raise ValueError("limit_price is required for limit orders")
        return self


class OrderResponse(BaseModel):
    """Response schema for a settled order."""

    model_config = {"from_attributes": True}

    order_id: str
    side: OrderSide
    symbol: str
    quantity: Decimal
    price: Decimal
    order_type: OrderType
    status: OrderStatus
    limit_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    fees: Decimal
    total_amount: Decimal
    profit_loss: Decimal
    created_at: Optional[datetime] = None
    executed_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    """Response schema for order history."""

    orders: list[OrderResponse]
    total: int


class HoldingResponse(BaseModel):
    """Response schema for a valued holding."""

    model_config = {"from_attributes": True}

    symbol: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    price_is_stale: bool = False
    last_updated: Optional[datetime] = None


class PortfolioResponse(BaseModel):
    """Response schema for the revalued portfolio."""

    model_config = {"from_attributes": True}

    owner_id: str
    cash: Decimal
    total_value: Decimal
    total_return: Decimal
    daily_return: Decimal
    holdings: list[HoldingResponse]
    as_of: Optional[datetime] = None


class TradeExecuteResponse(BaseModel):
    """Response schema for an executed trade."""

    order: OrderResponse
    portfolio: PortfolioResponse


class SnapshotHoldingResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    quantity: Decimal
    value: Decimal


class PerformancePointResponse(BaseModel):
    """Response schema for one performance snapshot."""

    model_config = {"from_attributes": True}

    timestamp: datetime
    total_value: Decimal
    cash: Decimal
    holdings: list[SnapshotHoldingResponse]


class PerformanceResponse(BaseModel):
    """Response schema for performance history, oldest first."""

    history: list[PerformancePointResponse]


class WatchlistAddRequest(BaseModel):
    """Request schema for adding a watchlist symbol."""

    symbol: str = Field(..., min_length=1, max_length=10)

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class WatchlistEntryResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    added_at: Optional[datetime] = None
    current_price: Optional[Decimal] = None
    change: Optional[Decimal] = None


class WatchlistResponse(BaseModel):
    """Response schema for the watchlist."""

    items: list[WatchlistEntryResponse]
