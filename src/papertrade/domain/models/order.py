"""Order domain model."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from papertrade.domain.models.enums import OrderSide, OrderType, OrderStatus


@dataclass(frozen=True)
class Order:
    """
    A buy or sell request that has been settled against a ledger.

    Immutable once created. ``total_amount`` is ``quantity * price + fees``
    and is fixed at creation.
    """

    order_id: str
    owner_id: str
    side: OrderSide
    symbol: str
    quantity: Decimal
    price: Decimal
    order_type: OrderType = OrderType.MARKET
    status: OrderStatus = OrderStatus.COMPLETED
    limit_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    fees: Decimal = field(default_factory=lambda: Decimal("0"))
    total_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    profit_loss: Decimal = field(default_factory=lambda: Decimal("0"))
    created_at: Optional[datetime] = None
    executed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        # frozen: coerce enum strings through object.__setattr__
        if not isinstance(self.side, OrderSide):
            object.__setattr__(self, "side", OrderSide(self.side))
        if not isinstance(self.order_type, OrderType):
            object.__setattr__(self, "order_type", OrderType(self.order_type))
        if not isinstance(self.status, OrderStatus):
            object.__setattr__(self, "status", OrderStatus(self.status))

    @classmethod
    def create(
        cls,
        owner_id: str,
        side: OrderSide,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
        executed_at: datetime,
        order_type: OrderType = OrderType.MARKET,
        limit_price: Optional[Decimal] = None,
        stop_loss: Optional[Decimal] = None,
        take_profit: Optional[Decimal] = None,
        fees: Decimal = Decimal("0"),
        profit_loss: Decimal = Decimal("0"),
    ) -> "Order":
        """Build a completed order with its total amount computed."""
        return cls(
            order_id=str(uuid.uuid4()),
            owner_id=owner_id,
            side=side,
            symbol=symbol.upper(),
            quantity=quantity,
            price=price,
            order_type=order_type,
            status=OrderStatus.COMPLETED,
            limit_price=limit_price,
            stop_loss=stop_loss,
            take_profit=take_profit,
            fees=fees,
            total_amount=quantity * price + fees,
            profit_loss=profit_loss,
            created_at=executed_at,
            executed_at=executed_at,
        )

    @property
    def gross_amount(self) -> Decimal:
        """Quantity times price, before fees."""
        return self.quantity * self.price

    @property
    def net_cash_impact(self) -> Decimal:
        """
        Cash change this order applies to its ledger.

        Positive = cash added, Negative = cash removed.
        """
        if self.side == OrderSide.BUY:
            return -(self.gross_amount + self.fees)
        return self.gross_amount - self.fees
