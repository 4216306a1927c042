"""Settlement service: executes trades against an owner's ledger."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from papertrade.core.exceptions import (
    ConcurrencyConflictError,
    LimitNotMarketableError,
    ValidationError,
)
from papertrade.core.locks import OwnerLockRegistry
from papertrade.core.timezone import now_eastern
from papertrade.domain.models import Ledger, Order, OrderSide, OrderType
from papertrade.domain.models.ledger import DEFAULT_INITIAL_CASH
from papertrade.domain.views import Quote, SettlementResult
from papertrade.repositories.protocols import UnitOfWork
from papertrade.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


class OrderListener(Protocol):
    """Collaborator told about every settled order."""

    def on_order_settled(self, order: Order) -> None:
        ...


@dataclass
class TradeRequest:
    """Input data for executing a trade."""

    owner_id: str
    side: OrderSide
    symbol: str
    quantity: Decimal
    order_type: OrderType = OrderType.MARKET
    limit_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None

    def __post_init__(self) -> None:
        try:
            self.side = OrderSide(self.side)
            self.order_type = OrderType(self.order_type)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc


class SettlementService:
    """
    Settles buy and sell orders synchronously at the current quote.

    The order insert, the ledger update and the history append are
    committed together through the unit of work. Settlements for one
    owner are serialized by ``locks``; a write that loses an optimistic
    version race is retried from a fresh read up to ``max_attempts``
    times. Listeners run after the commit, still under the owner's lock,
    and cannot fail the trade.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        quote_service: QuoteService,
        locks: OwnerLockRegistry,
        initial_cash: Decimal = DEFAULT_INITIAL_CASH,
        order_fee: Decimal = Decimal("0"),
        max_attempts: int = 3,
        listeners: Sequence[OrderListener] = (),
    ):
        self._uow = uow
        self._quotes = quote_service
        self._locks = locks
        self._initial_cash = initial_cash
        self._order_fee = order_fee
        self._max_attempts = max(1, max_attempts)
        self._listeners = list(listeners)

    def execute_trade(self, request: TradeRequest) -> SettlementResult:
        """
        Settle one trade.

        Raises:
            ValidationError: malformed request
            QuoteUnavailableError: no price for the symbol
            LimitNotMarketableError: limit price not reachable at market
            InsufficientFundsError / InsufficientHoldingsError: rejected trade
            ConcurrencyConflictError: retries exhausted
        """
        self._validate(request)
        symbol = request.symbol.upper()

        quote = self._quotes.get_quote(symbol)
        self._check_limit(request, symbol, quote.price)

        with self._locks.hold(request.owner_id):
            order, ledger = self._settle_with_retry(request, symbol, quote)
            logger.info(
                "Settled %s %s %s @ %s for %s",
                order.side.value,
                order.quantity,
                order.symbol,
                order.price,
                order.owner_id,
            )
            # Listeners update per-owner records too, so they stay under the lock
            self._notify_listeners(order)
        return SettlementResult(order=order, ledger=ledger, quote=quote)

    def _settle_with_retry(
        self, request: TradeRequest, symbol: str, quote: Quote
    ) -> tuple[Order, Ledger]:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._settle_once(request, symbol, quote)
            except ConcurrencyConflictError:
                self._uow.rollback()
                if attempt == self._max_attempts:
                    logger.warning(
                        "Giving up on %s after %d conflicting attempts",
                        request.owner_id,
                        attempt,
                    )
                    raise ConcurrencyConflictError(request.owner_id)
                logger.info(
                    "Ledger for %s changed concurrently, retrying (attempt %d)",
                    request.owner_id,
                    attempt + 1,
                )
            except Exception:
                self._uow.rollback()
                raise
        raise ConcurrencyConflictError(request.owner_id)

    def _settle_once(
        self, request: TradeRequest, symbol: str, quote: Quote
    ) -> tuple[Order, Ledger]:
        at = now_eastern()
        price = quote.price
        ledger = self._uow.ledgers.get_or_create(request.owner_id, self._initial_cash)

        profit_loss = Decimal("0")
        if request.side == OrderSide.BUY:
            ledger.ensure_can_buy(request.quantity, price, self._order_fee)
        else:
            holding = ledger.ensure_can_sell(symbol, request.quantity)
            profit_loss = (price - holding.average_cost) * request.quantity

        order = Order.create(
            owner_id=request.owner_id,
            side=request.side,
            symbol=symbol,
            quantity=request.quantity,
            price=price,
            executed_at=at,
            order_type=request.order_type,
            limit_price=request.limit_price,
            stop_loss=request.stop_loss,
            take_profit=request.take_profit,
            fees=self._order_fee,
            profit_loss=profit_loss,
        )
        ledger.apply_order(order, at)

        prices = self._cached_prices(ledger)
        prices[symbol] = price
        ledger.revalue(prices)
        ledger.record_snapshot(prices, at)

        saved_order = self._uow.orders.add(order)
        saved_ledger = self._uow.ledgers.save(ledger)
        self._uow.commit()
        return saved_order, saved_ledger

    def _cached_prices(self, ledger: Ledger) -> dict[str, Decimal]:
        # Other holdings use whatever is cached; uncached ones fall back to average cost
        prices: dict[str, Decimal] = {}
        for holding in ledger.holdings:
            cached = self._quotes.latest(holding.symbol)
            if cached is not None:
                prices[holding.symbol] = cached.price
        return prices

    def _notify_listeners(self, order: Order) -> None:
        for listener in self._listeners:
            try:
                listener.on_order_settled(order)
            except Exception:
                logger.exception(
                    "%s failed for order %s", type(listener).__name__, order.order_id
                )
                # The order is already committed; clear the failed listener's work
                self._uow.rollback()

    @staticmethod
    def _validate(request: TradeRequest) -> None:
        if not request.owner_id:
            raise ValidationError("owner_id is required")
        if not request.symbol or not request.symbol.strip():
            raise ValidationError("symbol is required")
        if len(request.symbol) > 10:
            raise ValidationError("symbol must be at most 10 characters")
        if request.quantity is None or request.quantity < 1:
            raise ValidationError("quantity must be at least 1")
        if request.order_type == OrderType.LIMIT:
            if request.limit_price is None:
                raise ValidationError("limit_price is required for limit orders")
            if request.limit_price < 0:
                raise ValidationError("limit_price must be non-negative")
        for name in ("stop_loss", "take_profit"):
            value = getattr(request, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} must be non-negative")

    @staticmethod
    def _check_limit(request: TradeRequest, symbol: str, market_price: Decimal) -> None:
        if request.order_type != OrderType.LIMIT:
            return
        limit = request.limit_price
        if request.side == OrderSide.BUY:
            marketable = market_price <= limit
        else:
            marketable = market_price >= limit
        if not marketable:
            raise LimitNotMarketableError(symbol, str(limit), str(market_price))
