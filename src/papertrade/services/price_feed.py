"""Price feed: periodic quote ticks broadcast to WebSocket subscribers."""

import asyncio
import logging
from typing import Any, Iterable, Optional, Protocol

from papertrade.core.exceptions import QuoteUnavailableError
from papertrade.domain.views import Quote
from papertrade.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


class PriceSubscriber(Protocol):
    """Anything that can receive a JSON message, e.g. a Starlette WebSocket."""

    async def send_json(self, data: Any) -> None:
        ...


def stock_update_message(quote: Quote) -> dict[str, Any]:
    return {
        "type": "stock_update",
        "symbol": quote.symbol,
        "price": float(quote.price),
        "change": float(quote.change),
        "volume": quote.volume,
        "timestamp": quote.as_of.isoformat() if quote.as_of else None,
    }


class PriceFeed:
    """
    Broadcasts a ``stock_update`` for every subscribed symbol each tick.

    Each tick refreshes subscribed symbols through the shared quote
    service. A subscriber whose send fails is dropped from every symbol.
    """

    def __init__(self, quote_service: QuoteService, tick_seconds: float = 5.0) -> None:
        self._quotes = quote_service
        self._tick_seconds = tick_seconds
        # symbol -> {id(subscriber): subscriber}; WebSockets are not hashable
        self._subscriptions: dict[str, dict[int, PriceSubscriber]] = {}
        self._task: Optional[asyncio.Task[None]] = None
        self._running = False

    # ── Subscriptions ──────────────────────────────────────────

    def subscribe(self, subscriber: PriceSubscriber, symbols: Iterable[str]) -> list[str]:
        """Subscribe to symbols; returns the normalized symbols added."""
        added = []
        for symbol in symbols:
            symbol = str(symbol).strip().upper()
            if not symbol:
                continue
            self._subscriptions.setdefault(symbol, {})[id(subscriber)] = subscriber
            added.append(symbol)
        return added

    def unsubscribe(self, subscriber: PriceSubscriber, symbols: Iterable[str]) -> list[str]:
        removed = []
        for symbol in symbols:
            symbol = str(symbol).strip().upper()
            subscribers = self._subscriptions.get(symbol)
            if subscribers and id(subscriber) in subscribers:
                del subscribers[id(subscriber)]
                removed.append(symbol)
                if not subscribers:
                    del self._subscriptions[symbol]
        return removed

    def disconnect(self, subscriber: PriceSubscriber) -> None:
        """Drop a subscriber from every symbol."""
        for symbol in list(self._subscriptions):
            self.unsubscribe(subscriber, [symbol])

    def subscribed_symbols(self) -> list[str]:
        return sorted(self._subscriptions)

    def subscribers_for(self, symbol: str) -> list[PriceSubscriber]:
        return list(self._subscriptions.get(symbol.upper(), {}).values())

    # ── Lifecycle ──────────────────────────────────────────────

    @property
    def quote_service(self) -> QuoteService:
        return self._quotes

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background tick loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run(), name="price-feed")
        logger.info("Price feed started (tick every %ss)", self._tick_seconds)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        logger.info("Price feed stopped")

    async def tick(self) -> int:
        """
        Refresh and broadcast every subscribed symbol once.

        Returns the number of messages delivered.
        """
        delivered = 0
        for symbol in self.subscribed_symbols():
            try:
                quote = await asyncio.to_thread(self._quotes.refresh, symbol)
            except QuoteUnavailableError as exc:
                logger.warning("Skipping %s this tick: %s", symbol, exc.message)
                continue
            delivered += await self.broadcast(quote)
        return delivered

    async def broadcast(self, quote: Quote) -> int:
        """Send a quote to its symbol's subscribers, dropping dead ones."""
        message = stock_update_message(quote)
        delivered = 0
        for subscriber in self.subscribers_for(quote.symbol):
            try:
                await subscriber.send_json(message)
                delivered += 1
            except Exception as exc:
                logger.info("Dropping price subscriber after send failure: %s", exc)
                self.disconnect(subscriber)
        return delivered

    async def _run(self) -> None:
        while self._running:
            try:
                await self.tick()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Price feed tick failed")
            await asyncio.sleep(self._tick_seconds)
