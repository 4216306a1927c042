"""Quote service: process-wide cache over a quote provider."""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Iterable, Optional

from papertrade.core.exceptions import QuoteUnavailableError
from papertrade.domain.views import Quote
from papertrade.providers.quote_provider import QuoteProvider

logger = logging.getLogger(__name__)


class QuoteService:
    """
    Service for fetching market quotes.

    Wraps a provider with a per-symbol TTL cache and graceful degradation.
    One instance is shared by all requests and the price feed. The cache
    keeps at most ``max_entries`` symbols, evicting the least recently used.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        ttl_seconds: float = 60,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._provider = provider
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # symbol -> (fetched_at, quote)
        self._cache: "OrderedDict[str, tuple[float, Quote]]" = OrderedDict()

    def get_quote(self, symbol: str) -> Quote:
        """
        Return a fresh quote for ``symbol``, served from cache within the TTL.

        Raises:
            QuoteUnavailableError: the provider failed and nothing fresh is cached.
        """
        symbol = symbol.upper()
        cached = self._lookup(symbol, fresh_only=True)
        if cached is not None:
            return cached
        return self.refresh(symbol)

    def refresh(self, symbol: str) -> Quote:
        """Fetch ``symbol`` from the provider, bypassing the cache."""
        symbol = symbol.upper()
        try:
            quote = self._provider.get_quote(symbol)
        except Exception as exc:
            logger.warning("Quote fetch failed for %s: %s", symbol, exc)
            raise QuoteUnavailableError(symbol, str(exc)) from exc

        if quote is None or quote.price is None or quote.price < 0:
            raise QuoteUnavailableError(symbol, "provider returned no price")

        self._store(symbol, quote)
        return quote

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        """
        Fetch quotes for symbols with caching.

        Best-effort: a symbol whose fetch fails is served from a stale cache
        entry when one exists and omitted otherwise.
        """
        result: dict[str, Quote] = {}
        for symbol in {s.upper() for s in symbols}:
            try:
                result[symbol] = self.get_quote(symbol)
            except QuoteUnavailableError:
                stale = self._lookup(symbol, fresh_only=False)
                if stale is not None:
                    result[symbol] = stale
        return result

    def latest(self, symbol: str) -> Optional[Quote]:
        """Return the cached quote for ``symbol`` regardless of age, if any."""
        return self._lookup(symbol.upper(), fresh_only=False)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _lookup(self, symbol: str, fresh_only: bool) -> Optional[Quote]:
        with self._lock:
            entry = self._cache.get(symbol)
            if entry is None:
                return None
            fetched_at, quote = entry
            if fresh_only and self._clock() - fetched_at >= self._ttl:
                return None
            self._cache.move_to_end(symbol)
            return quote

    def _store(self, symbol: str, quote: Quote) -> None:
        with self._lock:
            self._cache[symbol] = (self._clock(), quote)
            self._cache.move_to_end(symbol)
            while len(self._cache) > self._max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("Evicted cached quote for %s", evicted)
