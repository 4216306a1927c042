"""Simulated quote provider for offline use and the demo price feed."""

import random
import threading
from decimal import Decimal

from papertrade.core.timezone import now_eastern
from papertrade.domain.views import Quote

# Reference prices for common symbols
_BASE_PRICES: dict[str, Decimal] = {
    "AAPL": Decimal("185.50"),
    "GOOGL": Decimal("142.75"),
    "MSFT": Decimal("378.25"),
    "AMZN": Decimal("178.50"),
    "TSLA": Decimal("248.75"),
    "NVDA": Decimal("485.25"),
    "META": Decimal("505.50"),
    "SPY": Decimal("485.25"),
    "QQQ": Decimal("418.75"),
    "VTI": Decimal("252.30"),
}

_CENT = Decimal("0.01")


class SimulatedQuoteProvider:
    """
    Random-walk prices seeded for reproducibility.

    Each call moves the symbol's price by at most ``max_step_pct`` percent.
    Unknown symbols start at a pseudo-random price between 50 and 250.
    """

    def __init__(self, seed: int = 42, max_step_pct: float = 1.0):
        self._rng = random.Random(seed)
        self._max_step = max_step_pct / 100
        self._lock = threading.Lock()
        self._opening: dict[str, Decimal] = {}
        self._last: dict[str, Decimal] = {}

    def get_quote(self, symbol: str) -> Quote:
        """Advance the symbol's walk one step and return it."""
        symbol = symbol.upper()
        with self._lock:
            if symbol not in self._opening:
                base = _BASE_PRICES.get(symbol)
                if base is None:
                    base = Decimal(str(50 + self._rng.random() * 200)).quantize(_CENT)
                self._opening[symbol] = base
                self._last[symbol] = base

            step = Decimal(str(self._rng.uniform(-self._max_step, self._max_step)))
            price = max(_CENT, (self._last[symbol] * (1 + step)).quantize(_CENT))
            self._last[symbol] = price
            volume = self._rng.randint(1_000, 5_000_000)

        return Quote(
            symbol=symbol,
            price=price,
            change=price - self._opening[symbol],
            volume=volume,
            as_of=now_eastern(),
        )
