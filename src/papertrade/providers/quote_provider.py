"""Quote provider protocol."""

from typing import Protocol

from papertrade.domain.views import Quote


class QuoteProvider(Protocol):
    """
    Protocol for market quote sources.

    Implementations return the current price, change and volume for a
    symbol and raise on any failure; caching and error translation live
    in QuoteService.
    """

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for ``symbol``."""
        ...
