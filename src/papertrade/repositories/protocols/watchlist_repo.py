"""Watchlist repository protocol."""

from typing import Protocol

from papertrade.domain.models import WatchlistItem


class WatchlistRepository(Protocol):
    """Interface for watchlist data access."""

    def list_for_owner(self, owner_id: str) -> list[WatchlistItem]:
        """List the owner's watchlist in the order symbols were added."""
        ...

    def add(self, item: WatchlistItem) -> WatchlistItem:
        """Add a symbol; adding an existing symbol returns the stored item."""
        ...

    def remove(self, owner_id: str, symbol: str) -> bool:
        """Remove a symbol; returns False if it was not on the list."""
        ...
