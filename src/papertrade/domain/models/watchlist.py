"""Watchlist domain model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class WatchlistItem:
    """A symbol the owner follows."""

    owner_id: str
    symbol: str
    added_at: Optional[datetime] = None
