"""Order repository protocol."""

from typing import Protocol, Optional

from papertrade.domain.models import Order


class OrderRepository(Protocol):
    """Interface for order data access."""

    def add(self, order: Order) -> Order:
        """Persist a new order."""
        ...

    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by ID."""
        ...

    def list_recent(self, owner_id: str, limit: int = 50) -> list[Order]:
        """List the owner's most recent orders, newest first."""
        ...

    def count_by_owner(self, owner_id: str) -> int:
        """Count the owner's orders."""
        ...
