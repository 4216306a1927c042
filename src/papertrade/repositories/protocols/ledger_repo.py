"""Ledger repository protocol."""

from decimal import Decimal
from typing import Protocol, Optional

from papertrade.domain.models import Ledger


class LedgerRepository(Protocol):
    """Interface for portfolio ledger data access."""

    def get_by_owner(self, owner_id: str) -> Optional[Ledger]:
        """Retrieve the owner's ledger."""
        ...

    def get_or_create(self, owner_id: str, initial_cash: Decimal) -> Ledger:
        """Retrieve the owner's ledger, creating it with ``initial_cash`` if absent."""
        ...

    def save(self, ledger: Ledger) -> Ledger:
        """
        Persist cash, holdings, valuation and history of ``ledger``.

        Raises ConcurrencyConflictError when the stored version no longer
        matches ``ledger.version``.
        """
        ...
