"""Unit of work protocol for atomic settlement."""

from typing import Protocol

from papertrade.repositories.protocols.ledger_repo import LedgerRepository
from papertrade.repositories.protocols.order_repo import OrderRepository


class UnitOfWork(Protocol):
    """
    Groups ledger and order writes into one transaction.

    Changes made through ``ledgers`` and ``orders`` become visible only
    after ``commit``; ``rollback`` discards them.
    """

    ledgers: LedgerRepository
    orders: OrderRepository

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
