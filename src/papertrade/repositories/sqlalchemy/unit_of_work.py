"""SQLAlchemy unit of work for atomic order settlement."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from papertrade.core.exceptions import ConcurrencyConflictError, PersistenceError
from papertrade.repositories.sqlalchemy.ledger_repo import SqlAlchemyLedgerRepository
from papertrade.repositories.sqlalchemy.order_repo import SqlAlchemyOrderRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    Ledger and order repositories sharing one session transaction.

    Repositories only flush; nothing is visible to other sessions until
    ``commit``. Leaving the ``with`` block with an exception rolls back.
    """

    def __init__(self, session: Session):
        self._session = session
        self.ledgers = SqlAlchemyLedgerRepository(session, autocommit=False)
        self.orders = SqlAlchemyOrderRepository(session, autocommit=False)

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()

    def commit(self) -> None:
        try:
            self._session.commit()
        except StaleDataError as exc:
            self._session.rollback()
            raise ConcurrencyConflictError() from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Settlement commit failed")
            raise PersistenceError("Failed to persist settlement") from exc

    def rollback(self) -> None:
        self._session.rollback()
