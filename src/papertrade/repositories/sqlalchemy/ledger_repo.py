"""SQLAlchemy implementation of LedgerRepository."""

import json
import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from papertrade.core.exceptions import (
    ConcurrencyConflictError,
    NotFoundError,
    PersistenceError,
)
from papertrade.core.timezone import now_eastern, to_eastern
from papertrade.domain.models import Ledger, Holding, HistoryEntry, HoldingSnapshot
from papertrade.repositories.sqlalchemy.orm_models import (
    LedgerORM,
    HoldingORM,
    LedgerHistoryORM,
)

logger = logging.getLogger(__name__)


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


class SqlAlchemyLedgerRepository:
    """
    SQLAlchemy-backed ledger repository.

    With ``autocommit=False`` writes are only flushed, leaving the commit
    to the owning unit of work.
    """

    def __init__(self, db: Session, autocommit: bool = True):
        self._db = db
        self._autocommit = autocommit

    def get_by_owner(self, owner_id: str) -> Optional[Ledger]:
        """Retrieve the owner's ledger."""
        orm = self._get_orm(owner_id)
        return self._to_domain(orm) if orm else None

    def get_or_create(self, owner_id: str, initial_cash: Decimal) -> Ledger:
        """Retrieve the owner's ledger, creating it with ``initial_cash`` if absent."""
        orm = self._get_orm(owner_id)
        if orm:
            return self._to_domain(orm)

        created = now_eastern()
        orm = LedgerORM(
            ledger_id=str(uuid.uuid4()),
            owner_id=owner_id,
            cash=initial_cash,
            initial_cash=initial_cash,
            total_value=initial_cash,
            total_return=Decimal("0"),
            daily_return=Decimal("0"),
            created_at=created,
            updated_at=created,
        )
        self._db.add(orm)
        try:
            self._finish(owner_id)
        except IntegrityError:
            # Another session created it first
            self._db.rollback()
            orm = self._get_orm(owner_id)
            if orm is None:
                raise
            return self._to_domain(orm)

        logger.info("Opened ledger for %s with cash %s", owner_id, initial_cash)
        return self._to_domain(orm)

    def save(self, ledger: Ledger) -> Ledger:
        """Persist cash, holdings, valuation and history of ``ledger``."""
        orm = self._get_orm(ledger.owner_id)
        if orm is None:
            raise NotFoundError("Ledger", ledger.owner_id)
        if orm.version != ledger.version:
            raise ConcurrencyConflictError(ledger.owner_id)

        orm.cash = ledger.cash
        orm.total_value = ledger.total_value
        orm.total_return = ledger.total_return
        orm.daily_return = ledger.daily_return
        orm.updated_at = ledger.updated_at or now_eastern()

        self._sync_holdings(orm, ledger.holdings)
        self._sync_history(orm, ledger.history)
        try:
            self._finish(ledger.owner_id)
        except IntegrityError as exc:
            self._db.rollback()
            raise PersistenceError(f"Ledger for {ledger.owner_id} violates a constraint") from exc
        return self._to_domain(orm)

    def _get_orm(self, owner_id: str) -> Optional[LedgerORM]:
        return self._db.query(LedgerORM).filter(LedgerORM.owner_id == owner_id).first()

    def _finish(self, owner_id: str) -> None:
        try:
            if self._autocommit:
                self._db.commit()
            else:
                self._db.flush()
        except StaleDataError:
            self._db.rollback()
            raise ConcurrencyConflictError(owner_id)

    @staticmethod
    def _sync_holdings(orm: LedgerORM, holdings: list[Holding]) -> None:
        existing = {row.symbol: row for row in orm.holdings}
        wanted = {h.symbol for h in holdings}

        for symbol, row in existing.items():
            if symbol not in wanted:
                orm.holdings.remove(row)

        for holding in holdings:
            row = existing.get(holding.symbol)
            if row is None:
                orm.holdings.append(
                    HoldingORM(
                        symbol=holding.symbol,
                        quantity=holding.quantity,
                        average_cost=holding.average_cost,
                        last_updated=holding.last_updated,
                    )
                )
            else:
                row.quantity = holding.quantity
                row.average_cost = holding.average_cost
                row.last_updated = holding.last_updated

    @staticmethod
    def _sync_history(orm: LedgerORM, history: list[HistoryEntry]) -> None:
        kept_ids = {e.entry_id for e in history if e.entry_id is not None}

        for row in list(orm.history):
            if row.id not in kept_ids:
                orm.history.remove(row)

        for entry in history:
            if entry.entry_id is None:
                orm.history.append(
                    LedgerHistoryORM(
                        timestamp=entry.timestamp,
                        total_value=entry.total_value,
                        cash=entry.cash,
                        holdings_json=json.dumps(
                            [
                                {
                                    "symbol": s.symbol,
                                    "quantity": str(s.quantity),
                                    "value": str(s.value),
                                }
                                for s in entry.holdings
                            ]
                        ),
                    )
                )

    @staticmethod
    def _to_domain(orm: LedgerORM) -> Ledger:
        """Convert ORM model to domain model."""
        return Ledger(
            ledger_id=orm.ledger_id,
            owner_id=orm.owner_id,
            cash=_dec(orm.cash),
            initial_cash=_dec(orm.initial_cash),
            holdings=[
                Holding(
                    symbol=row.symbol,
                    quantity=_dec(row.quantity),
                    average_cost=_dec(row.average_cost),
                    last_updated=to_eastern(row.last_updated),
                )
                for row in orm.holdings
            ],
            history=[
                HistoryEntry(
                    timestamp=to_eastern(row.timestamp),
                    total_value=_dec(row.total_value),
                    cash=_dec(row.cash),
                    holdings=[
                        HoldingSnapshot(
                            symbol=item["symbol"],
                            quantity=Decimal(item["quantity"]),
                            value=Decimal(item["value"]),
                        )
                        for item in json.loads(row.holdings_json or "[]")
                    ],
                    entry_id=row.id,
                )
                for row in orm.history
            ],
            total_value=_dec(orm.total_value),
            total_return=_dec(orm.total_return),
            daily_return=_dec(orm.daily_return),
            version=orm.version,
            created_at=to_eastern(orm.created_at),
            updated_at=to_eastern(orm.updated_at),
        )
