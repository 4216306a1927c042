"""SQLAlchemy implementation of WatchlistRepository."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from papertrade.core.timezone import now_eastern, to_eastern
from papertrade.domain.models import WatchlistItem
from papertrade.repositories.sqlalchemy.orm_models import WatchlistItemORM


class SqlAlchemyWatchlistRepository:
    """SQLAlchemy-backed watchlist repository."""

    def __init__(self, db: Session):
        self._db = db

    def list_for_owner(self, owner_id: str) -> list[WatchlistItem]:
        """List the owner's watchlist in the order symbols were added."""
        rows = (
            self._db.query(WatchlistItemORM)
            .filter(WatchlistItemORM.owner_id == owner_id)
            .order_by(WatchlistItemORM.id)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def add(self, item: WatchlistItem) -> WatchlistItem:
        """Add a symbol; adding an existing symbol returns the stored item."""
        existing = self._get_orm(item.owner_id, item.symbol)
        if existing:
            return self._to_domain(existing)

        orm = WatchlistItemORM(
            owner_id=item.owner_id,
            symbol=item.symbol,
            added_at=item.added_at or now_eastern(),
        )
        self._db.add(orm)
        try:
            self._db.commit()
        except IntegrityError:
            # Added concurrently by another request
            self._db.rollback()
            return self._to_domain(self._get_orm(item.owner_id, item.symbol))
        self._db.refresh(orm)
        return self._to_domain(orm)

    def remove(self, owner_id: str, symbol: str) -> bool:
        """Remove a symbol; returns False if it was not on the list."""
        orm = self._get_orm(owner_id, symbol)
        if orm is None:
            return False
        self._db.delete(orm)
        self._db.commit()
        return True

    def _get_orm(self, owner_id: str, symbol: str):
        return (
            self._db.query(WatchlistItemORM)
            .filter(
                WatchlistItemORM.owner_id == owner_id,
                WatchlistItemORM.symbol == symbol,
            )
            .first()
        )

    @staticmethod
    def _to_domain(orm: WatchlistItemORM) -> WatchlistItem:
        return WatchlistItem(
            owner_id=orm.owner_id,
            symbol=orm.symbol,
            added_at=to_eastern(orm.added_at),
        )
