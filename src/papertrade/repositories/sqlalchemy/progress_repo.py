"""SQLAlchemy implementation of ProgressRepository."""

import json
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from papertrade.core.timezone import now_eastern, parse_datetime_eastern, to_eastern
from papertrade.domain.models import Badge, UserProgress
from papertrade.repositories.sqlalchemy.orm_models import UserProgressORM


class SqlAlchemyProgressRepository:
    """SQLAlchemy-backed gamification progress repository."""

    def __init__(self, db: Session):
        self._db = db

    def get_by_owner(self, owner_id: str) -> Optional[UserProgress]:
        """Retrieve the owner's progress."""
        orm = self._db.get(UserProgressORM, owner_id)
        return self._to_domain(orm) if orm else None

    def save(self, progress: UserProgress) -> UserProgress:
        """Insert or update progress."""
        orm = self._db.get(UserProgressORM, progress.owner_id)
        if orm is None:
            orm = UserProgressORM(owner_id=progress.owner_id)
            self._db.add(orm)

        orm.points = progress.points
        orm.level = progress.level
        orm.total_trades = progress.total_trades
        orm.successful_trades = progress.successful_trades
        orm.profit_loss = progress.profit_loss
        orm.win_rate = progress.win_rate
        orm.badges_json = json.dumps(
            [
                {
                    "name": b.name,
                    "description": b.description,
                    "earned_at": b.earned_at.isoformat() if b.earned_at else None,
                }
                for b in progress.badges
            ]
        )
        orm.updated_at = progress.updated_at or now_eastern()

        self._db.commit()
        self._db.refresh(orm)
        return self._to_domain(orm)

    def top_by_points(self, limit: int = 10) -> list[UserProgress]:
        """Return the highest-scoring owners."""
        rows = (
            self._db.query(UserProgressORM)
            .order_by(UserProgressORM.points.desc(), UserProgressORM.owner_id)
            .limit(limit)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    @staticmethod
    def _to_domain(orm: UserProgressORM) -> UserProgress:
        return UserProgress(
            owner_id=orm.owner_id,
            points=orm.points or 0,
            level=orm.level or 1,
            total_trades=orm.total_trades or 0,
            successful_trades=orm.successful_trades or 0,
            profit_loss=Decimal(str(orm.profit_loss or 0)),
            win_rate=Decimal(str(orm.win_rate or 0)),
            badges=[
                Badge(
                    name=item["name"],
                    description=item.get("description", ""),
                    earned_at=parse_datetime_eastern(item["earned_at"]) if item.get("earned_at") else None,
                )
                for item in json.loads(orm.badges_json or "[]")
            ],
            updated_at=to_eastern(orm.updated_at),
        )
