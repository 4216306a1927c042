"""SQLAlchemy implementation of OrderRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from papertrade.core.timezone import to_eastern
from papertrade.domain.models import Order
from papertrade.repositories.sqlalchemy.orm_models import OrderORM


def _dec(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


class SqlAlchemyOrderRepository:
    """SQLAlchemy-backed order repository."""

    def __init__(self, db: Session, autocommit: bool = True):
        self._db = db
        self._autocommit = autocommit

    def add(self, order: Order) -> Order:
        """Persist a new order."""
        orm_order = self._to_orm(order)
        self._db.add(orm_order)
        if self._autocommit:
            self._db.commit()
            self._db.refresh(orm_order)
        else:
            self._db.flush()
        return self._to_domain(orm_order)

    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by ID."""
        orm_order = self._db.query(OrderORM).filter(
            OrderORM.order_id == order_id
        ).first()
        return self._to_domain(orm_order) if orm_order else None

    def list_recent(self, owner_id: str, limit: int = 50) -> list[Order]:
        """List the owner's most recent orders, newest first."""
        query = (
            self._db.query(OrderORM)
            .filter(OrderORM.owner_id == owner_id)
            # id breaks ties between orders settled in the same instant
            .order_by(OrderORM.created_at.desc(), OrderORM.id.desc())
            .limit(limit)
        )
        return [self._to_domain(o) for o in query.all()]

    def count_by_owner(self, owner_id: str) -> int:
        """Count the owner's orders."""
        return (
            self._db.query(func.count(OrderORM.id))
            .filter(OrderORM.owner_id == owner_id)
            .scalar()
            or 0
        )

    def _to_orm(self, order: Order) -> OrderORM:
        """Convert domain model to ORM model."""
        return OrderORM(
            order_id=order.order_id,
            owner_id=order.owner_id,
            side=order.side,
            symbol=order.symbol,
            quantity=order.quantity,
            price=order.price,
            order_type=order.order_type,
            status=order.status,
            limit_price=order.limit_price,
            stop_loss=order.stop_loss,
            take_profit=order.take_profit,
            fees=order.fees,
            total_amount=order.total_amount,
            profit_loss=order.profit_loss,
            created_at=order.created_at,
            executed_at=order.executed_at,
        )

    def _to_domain(self, orm: OrderORM) -> Order:
        """Convert ORM model to domain model."""
        return Order(
            order_id=orm.order_id,
            owner_id=orm.owner_id,
            side=orm.side,
            symbol=orm.symbol,
            quantity=_dec(orm.quantity),
            price=_dec(orm.price),
            order_type=orm.order_type,
            status=orm.status,
            limit_price=_dec(orm.limit_price),
            stop_loss=_dec(orm.stop_loss),
            take_profit=_dec(orm.take_profit),
            fees=_dec(orm.fees) or Decimal("0"),
            total_amount=_dec(orm.total_amount),
            profit_loss=_dec(orm.profit_loss) or Decimal("0"),
            created_at=to_eastern(orm.created_at),
            executed_at=to_eastern(orm.executed_at),
        )
