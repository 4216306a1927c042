"""SQLAlchemy ORM model definitions."""

from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    Text,
    ForeignKey,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from papertrade.repositories.sqlalchemy.database import Base
from papertrade.domain.models.enums import (
    OrderSide,
    OrderType,
    OrderStatus,
    NotificationType,
    NotificationPriority,
)


class LedgerORM(Base):
    """SQLAlchemy model for the per-owner portfolio ledger."""

    __tablename__ = "ledgers"
    __table_args__ = (CheckConstraint("cash >= 0", name="ck_ledgers_cash_non_negative"),)

    ledger_id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), unique=True, nullable=False)
    cash = Column(Numeric(precision=18, scale=4), nullable=False)
    initial_cash = Column(Numeric(precision=18, scale=4), nullable=False)
    total_value = Column(Numeric(precision=18, scale=4), nullable=False)
    total_return = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    daily_return = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    holdings = relationship(
        "HoldingORM",
        back_populates="ledger",
        order_by="HoldingORM.id",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "LedgerHistoryORM",
        back_populates="ledger",
        order_by="LedgerHistoryORM.id",
        cascade="all, delete-orphan",
    )

    # UPDATE ... WHERE version = <read version>; a miss raises StaleDataError
    __mapper_args__ = {"version_id_col": version}


class HoldingORM(Base):
    """SQLAlchemy model for one symbol held in a ledger."""

    __tablename__ = "holdings"
    __table_args__ = (
        UniqueConstraint("ledger_id", "symbol", name="uq_holdings_ledger_symbol"),
        CheckConstraint("quantity > 0", name="ck_holdings_quantity_positive"),
        CheckConstraint("average_cost >= 0", name="ck_holdings_average_cost_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    ledger_id = Column(String(36), ForeignKey("ledgers.ledger_id"), nullable=False)
    symbol = Column(String(20), nullable=False)
    quantity = Column(Numeric(precision=18, scale=8), nullable=False)
    average_cost = Column(Numeric(precision=18, scale=8), nullable=False)
    last_updated = Column(DateTime, nullable=True)

    ledger = relationship("LedgerORM", back_populates="holdings")


class LedgerHistoryORM(Base):
    """SQLAlchemy model for a ledger performance snapshot."""

    __tablename__ = "ledger_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ledger_id = Column(String(36), ForeignKey("ledgers.ledger_id"), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False)
    total_value = Column(Numeric(precision=18, scale=4), nullable=False)
    cash = Column(Numeric(precision=18, scale=4), nullable=False)
    holdings_json = Column(Text, nullable=False, default="[]")

    ledger = relationship("LedgerORM", back_populates="history")


class OrderORM(Base):
    """SQLAlchemy model for a settled order."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), unique=True, nullable=False)
    owner_id = Column(String(64), nullable=False, index=True)
    side = Column(SqlEnum(OrderSide), nullable=False)
    symbol = Column(String(20), nullable=False)
    quantity = Column(Numeric(precision=18, scale=8), nullable=False)
    price = Column(Numeric(precision=18, scale=4), nullable=False)
    order_type = Column(SqlEnum(OrderType), nullable=False, default=OrderType.MARKET)
    status = Column(SqlEnum(OrderStatus), nullable=False)
    limit_price = Column(Numeric(precision=18, scale=4), nullable=True)
    stop_loss = Column(Numeric(precision=18, scale=4), nullable=True)
    take_profit = Column(Numeric(precision=18, scale=4), nullable=True)
    fees = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    total_amount = Column(Numeric(precision=18, scale=4), nullable=False)
    profit_loss = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    created_at = Column(DateTime, nullable=False)
    executed_at = Column(DateTime, nullable=True)


class UserProgressORM(Base):
    """SQLAlchemy model for gamification progress."""

    __tablename__ = "user_progress"

    owner_id = Column(String(64), primary_key=True)
    points = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    total_trades = Column(Integer, nullable=False, default=0)
    successful_trades = Column(Integer, nullable=False, default=0)
    profit_loss = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    win_rate = Column(Numeric(precision=9, scale=4), default=Decimal("0"))
    badges_json = Column(Text, nullable=False, default="[]")
    updated_at = Column(DateTime, nullable=True)


class NotificationORM(Base):
    """SQLAlchemy model for an in-app notification."""

    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(SqlEnum(NotificationType), nullable=False)
    data_json = Column(Text, nullable=True)
    priority = Column(
        SqlEnum(NotificationPriority),
        nullable=False,
        default=NotificationPriority.NORMAL,
    )
    read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)


class WatchlistItemORM(Base):
    """SQLAlchemy model for a watchlist entry."""

    __tablename__ = "watchlist_items"
    __table_args__ = (UniqueConstraint("owner_id", "symbol", name="uq_watchlist_owner_symbol"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    added_at = Column(DateTime, nullable=False)
