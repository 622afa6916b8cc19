"""
Database Models (SQLAlchemy ORM)
Executions are keyed by (user_id, ym_cycle); soft delete only.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime,
    Boolean, Text, Enum as SQLEnum, Index, JSON, UniqueConstraint
)
import enum

from app.infrastructure.db.database import Base
from app.utils.time import utc_now


# Enums
class ExecutionStatusEnum(str, enum.Enum):
    GENERATED = "GENERATED"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"


class NotificationStatusEnum(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


# Tables

class PlanModel(Base):
    """Monthly investment plan (one active per user)"""
    __tablename__ = "plan"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(64), nullable=False, index=True)

    monthly_budget = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="KRW")
    cycle_count = Column(Integer, nullable=False)
    cycle_weights = Column(JSON, nullable=False)        # ["0.5", "0.5"]
    schedule_days = Column(JSON, nullable=False)        # [5, 19]
    schedule_timezone = Column(String(64), nullable=False, default="Asia/Seoul")

    email = Column(String(255), nullable=False)
    notification_channels = Column(JSON, nullable=False)  # ["EMAIL"]
    telegram_chat_id = Column(String(64), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        Index("ix_plan_user_active", "user_id", "is_active"),
    )


class PortfolioModel(Base):
    """Target portfolio (one active per user)"""
    __tablename__ = "portfolio"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    holdings = Column(JSON, nullable=False)  # [{"ticker", "name", "market", "target_weight"}]

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        Index("ix_portfolio_user_active", "user_id", "is_active"),
    )


class ExecutionModel(Base):
    """Order sheet for one (user, cycle)"""
    __tablename__ = "execution"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    ym_cycle = Column(String(16), nullable=False)      # "2026-02#1"
    year_month = Column(String(7), nullable=False)     # "2026-02"
    cycle_index = Column(Integer, nullable=False)

    portfolio_id = Column(String(64), nullable=False)
    plan_id = Column(String(64), nullable=False)
    as_of_date = Column(DateTime(timezone=True), nullable=False)

    cycle_weight = Column(String(32), nullable=False)
    total_budget = Column(String(64), nullable=False)
    cycle_budget = Column(String(64), nullable=False)

    # Decimal values serialized as strings
    items = Column(JSON, nullable=False)
    carry_by_ticker = Column(JSON, nullable=False)
    exchange_rates = Column(JSON, nullable=False, default=dict)

    status = Column(SQLEnum(ExecutionStatusEnum), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    confirm_note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "ym_cycle", name="uq_execution_user_ym_cycle"),
        Index("ix_execution_user_year_month", "user_id", "year_month"),
    )


class NotificationLogModel(Base):
    """Delivery audit trail for execution notifications"""
    __tablename__ = "notification_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    execution_key = Column(String(16), nullable=False)
    channel = Column(String(16), nullable=False)
    recipient = Column(String(255), nullable=False)
    status = Column(SQLEnum(NotificationStatusEnum), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
