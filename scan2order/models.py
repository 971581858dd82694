from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    JSON,
    DateTime,
    Text,
    Index,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class OrderRecord(Base):
    __tablename__ = "orders"

    # Surrogate key: queue numbers restart every year, so they are not unique
    pk = Column(Integer, primary_key=True, autoincrement=True)
    queue_number = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="New", index=True)
    items = Column(JSON, nullable=False, default=list)  # list of OrderItem docs
    total = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    note = Column(Text, nullable=True)
    pickup_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    marketing_opt_in = Column(Boolean, nullable=False, default=False)

    # The expiry sweep filters on status and deadline
    __table_args__ = (
        Index("ix_orders_status_expires_at", "status", "expires_at"),
    )


class QueueCounter(Base):
    """Single-row table holding the yearly queue sequence."""
    __tablename__ = "queue_counter"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False)
    n = Column(Integer, nullable=False, default=0)
