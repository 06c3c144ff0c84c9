"""
Scout Query Service — Local Store SQLAlchemy Models
=====================================================

What:  ORM models for the `stores` and `transactions` tables of the embedded
       SQLite analytics store.
How:   Inherit from scout.database.Base; init_local_store() creates them.
Who:   Read by the convenience analytics queries (raw SQL against these
       tables); written by dev seeding and tests.

Column naming follows the store's existing SQL contract: the foreign key
column is literally `storeId` and the event time column is `timestamp`.

Query Patterns:
    - Trailing-window aggregates: WHERE timestamp >= date('now', '-1 month')
      → idx_transactions_timestamp
    - Per-store rollups: JOIN transactions t ON s.id = t.storeId
      → idx_transactions_store_id
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scout.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Store(Base):
    """A retail location whose transactions are analysed."""

    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    region: Mapped[str] = mapped_column(String(50), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r} region={self.region!r}>"


class Transaction(Base):
    """
    A single sale recorded at a store.

    Timestamps are stored as naive UTC; SQLite compares them as ISO strings,
    which is what the trailing-window filters rely on.
    """

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    store_id: Mapped[str] = mapped_column(
        "storeId", String(36), ForeignKey("stores.id"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    # pending | completed | refunded
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed")

    __table_args__ = (
        Index("idx_transactions_timestamp", "timestamp"),
        Index("idx_transactions_store_id", "storeId"),
    )

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} store={self.store_id} amount={self.amount}>"
