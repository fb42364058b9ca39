"""Bill model: an immutable financial record derived once from a completed order."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from dineflow.db.base import Base
from dineflow.models.validators import non_negative, percentage


def _utcnow():
    return datetime.now(timezone.utc)


class Bill(Base):
    """Generated bill.

    ``order_id`` is not unique: duplicate bills are blocked by
    a pre-check read in the billing service. It is also not a foreign key
    so that deleting a bill has no effect on the order.
    """

    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bill_number: Mapped[str] = mapped_column(String(40), nullable=False)
    order_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    generated_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    @validates('subtotal', 'tax_amount', 'total')
    def _validate_amounts(self, key, value):
        return non_negative(key, value)

    @validates('tax_rate')
    def _validate_rate(self, key, value):
        return percentage(key, value)
