"""Order aggregate: one table's order moving through the fulfilment sequence."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from dineflow.core.policy import OrderStatus, UserRole
from dineflow.db.base import Base
from dineflow.models.validators import non_negative, positive


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    """A table's order.

    ``items`` is a frozen snapshot of the cart at creation time:
    a list of {menu_item_id, name, price, quantity, line_total} with money
    stored as strings. ``total_amount`` is the sum of line totals and is
    never recomputed.

    ``transitions`` maps each reached status to {"at": iso8601, "by": email}.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    table_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True
    )
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by_role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole), nullable=False)
    transitions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=True
    )

    @validates('total_amount')
    def _validate_total(self, key, value):
        return non_negative(key, value)

    @validates('table_number')
    def _validate_table_number(self, key, value):
        return positive(key, value)

    @property
    def is_active(self) -> bool:
        return self.status != OrderStatus.COMPLETED
