"""Restaurant floor and menu models - dining tables and menu items."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import validates

from dineflow.db.base import Base
from dineflow.models.validators import non_negative, positive


def _utcnow():
    return datetime.now(timezone.utc)


class TableStatus(str, Enum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    RESERVED = "Reserved"


class DiningTable(Base):
    """Restaurant table for seating."""
    __tablename__ = "dining_tables"
    __table_args__ = (
        UniqueConstraint("business_id", "table_number", name="uq_dining_tables_business_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False, default=4)
    status = Column(String(20), nullable=False, default=TableStatus.AVAILABLE.value)
    floor = Column(String(50), nullable=False, default="Ground Floor")
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @validates('table_number', 'capacity')
    def _validate_positive(self, key, value):
        return positive(key, value)

    @validates('status')
    def _validate_status(self, key, value):
        return TableStatus(value).value


class MenuItem(Base):
    """Orderable dish or drink."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, default="Main Course")
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @validates('price')
    def _validate_price(self, key, value):
        return non_negative(key, value)
