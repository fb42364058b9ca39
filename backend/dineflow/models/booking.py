"""Booking model: a future table reservation, distinct from an active order."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, validates

from dineflow.db.base import Base
from dineflow.models.validators import positive


def _utcnow():
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    RESERVED = "Reserved"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Booking(Base):
    """Reservation of a table for a party at a date and time."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    booking_time: Mapped[time] = mapped_column(Time, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus), default=BookingStatus.RESERVED, nullable=False
    )
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    @validates('party_size', 'table_number')
    def _validate_positive(self, key, value):
        return positive(key, value)
