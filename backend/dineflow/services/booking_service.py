"""Table reservations and their occupancy side effects."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from dineflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from dineflow.core.policy import Permission, RBACPolicy
from dineflow.models.booking import Booking, BookingStatus
from dineflow.services.occupancy_service import TableOccupancyService

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class BookingService:
    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id
        self.occupancy = TableOccupancyService(db)

    def _bookings(self):
        return self.db.query(Booking).filter(Booking.business_id == self.business_id)

    def list_bookings(self, status: Optional[BookingStatus] = None) -> List[Booking]:
        """Bookings sorted by date and time, latest first."""
        query = self._bookings()
        if status is not None:
            query = query.filter(Booking.status == BookingStatus(status))
        return query.order_by(
            Booking.booking_date.desc(), Booking.booking_time.desc(), Booking.id.desc()
        ).all()

    def get_booking(self, booking_id: int) -> Booking:
        booking = self._bookings().filter(Booking.id == booking_id).first()
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def create_booking(self, actor, data) -> Booking:
        """Record a reservation and mark its table Reserved."""
        RBACPolicy.require(actor.role, Permission.BOOKING_MANAGE)
        if self.occupancy.get_table(self.business_id, data.table_number) is None:
            raise ValidationError(f"Table {data.table_number} does not exist")

        booking = Booking(
            business_id=self.business_id,
            customer_name=data.customer_name.strip(),
            phone=data.phone.strip(),
            booking_date=data.date,
            booking_time=data.time,
            party_size=data.party_size,
            table_number=data.table_number,
            status=BookingStatus.RESERVED,
            created_by=actor.email,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} for {booking.customer_name} on table {booking.table_number} "
            f"at {booking.booking_date} {booking.booking_time}"
        )

        self.occupancy.mark_reserved(self.business_id, booking.table_number)
        return booking

    def resolve_booking(self, actor, booking_id: int, new_status: BookingStatus) -> Booking:
        """Complete or cancel a reservation.

        The table is freed unconditionally, even when another booking or an
        active order also claims it.
        """
        RBACPolicy.require(actor.role, Permission.BOOKING_MANAGE)
        new_status = BookingStatus(new_status)
        if new_status not in RESOLVED_STATUSES:
            raise ValidationError("Booking can only be marked Completed or Cancelled")

        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.RESERVED:
            raise ConflictError(f"Booking is already {booking.status.value}")

        booking.status = new_status
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Booking {booking.id} marked {new_status.value} by {actor.email}")

        self.occupancy.release(self.business_id, booking.table_number)
        return booking

    def delete_booking(self, actor, booking_id: int) -> None:
        RBACPolicy.require(actor.role, Permission.BOOKING_MANAGE)
        booking = self.get_booking(booking_id)
        self.db.delete(booking)
        self.db.commit()
        logger.info(f"Booking {booking_id} deleted by {actor.email}")
