"""Booking routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.models.booking import BookingStatus
from dineflow.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from dineflow.services.booking_service import BookingService
from dineflow.services.realtime_service import publish_change

router = APIRouter()

BookingManager = Annotated[TokenData, Depends(require_permission(Permission.BOOKING_MANAGE))]


@router.get("")
def list_bookings(business_id: BusinessId, current_user: BookingManager, db: DbSession,
                  status: Optional[BookingStatus] = None):
    bookings = BookingService(db, business_id).list_bookings(status=status)
    return list_response([BookingResponse.model_validate(b).model_dump(mode="json") for b in bookings])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, business_id: BusinessId, current_user: BookingManager,
                   db: DbSession, background_tasks: BackgroundTasks):
    """Record a reservation; the table becomes Reserved."""
    booking = BookingService(db, business_id).create_booking(current_user, data)
    background_tasks.add_task(publish_change, business_id, "bookings", "created", booking.id)
    background_tasks.add_task(publish_change, business_id, "tables", "updated", booking.table_number)
    return booking


@router.patch("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(booking_id: int, data: BookingStatusUpdate, business_id: BusinessId,
                          current_user: BookingManager, db: DbSession,
                          background_tasks: BackgroundTasks):
    """Complete or cancel a booking; the table is freed."""
    booking = BookingService(db, business_id).resolve_booking(current_user, booking_id, data.status)
    background_tasks.add_task(publish_change, business_id, "bookings", "updated", booking.id)
    background_tasks.add_task(publish_change, business_id, "tables", "updated", booking.table_number)
    return booking


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: int, business_id: BusinessId, current_user: BookingManager,
                   db: DbSession, background_tasks: BackgroundTasks):
    BookingService(db, business_id).delete_booking(current_user, booking_id)
    background_tasks.add_task(publish_change, business_id, "bookings", "deleted", booking_id)
