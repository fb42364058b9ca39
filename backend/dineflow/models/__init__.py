"""SQLAlchemy models."""

from dineflow.models.business import Business
from dineflow.models.user import User, StaffStatus
from dineflow.models.restaurant import DiningTable, MenuItem, TableStatus
from dineflow.models.order import Order
from dineflow.models.billing import Bill
from dineflow.models.booking import Booking, BookingStatus

__all__ = [
    "Business",
    "User",
    "StaffStatus",
    "DiningTable",
    "MenuItem",
    "TableStatus",
    "Order",
    "Bill",
    "Booking",
    "BookingStatus",
]
