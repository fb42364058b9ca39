"""API routes."""

from fastapi import APIRouter

from dineflow.api.routes import (
    auth, business, staff, tables, menu, orders, dashboard, bookings, bills, reports,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(business.router, prefix="/business", tags=["business"])
api_router.include_router(staff.router, prefix="/staff", tags=["staff"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(dashboard.router, tags=["kitchen", "dashboard"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(bills.router, prefix="/bills", tags=["bills"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
