"""
Read projections: kitchen queue, role dashboards and sales reports.

Everything here is read-only and recomputed on each request. Calendar-day
grouping happens in the viewer's timezone (``settings.timezone`` unless a
request overrides it); stored timestamps without tzinfo are UTC.
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from dineflow.core.config import settings
from dineflow.core.exceptions import ValidationError
from dineflow.core.policy import KITCHEN_STATUSES, OrderStatus
from dineflow.models.billing import Bill
from dineflow.models.order import Order
from dineflow.models.restaurant import DiningTable, TableStatus

ZERO = Decimal("0.00")


def resolve_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    name = tz_name or settings.timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name}")


def as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def local_date(dt: datetime, tz: ZoneInfo) -> date:
    return as_utc(dt).astimezone(tz).date()


def day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _bills_between(db: Session, business_id: int, start: datetime, end: datetime) -> List[Bill]:
    # Widen the SQL window by a day on each side; SQLite compares naive
    # strings, so the exact local-day cut is applied in Python.
    return db.query(Bill).filter(
        Bill.business_id == business_id,
        Bill.created_at >= (start - timedelta(days=1)).replace(tzinfo=None),
        Bill.created_at < (end + timedelta(days=1)).replace(tzinfo=None),
    ).all()


def _sum(values) -> Decimal:
    return sum(values, ZERO)


def _active_orders(db: Session, business_id: int) -> List[Order]:
    return db.query(Order).filter(
        Order.business_id == business_id,
        Order.status != OrderStatus.COMPLETED,
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()


def occupied_table_count(db: Session, business_id: int) -> int:
    return db.query(DiningTable).filter(
        DiningTable.business_id == business_id,
        DiningTable.status == TableStatus.OCCUPIED.value,
    ).count()


def kitchen_queue(db: Session, business_id: int) -> List[Order]:
    """Confirmed and Preparing orders, oldest first."""
    return db.query(Order).filter(
        Order.business_id == business_id,
        Order.status.in_(list(KITCHEN_STATUSES)),
    ).order_by(Order.created_at.asc(), Order.id.asc()).all()


def daily_sales(db: Session, business_id: int, day: date, tz: Optional[ZoneInfo] = None) -> dict:
    """Bills generated on one local calendar day."""
    tz = tz or resolve_timezone()
    start, end = day_bounds(day, tz)
    bills = [
        b for b in _bills_between(db, business_id, start, end)
        if local_date(b.created_at, tz) == day
    ]
    bills.sort(key=lambda b: (as_utc(b.created_at), b.id), reverse=True)
    return {
        "date": day,
        "total_sales": _sum(b.total for b in bills),
        "total_tax": _sum(b.tax_amount for b in bills),
        "bill_count": len(bills),
        "bills": bills,
    }


def monthly_sales(db: Session, business_id: int, year: int, month: int,
                  tz: Optional[ZoneInfo] = None) -> dict:
    """Per-day bill totals across a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    tz = tz or resolve_timezone()
    days_in_month = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    last = date(year, month, days_in_month)
    start, _ = day_bounds(first, tz)
    _, end = day_bounds(last, tz)

    totals: Dict[date, Decimal] = {}
    counts: Dict[date, int] = {}
    for bill in _bills_between(db, business_id, start, end):
        day = local_date(bill.created_at, tz)
        if day.year != year or day.month != month:
            continue
        totals[day] = totals.get(day, ZERO) + bill.total
        counts[day] = counts.get(day, 0) + 1

    days = [
        {
            "date": first + timedelta(days=offset),
            "total_sales": totals.get(first + timedelta(days=offset), ZERO),
            "bill_count": counts.get(first + timedelta(days=offset), 0),
        }
        for offset in range(days_in_month)
    ]
    return {
        "year": year,
        "month": month,
        "days": days,
        "total_sales": _sum(totals.values()),
        "bill_count": sum(counts.values()),
    }


def order_history(db: Session, business_id: int, day: Optional[date] = None,
                  table_number: Optional[int] = None, tz: Optional[ZoneInfo] = None) -> List[Order]:
    """Orders filtered by local day and/or table, newest first."""
    query = db.query(Order).filter(Order.business_id == business_id)
    if table_number is not None:
        query = query.filter(Order.table_number == table_number)
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    if day is not None:
        tz = tz or resolve_timezone()
        orders = [o for o in orders if local_date(o.created_at, tz) == day]
    return orders


def manager_dashboard(db: Session, business_id: int, tz: Optional[ZoneInfo] = None) -> dict:
    """Pending dispatch list, active board, occupancy and today's takings."""
    tz = tz or resolve_timezone()
    active = _active_orders(db, business_id)
    today = datetime.now(timezone.utc).astimezone(tz).date()
    sales = daily_sales(db, business_id, today, tz)
    return {
        "pending_orders": [o for o in active if o.status == OrderStatus.PENDING],
        "active_orders": active,
        "occupied_tables": occupied_table_count(db, business_id),
        "today_sales": sales["total_sales"],
        "today_bill_count": sales["bill_count"],
    }


def waiter_dashboard(db: Session, business_id: int, email: str) -> dict:
    """Floor view: what to serve next and the caller's own open orders."""
    active = _active_orders(db, business_id)
    served = db.query(Order).filter(
        Order.business_id == business_id,
        Order.status == OrderStatus.SERVED,
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()
    return {
        "active_orders": active,
        "my_orders": [o for o in active if o.created_by == email],
        "ready_orders": [o for o in active if o.status == OrderStatus.READY],
        "served_orders": served,
        "occupied_tables": occupied_table_count(db, business_id),
    }


def kitchen_dashboard(db: Session, business_id: int) -> dict:
    queue = kitchen_queue(db, business_id)
    return {
        "queue": queue,
        "confirmed_count": sum(1 for o in queue if o.status == OrderStatus.CONFIRMED),
        "preparing_count": sum(1 for o in queue if o.status == OrderStatus.PREPARING),
    }


def table_summary(db: Session, business_id: int) -> dict:
    tables = db.query(DiningTable).filter(DiningTable.business_id == business_id).all()
    counts = {s.value: 0 for s in TableStatus}
    for table in tables:
        counts[table.status] = counts.get(table.status, 0) + 1
    total = len(tables)
    occupied = counts[TableStatus.OCCUPIED.value]
    return {
        "total": total,
        "available": counts[TableStatus.AVAILABLE.value],
        "occupied": occupied,
        "reserved": counts[TableStatus.RESERVED.value],
        "total_capacity": sum(t.capacity for t in tables),
        "occupancy_rate": round(occupied / total * 100, 1) if total else 0.0,
    }
