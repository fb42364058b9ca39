"""Tests for read projections: dashboards, kitchen queue and sales reports."""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from dineflow.core.exceptions import ValidationError
from dineflow.core.policy import OrderStatus, UserRole
from dineflow.models.billing import Bill
from dineflow.models.order import Order
from dineflow.models.restaurant import TableStatus
from dineflow.services import projections

UTC = ZoneInfo("UTC")
IST = ZoneInfo("Asia/Kolkata")


def add_order(db_session, business, status, created_at, table_number=1, created_by="staff@spiceroute.in"):
    order = Order(
        business_id=business.id,
        table_number=table_number,
        items=[],
        total_amount=Decimal("100.00"),
        status=status,
        created_by=created_by,
        created_by_role=UserRole.STAFF,
        transitions={},
        created_at=created_at,
    )
    db_session.add(order)
    db_session.commit()
    return order


def add_bill(db_session, business, created_at, total="105.00", tax="5.00", order_id=1):
    bill = Bill(
        business_id=business.id,
        bill_number=f"INV-{order_id:06d}",
        order_id=order_id,
        table_number=1,
        items=[],
        subtotal=Decimal(total) - Decimal(tax),
        tax_rate=Decimal("5"),
        tax_amount=Decimal(tax),
        total=Decimal(total),
        generated_by="cashier@spiceroute.in",
        created_at=created_at,
    )
    db_session.add(bill)
    db_session.commit()
    return bill


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# ============== Timezone helpers ==============

class TestTimezoneHelpers:
    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            projections.resolve_timezone("Mars/Olympus")

    def test_default_timezone(self):
        assert projections.resolve_timezone().key == "Asia/Kolkata"

    def test_bad_configured_timezone_named_in_error(self, monkeypatch):
        monkeypatch.setattr(projections.settings, "timezone", "Nowhere/Land")
        with pytest.raises(ValidationError) as exc_info:
            projections.resolve_timezone()
        assert exc_info.value.message == "Unknown timezone: Nowhere/Land"

    def test_naive_datetimes_are_utc(self):
        assert projections.local_date(datetime(2026, 3, 10, 20, 0), IST) == date(2026, 3, 11)

    def test_day_bounds(self):
        start, end = projections.day_bounds(date(2026, 3, 11), IST)
        assert start == utc(2026, 3, 10, 18, 30)
        assert end - start == timedelta(days=1)


# ============== Kitchen queue ==============

class TestKitchenQueue:
    def test_oldest_first_and_kitchen_statuses_only(self, db_session, business):
        newer = add_order(db_session, business, OrderStatus.PREPARING, utc(2026, 3, 10, 12, 5))
        older = add_order(db_session, business, OrderStatus.CONFIRMED, utc(2026, 3, 10, 12, 0))
        add_order(db_session, business, OrderStatus.PENDING, utc(2026, 3, 10, 11, 0))
        add_order(db_session, business, OrderStatus.READY, utc(2026, 3, 10, 11, 30))
        queue = projections.kitchen_queue(db_session, business.id)
        assert [o.id for o in queue] == [older.id, newer.id]

    def test_kitchen_dashboard_counts(self, db_session, business):
        add_order(db_session, business, OrderStatus.CONFIRMED, utc(2026, 3, 10, 12, 0))
        add_order(db_session, business, OrderStatus.CONFIRMED, utc(2026, 3, 10, 12, 1))
        add_order(db_session, business, OrderStatus.PREPARING, utc(2026, 3, 10, 12, 2))
        data = projections.kitchen_dashboard(db_session, business.id)
        assert data["confirmed_count"] == 2
        assert data["preparing_count"] == 1
        assert len(data["queue"]) == 3


# ============== Dashboards ==============

class TestDashboards:
    def test_manager_dashboard(self, db_session, business, tables):
        now = datetime.now(timezone.utc)
        pending = add_order(db_session, business, OrderStatus.PENDING, now)
        add_order(db_session, business, OrderStatus.SERVED, now - timedelta(minutes=5))
        add_order(db_session, business, OrderStatus.COMPLETED, now - timedelta(minutes=10))
        add_bill(db_session, business, now)
        tables[1].status = TableStatus.OCCUPIED.value
        db_session.commit()

        data = projections.manager_dashboard(db_session, business.id, UTC)
        assert [o.id for o in data["pending_orders"]] == [pending.id]
        assert len(data["active_orders"]) == 2
        assert data["occupied_tables"] == 1
        assert data["today_sales"] == Decimal("105.00")
        assert data["today_bill_count"] == 1

    def test_waiter_dashboard(self, db_session, business):
        now = datetime.now(timezone.utc)
        mine = add_order(db_session, business, OrderStatus.READY, now, created_by="me@spiceroute.in")
        add_order(db_session, business, OrderStatus.PENDING, now, created_by="other@spiceroute.in")
        served = add_order(db_session, business, OrderStatus.SERVED, now)
        data = projections.waiter_dashboard(db_session, business.id, "me@spiceroute.in")
        assert [o.id for o in data["my_orders"]] == [mine.id]
        assert [o.id for o in data["ready_orders"]] == [mine.id]
        assert [o.id for o in data["served_orders"]] == [served.id]
        assert len(data["active_orders"]) == 3

    def test_table_summary(self, db_session, business, tables):
        tables[1].status = TableStatus.OCCUPIED.value
        tables[2].status = TableStatus.RESERVED.value
        db_session.commit()
        summary = projections.table_summary(db_session, business.id)
        assert summary["total"] == 8
        assert summary["occupied"] == 1
        assert summary["reserved"] == 1
        assert summary["available"] == 6
        assert summary["total_capacity"] == 6 * 4 + 2 * 6
        assert summary["occupancy_rate"] == 12.5

    def test_table_summary_empty(self, db_session, business):
        assert projections.table_summary(db_session, business.id)["occupancy_rate"] == 0.0


# ============== Sales reports ==============

class TestSalesReports:
    def test_daily_sales_in_utc(self, db_session, business):
        add_bill(db_session, business, utc(2026, 3, 10, 9, 0), total="262.50", tax="12.50", order_id=1)
        add_bill(db_session, business, utc(2026, 3, 10, 23, 59), total="105.00", tax="5.00", order_id=2)
        add_bill(db_session, business, utc(2026, 3, 11, 0, 1), total="50.00", tax="0.00", order_id=3)
        report = projections.daily_sales(db_session, business.id, date(2026, 3, 10), UTC)
        assert report["bill_count"] == 2
        assert report["total_sales"] == Decimal("367.50")
        assert report["total_tax"] == Decimal("17.50")
        # Newest first
        assert report["bills"][0].order_id == 2

    def test_daily_sales_respects_local_day(self, db_session, business):
        # 20:00 UTC on the 10th is 01:30 on the 11th in India
        add_bill(db_session, business, utc(2026, 3, 10, 20, 0))
        assert projections.daily_sales(db_session, business.id, date(2026, 3, 10), IST)["bill_count"] == 0
        assert projections.daily_sales(db_session, business.id, date(2026, 3, 11), IST)["bill_count"] == 1

    def test_daily_sales_empty_day(self, db_session, business):
        report = projections.daily_sales(db_session, business.id, date(2026, 3, 10), UTC)
        assert report["total_sales"] == Decimal("0.00")
        assert report["bills"] == []

    def test_monthly_sales(self, db_session, business):
        add_bill(db_session, business, utc(2026, 2, 28, 12, 0), total="10.00", tax="0.00", order_id=1)
        add_bill(db_session, business, utc(2026, 3, 1, 12, 0), total="100.00", order_id=2)
        add_bill(db_session, business, utc(2026, 3, 1, 13, 0), total="50.00", order_id=3)
        add_bill(db_session, business, utc(2026, 3, 31, 12, 0), total="25.00", tax="0.00", order_id=4)
        report = projections.monthly_sales(db_session, business.id, 2026, 3, UTC)
        assert len(report["days"]) == 31
        assert report["days"][0] == {"date": date(2026, 3, 1), "total_sales": Decimal("150.00"), "bill_count": 2}
        assert report["days"][1]["total_sales"] == Decimal("0.00")
        assert report["days"][30]["bill_count"] == 1
        assert report["total_sales"] == Decimal("175.00")
        assert report["bill_count"] == 3

    def test_monthly_sales_invalid_month(self, db_session, business):
        with pytest.raises(ValidationError):
            projections.monthly_sales(db_session, business.id, 2026, 13, UTC)

    def test_order_history_filters(self, db_session, business):
        first = add_order(db_session, business, OrderStatus.COMPLETED, utc(2026, 3, 10, 9, 0), table_number=1)
        second = add_order(db_session, business, OrderStatus.COMPLETED, utc(2026, 3, 10, 10, 0), table_number=2)
        add_order(db_session, business, OrderStatus.COMPLETED, utc(2026, 3, 11, 9, 0), table_number=1)
        on_day = projections.order_history(db_session, business.id, day=date(2026, 3, 10), tz=UTC)
        assert [o.id for o in on_day] == [second.id, first.id]
        on_table = projections.order_history(db_session, business.id, day=date(2026, 3, 10), table_number=1, tz=UTC)
        assert [o.id for o in on_table] == [first.id]
