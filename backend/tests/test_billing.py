"""Tests for bill calculation and generation."""

import pytest
from decimal import Decimal

from dineflow.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from dineflow.core.policy import OrderStatus, UserRole
from dineflow.models.billing import Bill
from dineflow.models.order import Order
from dineflow.services.billing_service import BillingService, calculate_bill, quantize_money


# ============== Calculation ==============

class TestCalculateBill:
    def test_five_percent(self):
        amounts = calculate_bill(Decimal("250"), 5)
        assert amounts.subtotal == Decimal("250.00")
        assert amounts.tax_amount == Decimal("12.50")
        assert amounts.total == Decimal("262.50")

    def test_eighteen_percent(self):
        amounts = calculate_bill("199.99", 18)
        assert amounts.tax_amount == Decimal("36.00")
        assert amounts.total == Decimal("235.99")

    def test_half_up_rounding(self):
        # 0.10 * 5% = 0.005 -> 0.01
        assert calculate_bill("0.10", 5).tax_amount == Decimal("0.01")

    def test_zero_rate(self):
        amounts = calculate_bill("100", 0)
        assert amounts.tax_amount == Decimal("0.00")
        assert amounts.total == Decimal("100.00")

    def test_zero_subtotal(self):
        assert calculate_bill(0, 12).total == Decimal("0.00")

    def test_negative_subtotal_rejected(self):
        with pytest.raises(ValidationError):
            calculate_bill("-1", 5)

    @pytest.mark.parametrize("rate", [-1, 101])
    def test_rate_out_of_range_rejected(self, rate):
        with pytest.raises(ValidationError):
            calculate_bill("100", rate)

    def test_total_equals_subtotal_plus_tax(self):
        amounts = calculate_bill("333.33", 12)
        assert amounts.total == amounts.subtotal + amounts.tax_amount

    def test_quantize_money_from_float(self):
        assert quantize_money(2.675) == Decimal("2.68")


# ============== Generation ==============

@pytest.fixture
def completed_order(db_session, business, tables):
    order = Order(
        business_id=business.id,
        table_number=5,
        items=[
            {"menu_item_id": 1, "name": "Paneer Tikka", "price": "100.00", "quantity": 2, "line_total": "200.00"},
            {"menu_item_id": 2, "name": "Dal Tadka", "price": "50.00", "quantity": 1, "line_total": "50.00"},
        ],
        total_amount=Decimal("250.00"),
        status=OrderStatus.COMPLETED,
        created_by="cashier@spiceroute.in",
        created_by_role=UserRole.CASHIER,
        transitions={},
    )
    db_session.add(order)
    db_session.commit()
    db_session.refresh(order)
    return order


class TestBillingService:
    def test_generate_bill(self, db_session, business, cashier, actor_for, completed_order):
        bill = BillingService(db_session, business.id).generate_bill(actor_for(cashier), completed_order.id, 5)
        assert bill.subtotal == Decimal("250.00")
        assert bill.tax_amount == Decimal("12.50")
        assert bill.total == Decimal("262.50")
        assert bill.bill_number == f"INV-{completed_order.id:06d}"
        assert bill.table_number == 5
        assert bill.generated_by == cashier.email
        assert len(bill.items) == 2

    def test_default_rate_used(self, db_session, business, cashier, actor_for, completed_order):
        bill = BillingService(db_session, business.id).generate_bill(actor_for(cashier), completed_order.id)
        assert bill.tax_rate == Decimal("5")

    def test_second_bill_for_same_order_refused(self, db_session, business, cashier, actor_for, completed_order):
        service = BillingService(db_session, business.id)
        service.generate_bill(actor_for(cashier), completed_order.id, 5)
        with pytest.raises(ConflictError):
            service.generate_bill(actor_for(cashier), completed_order.id, 12)
        assert db_session.query(Bill).count() == 1

    def test_unlisted_rate_rejected(self, db_session, business, cashier, actor_for, completed_order):
        with pytest.raises(ValidationError):
            BillingService(db_session, business.id).generate_bill(actor_for(cashier), completed_order.id, 7)

    def test_non_completed_order_rejected(self, db_session, business, cashier, actor_for, completed_order):
        completed_order.status = OrderStatus.SERVED
        db_session.commit()
        with pytest.raises(ValidationError):
            BillingService(db_session, business.id).generate_bill(actor_for(cashier), completed_order.id, 5)

    def test_missing_order(self, db_session, business, cashier, actor_for):
        with pytest.raises(NotFoundError):
            BillingService(db_session, business.id).generate_bill(actor_for(cashier), 9999, 5)

    def test_staff_cannot_generate(self, db_session, business, waiter, actor_for, completed_order):
        with pytest.raises(AuthorizationError):
            BillingService(db_session, business.id).generate_bill(actor_for(waiter), completed_order.id, 5)

    def test_bill_items_are_a_copy(self, db_session, business, cashier, actor_for, completed_order):
        bill = BillingService(db_session, business.id).generate_bill(actor_for(cashier), completed_order.id, 5)
        assert bill.items == completed_order.items
        assert bill.items is not completed_order.items

    def test_billable_orders_excludes_billed(self, db_session, business, cashier, actor_for, completed_order):
        service = BillingService(db_session, business.id)
        assert [o.id for o in service.billable_orders()] == [completed_order.id]
        service.generate_bill(actor_for(cashier), completed_order.id, 5)
        assert service.billable_orders() == []

    def test_delete_bill_leaves_order(self, db_session, business, manager, actor_for, completed_order):
        service = BillingService(db_session, business.id)
        bill = service.generate_bill(actor_for(manager), completed_order.id, 5)
        service.delete_bill(actor_for(manager), bill.id)
        assert db_session.query(Bill).count() == 0
        assert db_session.get(Order, completed_order.id).status == OrderStatus.COMPLETED
        # Once deleted, the order can be billed again
        assert [o.id for o in service.billable_orders()] == [completed_order.id]
