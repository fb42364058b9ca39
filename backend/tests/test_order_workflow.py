"""Tests for order creation and status advancement at the service layer."""

import pytest
from decimal import Decimal
from types import SimpleNamespace

from dineflow.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from dineflow.core.policy import OrderStatus, UserRole
from dineflow.models.order import Order
from dineflow.models.restaurant import DiningTable, TableStatus
from dineflow.services.order_workflow import OrderWorkflowService, build_line_items, order_total


def cart(*entries):
    return [SimpleNamespace(menu_item_id=item_id, quantity=qty) for item_id, qty in entries]


def table_status(db_session, business, number):
    db_session.expire_all()
    return db_session.query(DiningTable).filter(
        DiningTable.business_id == business.id,
        DiningTable.table_number == number,
    ).one().status


# ============== Line items ==============

class TestBuildLineItems:
    def test_snapshot_prices_and_totals(self, menu):
        by_id = {i.id: i for i in menu.values()}
        lines = build_line_items(by_id, cart((menu["tikka"].id, 2), (menu["dal"].id, 1)))
        assert lines[0]["name"] == "Paneer Tikka"
        assert lines[0]["price"] == "100.00"
        assert lines[0]["line_total"] == "200.00"
        assert order_total(lines) == Decimal("250.00")

    def test_duplicate_entries_are_merged(self, menu):
        by_id = {i.id: i for i in menu.values()}
        lines = build_line_items(by_id, cart((menu["dal"].id, 1), (menu["dal"].id, 2)))
        assert len(lines) == 1
        assert lines[0]["quantity"] == 3

    def test_unavailable_item_rejected(self, menu):
        by_id = {i.id: i for i in menu.values()}
        with pytest.raises(ValidationError):
            build_line_items(by_id, cart((menu["biryani"].id, 1)))

    def test_unknown_item_rejected(self, menu):
        with pytest.raises(ValidationError):
            build_line_items({}, cart((424242, 1)))

    def test_zero_quantity_rejected(self, menu):
        by_id = {i.id: i for i in menu.values()}
        with pytest.raises(ValidationError):
            build_line_items(by_id, cart((menu["dal"].id, 0)))


# ============== Creation ==============

class TestCreateOrder:
    def test_creates_pending_order_and_occupies_table(self, db_session, business, tables, menu,
                                                      cashier, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        order = service.create_order(actor_for(cashier), 5, cart((menu["tikka"].id, 2), (menu["dal"].id, 1)))
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("250.00")
        assert order.created_by == cashier.email
        assert order.created_by_role == UserRole.CASHIER
        assert "Pending" in order.transitions
        assert table_status(db_session, business, 5) == TableStatus.OCCUPIED.value

    def test_empty_cart_rejected(self, db_session, business, tables, cashier, actor_for):
        with pytest.raises(ValidationError):
            OrderWorkflowService(db_session, business.id).create_order(actor_for(cashier), 5, [])
        assert db_session.query(Order).count() == 0
        assert table_status(db_session, business, 5) == TableStatus.AVAILABLE.value

    def test_missing_table_rejected(self, db_session, business, tables, menu, cashier, actor_for):
        with pytest.raises(ValidationError):
            OrderWorkflowService(db_session, business.id).create_order(
                actor_for(cashier), None, cart((menu["dal"].id, 1))
            )

    def test_unknown_table_rejected(self, db_session, business, tables, menu, cashier, actor_for):
        with pytest.raises(ValidationError):
            OrderWorkflowService(db_session, business.id).create_order(
                actor_for(cashier), 99, cart((menu["dal"].id, 1))
            )

    def test_chef_cannot_create(self, db_session, business, tables, menu, chef, actor_for):
        with pytest.raises(AuthorizationError):
            OrderWorkflowService(db_session, business.id).create_order(
                actor_for(chef), 5, cart((menu["dal"].id, 1))
            )

    def test_menu_edit_does_not_change_existing_order(self, db_session, business, tables, menu,
                                                      cashier, actor_for):
        order = OrderWorkflowService(db_session, business.id).create_order(
            actor_for(cashier), 5, cart((menu["dal"].id, 2))
        )
        menu["dal"].price = Decimal("75.00")
        db_session.commit()
        db_session.refresh(order)
        assert order.total_amount == Decimal("100.00")
        assert order.items[0]["price"] == "50.00"


# ============== Advancement ==============

@pytest.fixture
def pending_order(db_session, business, tables, menu, cashier, actor_for):
    return OrderWorkflowService(db_session, business.id).create_order(
        actor_for(cashier), 5, cart((menu["tikka"].id, 2), (menu["dal"].id, 1))
    )


class TestAdvance:
    def test_full_lifecycle_releases_table(self, db_session, business, pending_order,
                                           manager, chef, waiter, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        steps = [
            (manager, OrderStatus.CONFIRMED),
            (chef, OrderStatus.PREPARING),
            (chef, OrderStatus.READY),
            (waiter, OrderStatus.SERVED),
            (waiter, OrderStatus.COMPLETED),
        ]
        for user, expected in steps:
            order = service.advance(actor_for(user), pending_order.id)
            assert order.status == expected
            assert order.transitions[expected.value]["by"] == user.email
        assert table_status(db_session, business, 5) == TableStatus.AVAILABLE.value

    def test_rejected_advance_writes_nothing(self, db_session, business, pending_order,
                                             manager, cashier, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        service.advance(actor_for(manager), pending_order.id)
        with pytest.raises(AuthorizationError):
            service.advance(actor_for(cashier), pending_order.id)
        db_session.expire_all()
        order = service.get_order(pending_order.id)
        assert order.status == OrderStatus.CONFIRMED
        assert set(order.transitions) == {"Pending", "Confirmed"}

    def test_completed_order_cannot_advance(self, db_session, business, pending_order, manager, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        for _ in range(5):
            service.advance(actor_for(manager), pending_order.id)
        with pytest.raises(ConflictError):
            service.advance(actor_for(manager), pending_order.id)

    def test_table_kept_while_other_order_active(self, db_session, business, menu, pending_order,
                                                 cashier, manager, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        service.create_order(actor_for(cashier), 5, cart((menu["dal"].id, 1)))
        for _ in range(5):
            service.advance(actor_for(manager), pending_order.id)
        assert table_status(db_session, business, 5) == TableStatus.OCCUPIED.value

    def test_missing_order(self, db_session, business, tables, manager, actor_for):
        with pytest.raises(NotFoundError):
            OrderWorkflowService(db_session, business.id).advance(actor_for(manager), 404)

    def test_list_orders_filters(self, db_session, business, menu, pending_order, cashier, manager, actor_for):
        service = OrderWorkflowService(db_session, business.id)
        other = service.create_order(actor_for(cashier), 2, cart((menu["dal"].id, 1)))
        service.advance(actor_for(manager), other.id)
        assert [o.id for o in service.list_orders(status=OrderStatus.PENDING)] == [pending_order.id]
        assert [o.id for o in service.list_orders(table_number=2)] == [other.id]
        assert len(service.list_orders()) == 2
