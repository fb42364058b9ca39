"""
Order Lifecycle

Orders move strictly forward through
Pending -> Confirmed -> Preparing -> Ready -> Served -> Completed.
Which role may take each step is decided by RBACPolicy; this service
applies the step, stamps who did it and when, and triggers the table
occupancy side effects.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from dineflow.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from dineflow.core.policy import OrderStatus, Permission, RBACPolicy
from dineflow.models.order import Order
from dineflow.models.restaurant import MenuItem
from dineflow.services.billing_service import quantize_money
from dineflow.services.occupancy_service import TableOccupancyService

logger = logging.getLogger(__name__)


def _stamp(actor) -> dict:
    return {"at": datetime.now(timezone.utc).isoformat(), "by": actor.email}


def build_line_items(menu_items: dict, cart: Iterable) -> List[dict]:
    """Snapshot cart lines against menu items keyed by id.

    Each cart entry needs ``menu_item_id`` and ``quantity``. Repeated
    entries for the same item are merged. Prices are copied, so later menu
    edits never change an existing order.
    """
    quantities: "OrderedDict[int, int]" = OrderedDict()
    for entry in cart:
        if entry.quantity <= 0:
            raise ValidationError("Quantity must be at least 1")
        quantities[entry.menu_item_id] = quantities.get(entry.menu_item_id, 0) + entry.quantity

    lines = []
    for menu_item_id, quantity in quantities.items():
        item = menu_items.get(menu_item_id)
        if item is None:
            raise ValidationError(f"Menu item {menu_item_id} does not exist")
        if not item.available:
            raise ValidationError(f"{item.name} is currently unavailable")
        price = quantize_money(item.price)
        lines.append({
            "menu_item_id": item.id,
            "name": item.name,
            "price": str(price),
            "quantity": quantity,
            "line_total": str(quantize_money(price * quantity)),
        })
    return lines


def order_total(lines: Iterable[dict]) -> Decimal:
    return sum((Decimal(line["line_total"]) for line in lines), Decimal("0.00"))


class OrderWorkflowService:
    """Creates orders and advances them through the fulfilment sequence."""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id
        self.occupancy = TableOccupancyService(db)

    def _orders(self):
        return self.db.query(Order).filter(Order.business_id == self.business_id)

    def get_order(self, order_id: int) -> Order:
        order = self._orders().filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def list_orders(self, status: Optional[OrderStatus] = None, table_number: Optional[int] = None) -> List[Order]:
        query = self._orders()
        if status is not None:
            query = query.filter(Order.status == OrderStatus(status))
        if table_number is not None:
            query = query.filter(Order.table_number == table_number)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def create_order(self, actor, table_number: Optional[int], cart: list) -> Order:
        """Submit a cart against a table.

        Writes the order at Pending, then marks the table Occupied in a
        second commit.
        """
        RBACPolicy.require(actor.role, Permission.ORDER_CREATE)

        if not cart:
            raise ValidationError("Cart is empty")
        if table_number is None:
            raise ValidationError("Select a table")
        if self.occupancy.get_table(self.business_id, table_number) is None:
            raise ValidationError(f"Table {table_number} does not exist")

        ids = {entry.menu_item_id for entry in cart}
        menu_items = {
            item.id: item
            for item in self.db.query(MenuItem).filter(
                MenuItem.business_id == self.business_id,
                MenuItem.id.in_(ids),
            )
        }
        lines = build_line_items(menu_items, cart)

        order = Order(
            business_id=self.business_id,
            table_number=table_number,
            items=lines,
            total_amount=order_total(lines),
            status=OrderStatus.PENDING,
            created_by=actor.email,
            created_by_role=actor.role,
            transitions={OrderStatus.PENDING.value: _stamp(actor)},
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Order {order.id} created on table {table_number} by {actor.email}: "
            f"{len(lines)} line(s), total {order.total_amount}"
        )

        self.occupancy.mark_occupied(self.business_id, table_number)
        return order

    def advance(self, actor, order_id: int) -> Order:
        """Move an order one step forward if the actor's role allows it.

        A rejected attempt writes nothing. When the order reaches Completed
        the table is released in a separate commit, provided no other
        active order remains on it.
        """
        order = self.get_order(order_id)
        current = order.status
        try:
            target = RBACPolicy.authorize_advance(actor.role, current)
        except (AuthorizationError, ConflictError) as e:
            logger.warning(
                f"Advance of order {order.id} rejected for {actor.email} ({actor.role.value}): {e.message}"
            )
            raise

        order.status = target
        transitions = dict(order.transitions or {})
        transitions[target.value] = _stamp(actor)
        order.transitions = transitions
        flag_modified(order, "transitions")
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"Order {order.id}: {current.value} -> {target.value} by {actor.email}")

        if target == OrderStatus.COMPLETED:
            self.occupancy.release_if_idle(self.business_id, order.table_number)
        return order
