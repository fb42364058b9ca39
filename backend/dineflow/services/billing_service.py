"""
Billing Calculator

Turns one Completed order into an immutable bill:

    subtotal = order.total_amount
    tax      = subtotal * rate / 100
    total    = subtotal + tax

All amounts are Decimal, quantized to the minor currency unit (0.01) with
ROUND_HALF_UP at computation time. Receipts and reports print the stored
values as-is.
"""

import copy
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from dineflow.core.config import settings
from dineflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from dineflow.core.policy import OrderStatus, Permission, RBACPolicy
from dineflow.models.billing import Bill
from dineflow.models.order import Order

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def quantize_money(value: Number) -> Decimal:
    """Round a currency amount half-up to two decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BillAmounts:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


def calculate_bill(subtotal: Number, tax_rate: Number) -> BillAmounts:
    """Compute tax and total for a subtotal at a percentage rate."""
    subtotal = quantize_money(subtotal)
    rate = Decimal(str(tax_rate))
    if subtotal < 0:
        raise ValidationError("Subtotal cannot be negative")
    if rate < 0 or rate > 100:
        raise ValidationError(f"Tax rate must be between 0 and 100, got {tax_rate}")
    tax_amount = quantize_money(subtotal * rate / Decimal(100))
    return BillAmounts(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


class BillingService:
    """Bill generation, lookup and deletion for one business."""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _bills(self):
        return self.db.query(Bill).filter(Bill.business_id == self.business_id)

    def list_bills(self) -> List[Bill]:
        return self._bills().order_by(Bill.created_at.desc(), Bill.id.desc()).all()

    def get_bill(self, bill_id: int) -> Bill:
        bill = self._bills().filter(Bill.id == bill_id).first()
        if bill is None:
            raise NotFoundError("Bill not found")
        return bill

    def find_bill_for_order(self, order_id: int) -> Optional[Bill]:
        return self._bills().filter(Bill.order_id == order_id).first()

    def billable_orders(self) -> List[Order]:
        """Completed orders that have no bill yet, newest first."""
        billed_ids = select(Bill.order_id).where(Bill.business_id == self.business_id)
        return self.db.query(Order).filter(
            Order.business_id == self.business_id,
            Order.status == OrderStatus.COMPLETED,
            Order.id.not_in(billed_ids),
        ).order_by(Order.created_at.desc(), Order.id.desc()).all()

    def generate_bill(self, actor, order_id: int, tax_rate: Optional[int] = None) -> Bill:
        """Create the bill for a completed order.

        The duplicate check is a read before the insert, not a storage
        constraint: two concurrent requests can both pass it.
        """
        RBACPolicy.require(actor.role, Permission.BILL_CREATE)

        if tax_rate is None:
            tax_rate = settings.default_tax_rate
        if tax_rate not in settings.tax_rates:
            raise ValidationError(
                f"Tax rate {tax_rate}% is not allowed; choose one of {settings.tax_rates}"
            )

        order = self.db.query(Order).filter(
            Order.business_id == self.business_id,
            Order.id == order_id,
        ).first()
        if order is None:
            raise NotFoundError("Order not found")
        if order.status != OrderStatus.COMPLETED:
            raise ValidationError(
                f"Only completed orders can be billed (order is {order.status.value})"
            )

        existing = self.find_bill_for_order(order.id)
        if existing is not None:
            logger.warning(
                f"Bill generation refused: order {order.id} already billed as {existing.bill_number}"
            )
            raise ConflictError("A bill already exists for this order")

        amounts = calculate_bill(order.total_amount, tax_rate)
        bill = Bill(
            business_id=self.business_id,
            bill_number=f"INV-{order.id:06d}",
            order_id=order.id,
            table_number=order.table_number,
            items=copy.deepcopy(order.items),
            subtotal=amounts.subtotal,
            tax_rate=amounts.tax_rate,
            tax_amount=amounts.tax_amount,
            total=amounts.total,
            generated_by=actor.email,
        )
        self.db.add(bill)
        self.db.commit()
        self.db.refresh(bill)

        logger.info(
            f"Bill {bill.bill_number} generated for order {order.id}: "
            f"subtotal={amounts.subtotal} tax={amounts.tax_amount} ({tax_rate}%) total={amounts.total}"
        )
        return bill

    def delete_bill(self, actor, bill_id: int) -> None:
        """Delete a bill. The source order is left untouched."""
        RBACPolicy.require(actor.role, Permission.BILL_DELETE)
        bill = self.get_bill(bill_id)
        self.db.delete(bill)
        self.db.commit()
        logger.info(f"Bill {bill.bill_number} deleted by {actor.email}")
