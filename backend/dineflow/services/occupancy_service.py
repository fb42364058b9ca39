"""
Table Occupancy Tracker

Keeps DiningTable.status in line with orders and bookings on a best-effort
basis. Each trigger reads what it needs and writes the new status in its own
commit; nothing reconciles competing triggers, so a manual override and an
automatic update can race. Callers invoke these after committing the
primary write (order or booking), which makes every paired update two
separate, non-atomic writes.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from dineflow.core.exceptions import NotFoundError
from dineflow.core.policy import OrderStatus
from dineflow.models.order import Order
from dineflow.models.restaurant import DiningTable, TableStatus

logger = logging.getLogger(__name__)


class TableOccupancyService:
    """Applies occupancy side effects of order and booking transitions."""

    def __init__(self, db: Session):
        self.db = db

    def get_table(self, business_id: int, table_number: int) -> Optional[DiningTable]:
        return self.db.query(DiningTable).filter(
            DiningTable.business_id == business_id,
            DiningTable.table_number == table_number,
        ).first()

    def _write_status(self, business_id: int, table_number: int, new_status: TableStatus) -> Optional[DiningTable]:
        table = self.get_table(business_id, table_number)
        if table is None:
            logger.warning(
                f"Occupancy update skipped: table {table_number} not found in business {business_id}"
            )
            return None
        old_status = table.status
        table.status = new_status.value
        self.db.commit()
        logger.info(
            f"Table {table_number} (business {business_id}): {old_status} -> {new_status.value}"
        )
        return table

    def mark_occupied(self, business_id: int, table_number: int) -> Optional[DiningTable]:
        """Order placed against the table."""
        return self._write_status(business_id, table_number, TableStatus.OCCUPIED)

    def mark_reserved(self, business_id: int, table_number: int) -> Optional[DiningTable]:
        """Booking created for the table."""
        return self._write_status(business_id, table_number, TableStatus.RESERVED)

    def release(self, business_id: int, table_number: int) -> Optional[DiningTable]:
        """Free the table unconditionally (booking resolution)."""
        return self._write_status(business_id, table_number, TableStatus.AVAILABLE)

    def active_order_count(self, business_id: int, table_number: int) -> int:
        return self.db.query(Order).filter(
            Order.business_id == business_id,
            Order.table_number == table_number,
            Order.status != OrderStatus.COMPLETED,
        ).count()

    def release_if_idle(self, business_id: int, table_number: int) -> bool:
        """Free the table when no order on it is still active.

        Scan-then-write without a lock: an order placed between the scan and
        the write leaves the table marked Available while occupied.
        Returns True when the table was released.
        """
        remaining = self.active_order_count(business_id, table_number)
        if remaining:
            logger.info(
                f"Table {table_number} (business {business_id}) kept occupied: "
                f"{remaining} active order(s) remain"
            )
            return False
        return self._write_status(business_id, table_number, TableStatus.AVAILABLE) is not None

    def set_status(self, business_id: int, table_id: int, new_status: TableStatus) -> DiningTable:
        """Manual override from the table board."""
        table = self.db.query(DiningTable).filter(
            DiningTable.business_id == business_id,
            DiningTable.id == table_id,
        ).first()
        if table is None:
            raise NotFoundError("Table not found")
        table.status = TableStatus(new_status).value
        self.db.commit()
        self.db.refresh(table)
        logger.info(f"Table {table.table_number} (business {business_id}) manually set to {table.status}")
        return table
