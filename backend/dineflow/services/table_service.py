"""Dining table board: CRUD for a business's tables."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from dineflow.core.exceptions import ConflictError, NotFoundError
from dineflow.core.policy import Permission, RBACPolicy
from dineflow.models.restaurant import DiningTable, TableStatus

logger = logging.getLogger(__name__)


class TableService:
    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _tables(self):
        return self.db.query(DiningTable).filter(DiningTable.business_id == self.business_id)

    def list_tables(self, status: Optional[TableStatus] = None, floor: Optional[str] = None) -> List[DiningTable]:
        query = self._tables()
        if status is not None:
            query = query.filter(DiningTable.status == TableStatus(status).value)
        if floor:
            query = query.filter(DiningTable.floor == floor)
        return query.order_by(DiningTable.table_number).all()

    def floors(self) -> List[str]:
        rows = self._tables().with_entities(DiningTable.floor).distinct().all()
        return sorted(row[0] for row in rows)

    def get_table(self, table_id: int) -> DiningTable:
        table = self._tables().filter(DiningTable.id == table_id).first()
        if table is None:
            raise NotFoundError("Table not found")
        return table

    def _ensure_number_free(self, table_number: int, exclude_id: Optional[int] = None):
        query = self._tables().filter(DiningTable.table_number == table_number)
        if exclude_id is not None:
            query = query.filter(DiningTable.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Table {table_number} already exists")

    def create_table(self, actor, data) -> DiningTable:
        RBACPolicy.require(actor.role, Permission.TABLE_MANAGE)
        self._ensure_number_free(data.table_number)
        table = DiningTable(
            business_id=self.business_id,
            table_number=data.table_number,
            capacity=data.capacity,
            floor=data.floor.strip() or "Ground Floor",
            status=TableStatus.AVAILABLE.value,
        )
        self.db.add(table)
        self.db.commit()
        self.db.refresh(table)
        logger.info(f"Table {table.table_number} created (capacity {table.capacity}, {table.floor})")
        return table

    def update_table(self, actor, table_id: int, data) -> DiningTable:
        RBACPolicy.require(actor.role, Permission.TABLE_MANAGE)
        table = self.get_table(table_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "table_number" in changes and changes["table_number"] != table.table_number:
            self._ensure_number_free(changes["table_number"], exclude_id=table.id)
        for field, value in changes.items():
            setattr(table, field, value)
        self.db.commit()
        self.db.refresh(table)
        logger.info(f"Table {table.table_number} updated by {actor.email}")
        return table

    def delete_table(self, actor, table_id: int) -> None:
        RBACPolicy.require(actor.role, Permission.TABLE_MANAGE)
        table = self.get_table(table_id)
        self.db.delete(table)
        self.db.commit()
        logger.info(f"Table {table.table_number} deleted by {actor.email}")
