"""Dining table routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.models.restaurant import TableStatus
from dineflow.schemas.table import (
    TableCreate, TableResponse, TableStatusUpdate, TableSummary, TableUpdate,
)
from dineflow.services import projections
from dineflow.services.occupancy_service import TableOccupancyService
from dineflow.services.realtime_service import publish_change
from dineflow.services.table_service import TableService

router = APIRouter()

TableViewer = Annotated[TokenData, Depends(require_permission(Permission.TABLE_VIEW))]
TableManager = Annotated[TokenData, Depends(require_permission(Permission.TABLE_MANAGE))]
TableStatusEditor = Annotated[TokenData, Depends(require_permission(Permission.TABLE_STATUS))]


@router.get("")
def list_tables(business_id: BusinessId, current_user: TableViewer, db: DbSession,
                status: Optional[TableStatus] = None, floor: Optional[str] = None):
    tables = TableService(db, business_id).list_tables(status=status, floor=floor)
    return list_response([TableResponse.model_validate(t).model_dump(mode="json") for t in tables])


@router.get("/summary", response_model=TableSummary)
def table_summary(business_id: BusinessId, current_user: TableViewer, db: DbSession):
    return projections.table_summary(db, business_id)


@router.get("/floors")
def list_floors(business_id: BusinessId, current_user: TableViewer, db: DbSession):
    return {"floors": TableService(db, business_id).floors()}


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(data: TableCreate, business_id: BusinessId, current_user: TableManager,
                 db: DbSession, background_tasks: BackgroundTasks):
    table = TableService(db, business_id).create_table(current_user, data)
    background_tasks.add_task(publish_change, business_id, "tables", "created", table.id)
    return table


@router.put("/{table_id}", response_model=TableResponse)
def update_table(table_id: int, data: TableUpdate, business_id: BusinessId,
                 current_user: TableManager, db: DbSession, background_tasks: BackgroundTasks):
    table = TableService(db, business_id).update_table(current_user, table_id, data)
    background_tasks.add_task(publish_change, business_id, "tables", "updated", table.id)
    return table


@router.patch("/{table_id}/status", response_model=TableResponse)
def set_table_status(table_id: int, data: TableStatusUpdate, business_id: BusinessId,
                     current_user: TableStatusEditor, db: DbSession,
                     background_tasks: BackgroundTasks):
    """Manual status override; not reconciled with order or booking triggers."""
    table = TableOccupancyService(db).set_status(business_id, table_id, data.status)
    background_tasks.add_task(publish_change, business_id, "tables", "updated", table.id)
    return table


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(table_id: int, business_id: BusinessId, current_user: TableManager,
                 db: DbSession, background_tasks: BackgroundTasks):
    TableService(db, business_id).delete_table(current_user, table_id)
    background_tasks.add_task(publish_change, business_id, "tables", "deleted", table_id)
