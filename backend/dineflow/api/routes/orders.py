"""Order routes: placement, lookup and status advancement."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from dineflow.core.policy import OrderStatus, Permission
from dineflow.core.rbac import BusinessId, CurrentUser, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.order import OrderCreate, OrderResponse
from dineflow.services.order_workflow import OrderWorkflowService
from dineflow.services.realtime_service import publish_change

router = APIRouter()

OrderViewer = Annotated[TokenData, Depends(require_permission(Permission.ORDER_VIEW))]


def serialize_orders(orders) -> list:
    return [OrderResponse.model_validate(o).model_dump(mode="json") for o in orders]


@router.get("")
def list_orders(business_id: BusinessId, current_user: OrderViewer, db: DbSession,
                status: Optional[OrderStatus] = None, table_number: Optional[int] = None):
    orders = OrderWorkflowService(db, business_id).list_orders(status=status, table_number=table_number)
    return list_response(serialize_orders(orders))


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, business_id: BusinessId, current_user: OrderViewer, db: DbSession):
    return OrderWorkflowService(db, business_id).get_order(order_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(data: OrderCreate, business_id: BusinessId, current_user: CurrentUser,
                 db: DbSession, background_tasks: BackgroundTasks):
    """Place a cart against a table; the table becomes Occupied."""
    order = OrderWorkflowService(db, business_id).create_order(current_user, data.table_number, data.items)
    background_tasks.add_task(publish_change, business_id, "orders", "created", order.id)
    background_tasks.add_task(publish_change, business_id, "tables", "updated", order.table_number)
    return order


@router.post("/{order_id}/advance", response_model=OrderResponse)
def advance_order(order_id: int, business_id: BusinessId, current_user: CurrentUser,
                  db: DbSession, background_tasks: BackgroundTasks):
    """Move the order to its next status if the caller's role allows it."""
    order = OrderWorkflowService(db, business_id).advance(current_user, order_id)
    background_tasks.add_task(publish_change, business_id, "orders", "updated", order.id)
    if order.status == OrderStatus.COMPLETED:
        background_tasks.add_task(publish_change, business_id, "tables", "updated", order.table_number)
    return order
