"""Kitchen queue and role dashboards."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from dineflow.core.policy import DashboardView, Permission, RBACPolicy
from dineflow.core.rbac import BusinessId, CurrentUser, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.report import KitchenDashboard, ManagerDashboard, WaiterDashboard
from dineflow.services import projections
from dineflow.api.routes.orders import serialize_orders

router = APIRouter()

KitchenViewer = Annotated[TokenData, Depends(require_permission(Permission.KITCHEN_VIEW))]


@router.get("/kitchen/queue")
def kitchen_queue(business_id: BusinessId, current_user: KitchenViewer, db: DbSession):
    """Confirmed and Preparing orders, oldest first."""
    return list_response(serialize_orders(projections.kitchen_queue(db, business_id)))


@router.get("/dashboard")
def dashboard(business_id: BusinessId, current_user: CurrentUser, db: DbSession,
              tz: Optional[str] = None):
    """Dashboard chosen by the caller's role."""
    view = RBACPolicy.dashboard_for(current_user.role)
    if view == DashboardView.KITCHEN:
        data = projections.kitchen_dashboard(db, business_id)
        return KitchenDashboard.model_validate(data, from_attributes=True)
    if view == DashboardView.WAITER:
        data = projections.waiter_dashboard(db, business_id, current_user.email)
        return WaiterDashboard.model_validate(data, from_attributes=True)
    data = projections.manager_dashboard(db, business_id, projections.resolve_timezone(tz))
    return ManagerDashboard.model_validate(data, from_attributes=True)
