"""Business (tenant) setup routes."""

from fastapi import APIRouter, BackgroundTasks, status

from dineflow.core.rbac import BusinessId, CurrentUser
from dineflow.db.session import DbSession
from dineflow.schemas.business import BusinessCreate, BusinessResponse, BusinessUpdate
from dineflow.services import account_service
from dineflow.services.realtime_service import publish_change

router = APIRouter()


@router.post("/setup", response_model=BusinessResponse, status_code=status.HTTP_201_CREATED)
def setup_business(data: BusinessCreate, current_user: CurrentUser, db: DbSession):
    return account_service.setup_business(db, current_user, data)


@router.get("", response_model=BusinessResponse)
def get_business(business_id: BusinessId, db: DbSession):
    return account_service.get_business(db, business_id)


@router.put("", response_model=BusinessResponse)
def update_business(data: BusinessUpdate, business_id: BusinessId, current_user: CurrentUser,
                    db: DbSession, background_tasks: BackgroundTasks):
    business = account_service.update_business(db, current_user, business_id, data)
    background_tasks.add_task(publish_change, business_id, "businesses", "updated", business.id)
    return business
