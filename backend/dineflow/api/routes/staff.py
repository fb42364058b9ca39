"""Staff roster routes."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.staff import StaffCreate, StaffResponse
from dineflow.services.realtime_service import publish_change
from dineflow.services.staff_service import StaffService

router = APIRouter()

StaffManager = Annotated[TokenData, Depends(require_permission(Permission.STAFF_MANAGE))]


@router.get("")
def list_staff(business_id: BusinessId, current_user: StaffManager, db: DbSession):
    members = StaffService(db, business_id).list_staff()
    return list_response([StaffResponse.model_validate(m).model_dump(mode="json") for m in members])


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def add_staff(data: StaffCreate, business_id: BusinessId, current_user: StaffManager,
              db: DbSession, background_tasks: BackgroundTasks):
    member = StaffService(db, business_id).add_staff(current_user, data.email, data.name, data.role)
    background_tasks.add_task(publish_change, business_id, "users", "created", member.id)
    return member


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_staff(user_id: int, business_id: BusinessId, current_user: StaffManager,
                 db: DbSession, background_tasks: BackgroundTasks):
    StaffService(db, business_id).remove_staff(current_user, user_id)
    background_tasks.add_task(publish_change, business_id, "users", "deleted", user_id)
