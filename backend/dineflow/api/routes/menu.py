"""Menu routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.menu import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from dineflow.services.menu_service import MenuService
from dineflow.services.realtime_service import publish_change
from dineflow.services.storage_service import ImageStorage, get_image_storage

router = APIRouter()

MenuViewer = Annotated[TokenData, Depends(require_permission(Permission.MENU_VIEW))]
MenuEditor = Annotated[TokenData, Depends(require_permission(Permission.MENU_EDIT))]
Storage = Annotated[ImageStorage, Depends(get_image_storage)]


@router.get("")
def list_menu(business_id: BusinessId, current_user: MenuViewer, db: DbSession,
              category: Optional[str] = None, available: Optional[bool] = None,
              search: Optional[str] = None):
    items = MenuService(db, business_id).list_items(category=category, available=available, search=search)
    return list_response([MenuItemResponse.model_validate(i).model_dump(mode="json") for i in items])


@router.get("/categories")
def list_categories(business_id: BusinessId, current_user: MenuViewer, db: DbSession):
    return {"categories": MenuService(db, business_id).categories()}


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(data: MenuItemCreate, business_id: BusinessId, current_user: MenuEditor,
                     db: DbSession, background_tasks: BackgroundTasks):
    item = MenuService(db, business_id).create_item(current_user, data)
    background_tasks.add_task(publish_change, business_id, "menu", "created", item.id)
    return item


@router.put("/{item_id}", response_model=MenuItemResponse)
def update_menu_item(item_id: int, data: MenuItemUpdate, business_id: BusinessId,
                     current_user: MenuEditor, db: DbSession, background_tasks: BackgroundTasks):
    item = MenuService(db, business_id).update_item(current_user, item_id, data)
    background_tasks.add_task(publish_change, business_id, "menu", "updated", item.id)
    return item


@router.post("/{item_id}/toggle", response_model=MenuItemResponse)
def toggle_menu_item(item_id: int, business_id: BusinessId, current_user: MenuEditor,
                     db: DbSession, background_tasks: BackgroundTasks):
    """Flip availability. Unavailable items cannot be ordered."""
    item = MenuService(db, business_id).toggle_availability(current_user, item_id)
    background_tasks.add_task(publish_change, business_id, "menu", "updated", item.id)
    return item


@router.post("/{item_id}/image", response_model=MenuItemResponse)
async def upload_menu_image(item_id: int, business_id: BusinessId, current_user: MenuEditor,
                            db: DbSession, storage: Storage, background_tasks: BackgroundTasks,
                            file: UploadFile = File(...)):
    service = MenuService(db, business_id)
    service.get_item(item_id)
    content = await file.read()
    url = storage.save_image(business_id, file.filename or "", content)
    item = service.set_image(current_user, item_id, url)
    background_tasks.add_task(publish_change, business_id, "menu", "updated", item.id)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(item_id: int, business_id: BusinessId, current_user: MenuEditor,
                     db: DbSession, background_tasks: BackgroundTasks):
    MenuService(db, business_id).delete_item(current_user, item_id)
    background_tasks.add_task(publish_change, business_id, "menu", "deleted", item_id)
