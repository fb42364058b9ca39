"""Menu catalogue for a business, with a cached full listing."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from dineflow.core.cache import CacheKeys, cache
from dineflow.core.exceptions import NotFoundError
from dineflow.core.policy import Permission, RBACPolicy
from dineflow.models.restaurant import MenuItem

logger = logging.getLogger(__name__)


def menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "price": item.price,
        "description": item.description,
        "image_url": item.image_url,
        "available": item.available,
    }


class MenuService:
    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _invalidate(self):
        cache.delete(CacheKeys.menu(self.business_id))

    def list_items(self, category: Optional[str] = None, available: Optional[bool] = None,
                   search: Optional[str] = None) -> List[dict]:
        """Menu sorted by category then name; filters apply to the cached listing."""
        key = CacheKeys.menu(self.business_id)
        items = cache.get(key)
        if items is None:
            rows = self.db.query(MenuItem).filter(
                MenuItem.business_id == self.business_id
            ).order_by(MenuItem.category, MenuItem.name, MenuItem.id).all()
            items = [menu_item_to_dict(row) for row in rows]
            cache.set(key, items)

        if category:
            items = [i for i in items if i["category"].lower() == category.lower()]
        if available is not None:
            items = [i for i in items if i["available"] == available]
        if search:
            needle = search.lower()
            items = [i for i in items if needle in i["name"].lower()]
        return items

    def categories(self) -> List[str]:
        return sorted({i["category"] for i in self.list_items()})

    def get_item(self, item_id: int) -> MenuItem:
        item = self.db.query(MenuItem).filter(
            MenuItem.business_id == self.business_id,
            MenuItem.id == item_id,
        ).first()
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    def create_item(self, actor, data) -> MenuItem:
        RBACPolicy.require(actor.role, Permission.MENU_EDIT)
        item = MenuItem(business_id=self.business_id, **data.model_dump())
        item.name = item.name.strip()
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        self._invalidate()
        logger.info(f"Menu item {item.id} '{item.name}' created at {item.price}")
        return item

    def update_item(self, actor, item_id: int, data) -> MenuItem:
        RBACPolicy.require(actor.role, Permission.MENU_EDIT)
        item = self.get_item(item_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in ("description", "image_url"):
                continue
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        self._invalidate()
        logger.info(f"Menu item {item.id} updated by {actor.email}")
        return item

    def toggle_availability(self, actor, item_id: int) -> MenuItem:
        RBACPolicy.require(actor.role, Permission.MENU_EDIT)
        item = self.get_item(item_id)
        item.available = not item.available
        self.db.commit()
        self.db.refresh(item)
        self._invalidate()
        logger.info(f"Menu item {item.id} availability -> {item.available}")
        return item

    def set_image(self, actor, item_id: int, image_url: str) -> MenuItem:
        RBACPolicy.require(actor.role, Permission.MENU_EDIT)
        item = self.get_item(item_id)
        item.image_url = image_url
        self.db.commit()
        self.db.refresh(item)
        self._invalidate()
        return item

    def delete_item(self, actor, item_id: int) -> None:
        RBACPolicy.require(actor.role, Permission.MENU_EDIT)
        item = self.get_item(item_id)
        self.db.delete(item)
        self.db.commit()
        self._invalidate()
        logger.info(f"Menu item {item_id} deleted by {actor.email}")
