"""Order schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from dineflow.core.policy import OrderStatus, UserRole


class CartItem(BaseModel):
    menu_item_id: int
    quantity: int = Field(default=1, gt=0, le=999)


class OrderCreate(BaseModel):
    """Cart submission. Emptiness and table selection are checked by the workflow."""

    table_number: Optional[int] = Field(default=None, gt=0)
    items: List[CartItem] = []


class OrderLine(BaseModel):
    menu_item_id: int
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal


class TransitionStamp(BaseModel):
    at: datetime
    by: str


class OrderResponse(BaseModel):
    id: int
    table_number: int
    items: List[OrderLine]
    total_amount: Decimal
    status: OrderStatus
    created_by: str
    created_by_role: UserRole
    transitions: Dict[str, TransitionStamp]
    created_at: datetime

    model_config = {"from_attributes": True}
