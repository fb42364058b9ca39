"""Bill schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from dineflow.schemas.order import OrderLine


class BillCreate(BaseModel):
    order_id: int
    tax_rate: Optional[int] = Field(default=None, ge=0, le=100)


class BillResponse(BaseModel):
    id: int
    bill_number: str
    order_id: int
    table_number: int
    items: List[OrderLine]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    generated_by: str
    created_at: datetime

    model_config = {"from_attributes": True}
