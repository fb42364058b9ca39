"""Menu item schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(default="Main Course", min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    available: bool = True


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    available: Optional[bool] = None


class MenuItemResponse(BaseModel):
    id: int
    name: str
    category: str
    price: Decimal
    description: Optional[str] = None
    image_url: Optional[str] = None
    available: bool

    model_config = {"from_attributes": True}
