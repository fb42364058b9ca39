"""Business setup schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    business_type: str = Field(..., min_length=1, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    business_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)


class BusinessResponse(BaseModel):
    id: int
    name: str
    business_type: str
    address: Optional[str] = None
    phone: Optional[str] = None
    owner_id: Optional[int] = None

    model_config = {"from_attributes": True}
