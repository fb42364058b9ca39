"""Staff roster schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from dineflow.core.policy import UserRole
from dineflow.models.user import StaffStatus


class StaffCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole


class StaffResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: UserRole
    status: StaffStatus
    employee_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
