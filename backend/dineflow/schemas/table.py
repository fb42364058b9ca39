"""Dining table schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from dineflow.models.restaurant import TableStatus


class TableCreate(BaseModel):
    table_number: int = Field(..., gt=0)
    capacity: int = Field(default=4, gt=0, le=100)
    floor: str = Field(default="Ground Floor", max_length=50)


class TableUpdate(BaseModel):
    table_number: Optional[int] = Field(default=None, gt=0)
    capacity: Optional[int] = Field(default=None, gt=0, le=100)
    floor: Optional[str] = Field(default=None, min_length=1, max_length=50)


class TableStatusUpdate(BaseModel):
    status: TableStatus


class TableResponse(BaseModel):
    id: int
    table_number: int
    capacity: int
    status: TableStatus
    floor: str

    model_config = {"from_attributes": True}


class TableSummary(BaseModel):
    total: int
    available: int
    occupied: int
    reserved: int
    total_capacity: int
    occupancy_rate: float
