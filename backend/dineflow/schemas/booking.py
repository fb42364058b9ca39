"""Booking schemas."""

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from dineflow.models.booking import BookingStatus


class BookingCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=3, max_length=50)
    date: dt.date
    time: dt.time
    party_size: int = Field(..., gt=0, le=100)
    table_number: int = Field(..., gt=0)

    @field_validator("customer_name", "phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingResponse(BaseModel):
    id: int
    customer_name: str
    phone: str
    date: dt.date = Field(validation_alias="booking_date")
    time: dt.time = Field(validation_alias="booking_time")
    party_size: int
    table_number: int
    status: BookingStatus
    created_by: str

    model_config = {"from_attributes": True}
