"""Report and dashboard schemas."""

import datetime as dt
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from dineflow.schemas.bill import BillResponse
from dineflow.schemas.order import OrderResponse


class DailyReport(BaseModel):
    date: dt.date
    total_sales: Decimal
    total_tax: Decimal
    bill_count: int
    bills: List[BillResponse]


class DaySales(BaseModel):
    date: dt.date
    total_sales: Decimal
    bill_count: int


class MonthlyReport(BaseModel):
    year: int
    month: int
    days: List[DaySales]
    total_sales: Decimal
    bill_count: int


class ManagerDashboard(BaseModel):
    view: str = "manager"
    pending_orders: List[OrderResponse]
    active_orders: List[OrderResponse]
    occupied_tables: int
    today_sales: Decimal
    today_bill_count: int


class WaiterDashboard(BaseModel):
    view: str = "waiter"
    active_orders: List[OrderResponse]
    my_orders: List[OrderResponse]
    ready_orders: List[OrderResponse]
    served_orders: List[OrderResponse]
    occupied_tables: int


class KitchenDashboard(BaseModel):
    view: str = "kitchen"
    queue: List[OrderResponse]
    confirmed_count: int
    preparing_count: int
