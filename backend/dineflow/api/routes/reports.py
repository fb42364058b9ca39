"""Sales reports and order history."""

import datetime as dt
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.report import DailyReport, MonthlyReport
from dineflow.services import account_service, projections
from dineflow.services.report_export_service import generate_monthly_xlsx
from dineflow.api.routes.orders import serialize_orders

router = APIRouter()

ReportViewer = Annotated[TokenData, Depends(require_permission(Permission.REPORTS_VIEW))]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _today(tz) -> dt.date:
    return dt.datetime.now(dt.timezone.utc).astimezone(tz).date()


def _month_report(db, business_id: int, year: Optional[int], month: Optional[int], tz_name: Optional[str]):
    tz = projections.resolve_timezone(tz_name)
    today = _today(tz)
    return projections.monthly_sales(db, business_id, year or today.year, month or today.month, tz)


@router.get("/daily", response_model=DailyReport)
def daily_report(business_id: BusinessId, current_user: ReportViewer, db: DbSession,
                 date: Optional[dt.date] = None, tz: Optional[str] = None):
    """Bills and totals for one calendar day (today by default)."""
    zone = projections.resolve_timezone(tz)
    data = projections.daily_sales(db, business_id, date or _today(zone), zone)
    return DailyReport.model_validate(data, from_attributes=True)


@router.get("/monthly", response_model=MonthlyReport)
def monthly_report(business_id: BusinessId, current_user: ReportViewer, db: DbSession,
                   year: Optional[int] = None, month: Optional[int] = None, tz: Optional[str] = None):
    """Per-day sales across a month (current month by default)."""
    return _month_report(db, business_id, year, month, tz)


@router.get("/monthly/export")
def export_monthly_report(business_id: BusinessId, current_user: ReportViewer, db: DbSession,
                          year: Optional[int] = None, month: Optional[int] = None,
                          tz: Optional[str] = None):
    report = _month_report(db, business_id, year, month, tz)
    business = account_service.get_business(db, business_id)
    content = generate_monthly_xlsx(report, business["name"])
    filename = f"sales_{report['year']}_{report['month']:02d}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/orders")
def order_history(business_id: BusinessId, current_user: ReportViewer, db: DbSession,
                  date: Optional[dt.date] = None, table_number: Optional[int] = None,
                  tz: Optional[str] = None):
    """Order history filtered by day and/or table, newest first."""
    zone = projections.resolve_timezone(tz)
    orders = projections.order_history(db, business_id, day=date, table_number=table_number, tz=zone)
    return list_response(serialize_orders(orders))
