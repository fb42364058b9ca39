"""Billing routes: generation, receipts and deletion."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import Response

from dineflow.core.policy import Permission
from dineflow.core.rbac import BusinessId, CurrentUser, TokenData, require_permission
from dineflow.core.responses import list_response
from dineflow.db.session import DbSession
from dineflow.schemas.bill import BillCreate, BillResponse
from dineflow.services import account_service, projections
from dineflow.services.billing_service import BillingService
from dineflow.services.realtime_service import publish_change
from dineflow.services.receipt_service import generate_receipt_pdf, receipt_filename
from dineflow.api.routes.orders import serialize_orders

router = APIRouter()

BillViewer = Annotated[TokenData, Depends(require_permission(Permission.BILL_VIEW))]


@router.get("")
def list_bills(business_id: BusinessId, current_user: BillViewer, db: DbSession):
    bills = BillingService(db, business_id).list_bills()
    return list_response([BillResponse.model_validate(b).model_dump(mode="json") for b in bills])


@router.get("/billable-orders")
def billable_orders(business_id: BusinessId, current_user: BillViewer, db: DbSession):
    """Completed orders that have not been billed yet."""
    return list_response(serialize_orders(BillingService(db, business_id).billable_orders()))


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
def generate_bill(data: BillCreate, business_id: BusinessId, current_user: CurrentUser,
                  db: DbSession, background_tasks: BackgroundTasks):
    bill = BillingService(db, business_id).generate_bill(current_user, data.order_id, data.tax_rate)
    background_tasks.add_task(publish_change, business_id, "bills", "created", bill.id)
    return bill


@router.get("/{bill_id}", response_model=BillResponse)
def get_bill(bill_id: int, business_id: BusinessId, current_user: BillViewer, db: DbSession):
    return BillingService(db, business_id).get_bill(bill_id)


@router.get("/{bill_id}/receipt")
def download_receipt(bill_id: int, business_id: BusinessId, current_user: BillViewer,
                     db: DbSession, tz: Optional[str] = None):
    """Receipt PDF for printing."""
    bill = BillingService(db, business_id).get_bill(bill_id)
    business = account_service.get_business(db, business_id)
    pdf_bytes = generate_receipt_pdf(bill, business, projections.resolve_timezone(tz))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{receipt_filename(bill)}"'},
    )


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(bill_id: int, business_id: BusinessId, current_user: CurrentUser,
                db: DbSession, background_tasks: BackgroundTasks):
    BillingService(db, business_id).delete_bill(current_user, bill_id)
    background_tasks.add_task(publish_change, business_id, "bills", "deleted", bill_id)
