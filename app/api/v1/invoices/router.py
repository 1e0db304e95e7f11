from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.invoices.schemas import (
    BillingCycleResponse,
    GenerateInvoiceRequest,
    InvoiceDetailResponse,
    OverdueCheckResponse,
)
from app.api.v1.invoices.service import BillingService
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get(
    "/",
    response_model=List[InvoiceDetailResponse],
    summary="Get invoices",
    description="List invoices, newest due date first. Filter by status, rental or driver. Admin only.",
)
async def get_invoices(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    status: Optional[str] = Query(None, description="Filter by status (PENDING/PAID/OVERDUE)"),
    rental_id: Optional[UUID] = Query(None, description="Filter by rental"),
    driver_id: Optional[UUID] = Query(None, description="Filter by driver"),
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    result = await service.get_invoices(
        skip=skip, limit=limit, status=status, rental_id=rental_id, driver_id=driver_id
    )
    return [InvoiceDetailResponse.model_validate(invoice) for invoice in result["invoices"]]


@router.get(
    "/export",
    summary="Export invoices to Excel",
    description="Download invoices as an Excel (.xlsx) file. Same filters as the list. Admin only.",
)
async def export_invoices_excel(
    status: Optional[str] = Query(None, description="Filter by status (PENDING/PAID/OVERDUE)"),
    rental_id: Optional[UUID] = Query(None, description="Filter by rental"),
    driver_id: Optional[UUID] = Query(None, description="Filter by driver"),
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    content = await service.export_invoices_to_excel(status=status, rental_id=rental_id, driver_id=driver_id)
    filename = "invoices_export.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/generate",
    response_model=InvoiceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate invoice",
    description=(
        "Invoice a rental: amount = weekly rate + tolls + fines - credits, due in 7 days. "
        "Advances the rental's next payment date by one week. Admin only."
    ),
)
async def generate_invoice(
    data: GenerateInvoiceRequest,
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    result = await service.generate_invoice(
        data.rental_id, tolls=data.tolls, fines=data.fines, credits=data.credits
    )
    return InvoiceDetailResponse.model_validate(result["invoice"])


@router.post(
    "/run-billing-cycle",
    response_model=BillingCycleResponse,
    summary="Run billing cycle",
    description="Invoice every ACTIVE rental due within three days. Safe to re-run. Admin only.",
)
async def run_billing_cycle(db: AsyncSession = Depends(get_db)):
    service = BillingService(db)
    return await service.run_billing_cycle()


@router.post(
    "/check-overdue",
    response_model=OverdueCheckResponse,
    summary="Check overdue invoices",
    description="Mark PENDING invoices whose due date is before today as OVERDUE. Admin only.",
)
async def check_overdue(db: AsyncSession = Depends(get_db)):
    service = BillingService(db)
    count = await service.check_overdue_invoices()
    return {"message": "Overdue check completed", "count": count}


@router.get(
    "/{invoice_id}/pdf",
    summary="Download invoice PDF",
    description="Tax invoice as a PDF attachment. Admin only.",
)
async def download_invoice_pdf(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    filename, content = await service.render_invoice_pdf(invoice_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/{invoice_id}/pay",
    response_model=InvoiceDetailResponse,
    summary="Mark invoice as paid",
    description="Set the invoice PAID and deduct its amount from the driver's balance. Admin only.",
)
async def mark_as_paid(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    result = await service.mark_as_paid(invoice_id)
    return InvoiceDetailResponse.model_validate(result["invoice"])


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailResponse,
    summary="Get invoice by ID",
    description="Retrieve an invoice with its rental, driver, vehicle and toll charges. Admin only.",
)
async def get_invoice_by_id(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = BillingService(db)
    result = await service.get_invoice_by_id(invoice_id)
    return InvoiceDetailResponse.model_validate(result["invoice"])
