from typing import List, Optional, Tuple
from datetime import datetime
import io
import logging
import uuid

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update

from app.api.v1.rentals.service import RentalService
from app.core.billing_schedule import advance_payment_date, invoice_due_date
from app.core.exceptions import AppException, error_message
from app.core.invoice_pdf import render_invoice_pdf
from app.core.utils import round_money, start_of_today
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.enums import InvoiceStatus


def invoice_total(weekly_rate: float, tolls: float = 0.0, fines: float = 0.0, credits: float = 0.0) -> float:
    """(weekly rate + tolls + fines) - credits"""
    return round_money(weekly_rate + tolls + fines - credits)


class BillingService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def _load_invoice(self, invoice_id: uuid.UUID) -> Optional[Invoice]:
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .options(
                selectinload(Invoice.rental).selectinload(Rental.driver),
                selectinload(Invoice.rental).selectinload(Rental.vehicle),
                selectinload(Invoice.toll_charges),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _filtered_query(
        self,
        status: Optional[str] = None,
        rental_id: Optional[uuid.UUID] = None,
        driver_id: Optional[uuid.UUID] = None,
    ):
        query = select(Invoice)
        if status:
            query = query.where(Invoice.status == status)
        if rental_id:
            query = query.where(Invoice.rental_id == rental_id)
        if driver_id:
            query = query.join(Rental, Rental.id == Invoice.rental_id).where(Rental.driver_id == driver_id)
        return query.order_by(Invoice.due_date.desc())

    async def generate_invoice(
        self,
        rental_id: uuid.UUID,
        tolls: float = 0.0,
        fines: float = 0.0,
        credits: float = 0.0,
    ) -> dict:
        if min(tolls, fines, credits) < 0:
            AppException().raise_400("Tolls, fines and credits must be non-negative")

        rental = await self.db.get(Rental, rental_id, with_for_update=True, populate_existing=True)
        if not rental:
            AppException().raise_not_found("Rental", rental_id)

        invoice = Invoice(
            id=uuid.uuid4(),
            rental_id=rental.id,
            weekly_rate=rental.weekly_rate,
            tolls=round_money(tolls),
            fines=round_money(fines),
            credits=round_money(credits),
            amount=invoice_total(rental.weekly_rate, tolls, fines, credits),
            due_date=invoice_due_date(),
            status=InvoiceStatus.PENDING.value,
        )
        try:
            self.db.add(invoice)
            # Advance from the previous payment date so missed weeks accumulate
            rental.next_payment_date = advance_payment_date(rental.next_payment_date)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            self.logger.exception("Failed to generate invoice for rental %s", rental_id)
            raise

        self.logger.info(
            "Invoice %s generated for rental %s: amount=%.2f, next payment %s",
            invoice.id, rental.id, invoice.amount, rental.next_payment_date.isoformat(),
        )
        return {"message": "Invoice generated successfully", "invoice": await self._load_invoice(invoice.id)}

    async def run_billing_cycle(self) -> dict:
        """
        Invoice every rental due within the lookahead window.

        A rental that already has an invoice due on or after its next payment date is reported
        as already_exists, so re-running the cycle never double-bills a period.
        Failures are recorded per rental and never stop the batch.
        """
        rentals = await RentalService(self.db).get_rentals_due_for_invoicing()
        # Plain values: a rollback below expires every loaded instance
        due = [(rental.id, rental.next_payment_date) for rental in rentals]

        results = []
        for rental_id, next_payment_date in due:
            try:
                existing = await self.db.execute(
                    select(Invoice.id)
                    .where(Invoice.rental_id == rental_id, Invoice.due_date >= next_payment_date)
                    .limit(1)
                )
                existing_id = existing.scalar_one_or_none()
                if existing_id:
                    results.append({"rental_id": rental_id, "invoice_id": existing_id, "status": "already_exists"})
                    continue

                generated = await self.generate_invoice(rental_id)
                invoice = generated["invoice"]
                results.append({
                    "rental_id": rental_id,
                    "invoice_id": invoice.id,
                    "amount": invoice.amount,
                    "status": "generated",
                })
            except Exception as e:
                await self.db.rollback()
                self.logger.exception("Billing cycle failed for rental %s", rental_id)
                results.append({"rental_id": rental_id, "status": "error", "error": error_message(e)})

        summary = {
            "generated": sum(1 for r in results if r["status"] == "generated"),
            "already_exists": sum(1 for r in results if r["status"] == "already_exists"),
            "errors": sum(1 for r in results if r["status"] == "error"),
        }
        self.logger.info(
            "Billing cycle completed: %d due, %d generated, %d already invoiced, %d errors",
            len(due), summary["generated"], summary["already_exists"], summary["errors"],
        )
        return {"message": "Billing cycle completed", "results": results, **summary}

    async def mark_as_paid(self, invoice_id: uuid.UUID) -> dict:
        invoice = await self.db.get(Invoice, invoice_id, with_for_update=True, populate_existing=True)
        if not invoice:
            AppException().raise_not_found("Invoice", invoice_id)
        if invoice.status == InvoiceStatus.PAID.value:
            AppException().raise_conflict("Invoice is already paid")

        rental = await self.db.get(Rental, invoice.rental_id)
        driver = await self.db.get(Driver, rental.driver_id, with_for_update=True, populate_existing=True)

        try:
            invoice.status = InvoiceStatus.PAID.value
            invoice.paid_at = datetime.utcnow()
            driver.balance = round_money(driver.balance - invoice.amount)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            self.logger.exception("Failed to mark invoice %s as paid", invoice_id)
            raise

        self.logger.info(
            "Invoice %s paid (%.2f); driver %s balance now %.2f",
            invoice.id, invoice.amount, driver.id, driver.balance,
        )
        return {"message": "Invoice marked as paid", "invoice": await self._load_invoice(invoice.id)}

    async def check_overdue_invoices(self) -> int:
        """Flip PENDING invoices due before today (midnight) to OVERDUE. Returns how many changed."""
        result = await self.db.execute(
            update(Invoice)
            .where(
                Invoice.status == InvoiceStatus.PENDING.value,
                Invoice.due_date < start_of_today(),
            )
            .values(status=InvoiceStatus.OVERDUE.value)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        count = result.rowcount or 0
        self.logger.info("Overdue check: %d invoice(s) marked OVERDUE", count)
        return count

    async def get_invoices(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
        rental_id: Optional[uuid.UUID] = None,
        driver_id: Optional[uuid.UUID] = None,
    ) -> dict:
        query = self._filtered_query(status=status, rental_id=rental_id, driver_id=driver_id)
        query = query.options(
            selectinload(Invoice.rental).selectinload(Rental.driver),
            selectinload(Invoice.rental).selectinload(Rental.vehicle),
            selectinload(Invoice.toll_charges),
        ).offset(skip).limit(limit)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return {"message": "Invoices retrieved successfully", "invoices": list(result.scalars().all())}

    async def get_invoice_by_id(self, invoice_id: uuid.UUID) -> dict:
        invoice = await self._load_invoice(invoice_id)
        if not invoice:
            AppException().raise_not_found("Invoice", invoice_id)
        return {"message": "Invoice retrieved successfully", "invoice": invoice}

    async def render_invoice_pdf(self, invoice_id: uuid.UUID) -> Tuple[str, bytes]:
        """Filename and PDF bytes for a tax invoice."""
        invoice = await self._load_invoice(invoice_id)
        if not invoice:
            AppException().raise_not_found("Invoice", invoice_id)
        rental = invoice.rental
        content = render_invoice_pdf(invoice, rental, rental.driver, rental.vehicle)
        return f"invoice-{str(invoice.id)[:8]}.pdf", content

    async def export_invoices_to_excel(
        self,
        status: Optional[str] = None,
        rental_id: Optional[uuid.UUID] = None,
        driver_id: Optional[uuid.UUID] = None,
    ) -> bytes:
        """Export invoices to Excel (.xlsx). Same filters as get_invoices (no pagination)."""
        query = self._filtered_query(status=status, rental_id=rental_id, driver_id=driver_id).options(
            selectinload(Invoice.rental).selectinload(Rental.driver),
            selectinload(Invoice.rental).selectinload(Rental.vehicle),
        )
        invoices: List[Invoice] = list((await self.db.execute(query)).scalars().all())

        wb = Workbook()
        ws = wb.active
        ws.title = "Invoices"

        headers = [
            "Invoice ID",
            "Rental ID",
            "Driver",
            "Driver Email",
            "Vehicle Plate",
            "Weekly Rate",
            "Tolls",
            "Fines",
            "Credits",
            "Amount",
            "Due Date",
            "Status",
            "Paid At",
        ]
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center", wrap_text=True)

        for row_idx, invoice in enumerate(invoices, start=2):
            rental = invoice.rental
            values = [
                str(invoice.id),
                str(invoice.rental_id),
                rental.driver.name,
                rental.driver.email,
                rental.vehicle.plate,
                invoice.weekly_rate,
                invoice.tolls,
                invoice.fines,
                invoice.credits,
                invoice.amount,
                invoice.due_date.strftime("%Y-%m-%d"),
                invoice.status,
                invoice.paid_at.strftime("%Y-%m-%d %H:%M:%S") if invoice.paid_at else "",
            ]
            for col, value in enumerate(values, start=1):
                ws.cell(row=row_idx, column=col, value=value)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer.getvalue()
