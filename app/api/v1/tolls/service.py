"""
Toll statement import.

Statements are CSV files with Plate, Date and Amount columns and an optional Location column
(header names are case-insensitive). Each charge is stored against the plate; when the vehicle's
ACTIVE rental has a PENDING invoice the charge is linked to it and added to its tolls and amount.
"""
from typing import List, Optional
from datetime import datetime
import csv
import io
import logging
import math
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.exceptions import AppException, error_message
from app.core.utils import parse_flexible_date, round_money
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.toll_charge import TollCharge
from app.models.vehicle import Vehicle
from app.models.enums import InvoiceStatus, RentalStatus

REQUIRED_COLUMNS = ("plate", "date", "amount")


class TollService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def parse_csv(content: bytes) -> List[dict]:
        """Rows keyed by lower-cased, stripped header names."""
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            AppException().raise_400("Toll file must be UTF-8 encoded CSV")
        reader = csv.DictReader(io.StringIO(text))
        if not reader.fieldnames:
            AppException().raise_400("Toll file is empty")
        headers = {name.strip().lower() for name in reader.fieldnames if name}
        missing = [column for column in REQUIRED_COLUMNS if column not in headers]
        if missing:
            AppException().raise_400(f"Toll file is missing column(s): {', '.join(missing)}")

        rows = []
        for raw in reader:
            row = {
                (key or "").strip().lower(): (value or "").strip()
                for key, value in raw.items()
                if key is not None
            }
            if any(row.values()):
                rows.append(row)
        return rows

    async def _pending_invoice_for_vehicle(self, vehicle_id: uuid.UUID) -> Optional[Invoice]:
        result = await self.db.execute(
            select(Invoice)
            .join(Rental, Rental.id == Invoice.rental_id)
            .where(
                Rental.vehicle_id == vehicle_id,
                Rental.status == RentalStatus.ACTIVE.value,
                Invoice.status == InvoiceStatus.PENDING.value,
            )
            .order_by(Invoice.due_date.desc())
            .limit(1)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def import_tolls(self, content: bytes) -> dict:
        rows = self.parse_csv(content)
        results = []
        errors = []

        # Data rows start on line 2, after the header
        for row_number, record in enumerate(rows, start=2):
            plate = record.get("plate", "")
            toll_date = parse_flexible_date(record.get("date", ""))
            try:
                amount = float(record.get("amount", ""))
            except ValueError:
                amount = None

            if not plate or toll_date is None or amount is None or not math.isfinite(amount) or amount < 0:
                errors.append({"row": row_number, "record": record, "error": "Invalid data format"})
                continue

            try:
                vehicle_result = await self.db.execute(select(Vehicle.id).where(Vehicle.plate == plate))
                vehicle_id = vehicle_result.scalar_one_or_none()
                if vehicle_id is None:
                    errors.append({"row": row_number, "record": record, "error": "Vehicle not found"})
                    continue

                invoice = await self._pending_invoice_for_vehicle(vehicle_id)
                toll = TollCharge(
                    id=uuid.uuid4(),
                    plate=plate,
                    date=toll_date,
                    amount=round_money(amount),
                    location=record.get("location") or None,
                    invoice_id=invoice.id if invoice else None,
                )
                self.db.add(toll)
                if invoice:
                    invoice.tolls = round_money(invoice.tolls + amount)
                    invoice.amount = round_money(invoice.amount + amount)
                await self.db.commit()

                results.append({
                    "row": row_number,
                    "plate": plate,
                    "date": toll_date,
                    "amount": toll.amount,
                    "toll_charge_id": toll.id,
                    "invoice_id": toll.invoice_id,
                    "linked_to_invoice": invoice is not None,
                })
            except Exception as e:
                await self.db.rollback()
                self.logger.exception("Toll import failed on row %d", row_number)
                errors.append({"row": row_number, "record": record, "error": error_message(e)})

        self.logger.info("Toll upload processed: %d stored, %d errors", len(results), len(errors))
        return {
            "message": "Toll upload processed",
            "processed": len(results),
            "errors": len(errors),
            "results": results,
            "error_details": errors,
        }

    async def get_tolls(
        self,
        plate: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[TollCharge]:
        query = select(TollCharge)
        if plate:
            query = query.where(TollCharge.plate == plate)
        if start_date:
            query = query.where(TollCharge.date >= start_date)
        if end_date:
            query = query.where(TollCharge.date <= end_date)
        query = query.order_by(TollCharge.date.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
