"""
Driver app: today's shift, pre-shift condition report, vehicle return request and accident reports.
Every operation acts on the driver's ACTIVE rental.
"""
from typing import Optional
from datetime import datetime
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select

from app.api.v1.driver_dashboard.schemas import AccidentReportRequest, StartShiftRequest
from app.core.exceptions import AppException
from app.core.utils import start_of_today, to_naive_utc
from app.models.accident_report import AccidentReport
from app.models.condition_report import ConditionReport
from app.models.driver import Driver
from app.models.rental import Rental
from app.models.shift import Shift
from app.models.enums import RentalStatus, ShiftStatus

RETURN_MESSAGE = "Return request submitted. Please return the vehicle to the depot."


def vehicle_image_url(make: str, model: str) -> str:
    return f"/images/vehicles/{make.lower()}-{model.lower().replace(' ', '-')}.jpg"


class DriverDashboardService:
    def __init__(self, db: AsyncSession, driver: Driver):
        self.db = db
        self.driver = driver
        self.logger = logging.getLogger(__name__)

    async def _active_rental(self) -> Optional[Rental]:
        result = await self.db.execute(
            select(Rental)
            .where(Rental.driver_id == self.driver.id, Rental.status == RentalStatus.ACTIVE.value)
            .options(selectinload(Rental.vehicle))
        )
        return result.scalars().first()

    async def _require_active_rental(self) -> Rental:
        rental = await self._active_rental()
        if not rental:
            AppException().raise_404("No active rental")
        return rental

    async def _get_shift(self, shift_id: uuid.UUID) -> Shift:
        shift = await self.db.get(Shift, shift_id, with_for_update=True, populate_existing=True)
        if not shift or shift.driver_id != self.driver.id:
            AppException().raise_not_found("Shift", shift_id)
        return shift

    async def _todays_shift(self, rental: Rental) -> Optional[Shift]:
        result = await self.db.execute(
            select(Shift)
            .where(
                Shift.rental_id == rental.id,
                Shift.driver_id == self.driver.id,
                Shift.created_at >= start_of_today(),
            )
            .options(selectinload(Shift.condition_report))
            .order_by(Shift.created_at.desc())
        )
        return result.scalars().first()

    async def _open_shift(self, rental: Rental) -> Shift:
        shift = Shift(
            id=uuid.uuid4(),
            rental_id=rental.id,
            driver_id=self.driver.id,
            status=ShiftStatus.NOT_STARTED.value,
            created_at=datetime.utcnow(),
        )
        self.db.add(shift)
        await self.db.commit()
        self.logger.info("Opened shift %s for driver %s", shift.id, self.driver.id)
        return shift

    async def get_active_rental(self) -> dict:
        """The driver's current vehicle and today's shift, opening the shift if there is none yet."""
        rental = await self._active_rental()
        if not rental:
            return {"has_active_rental": False}

        condition_report = None
        shift = await self._todays_shift(rental)
        if shift:
            condition_report = shift.condition_report
        else:
            shift = await self._open_shift(rental)
        vehicle = rental.vehicle
        return {
            "has_active_rental": True,
            "rental_id": rental.id,
            "vehicle": {
                "id": vehicle.id,
                "make": vehicle.make,
                "model": vehicle.model,
                "plate": vehicle.plate,
                "vin": vehicle.vin,
                "color": vehicle.color,
                "year": vehicle.year,
                "image_url": vehicle_image_url(vehicle.make, vehicle.model),
            },
            "documents": {
                "rego_url": f"/api/documents/rego/{vehicle.id}",
                "ctp_url": f"/api/documents/ctp/{vehicle.id}",
                "pink_slip_url": f"/api/documents/pink-slip/{vehicle.id}",
                "rental_agreement_url": f"/api/documents/rental-agreement/{rental.id}",
            },
            "shift_id": shift.id,
            "shift_status": shift.status,
            "started_at": shift.started_at,
            "last_condition_report": condition_report.verified_at if condition_report else None,
        }

    async def start_shift(self, data: StartShiftRequest) -> dict:
        """Activate a NOT_STARTED shift and record the walk-around in the same transaction."""
        rental = await self._require_active_rental()
        shift = await self._get_shift(data.shift_id)
        if shift.rental_id != rental.id:
            AppException().raise_400("Shift does not belong to the active rental")
        if shift.status != ShiftStatus.NOT_STARTED.value:
            AppException().raise_conflict(f"Shift is already {shift.status}")

        now = datetime.utcnow()
        shift.status = ShiftStatus.ACTIVE.value
        shift.started_at = now
        report = ConditionReport(
            id=uuid.uuid4(),
            shift_id=shift.id,
            vehicle_id=rental.vehicle_id,
            driver_id=self.driver.id,
            damage_markers=[m.model_dump() for m in data.damage_markers] if data.damage_markers else None,
            notes=data.notes,
            photos=list(data.photos),
            verified_at=now,
        )
        self.db.add(report)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        self.logger.info("Driver %s started shift %s", self.driver.id, shift.id)
        return {"success": True, "shift": shift, "condition_report": report}

    async def end_shift(self, shift_id: uuid.UUID) -> dict:
        shift = await self._get_shift(shift_id)
        if shift.status != ShiftStatus.ACTIVE.value:
            AppException().raise_conflict("Only an active shift can be ended")
        shift.status = ShiftStatus.ENDED.value
        shift.ended_at = datetime.utcnow()
        await self.db.commit()
        return {"success": True, "shift": shift}

    async def request_return(self, shift_id: Optional[uuid.UUID] = None) -> dict:
        """
        Close the open shift and ask the driver to bring the vehicle back.
        The rental itself stays ACTIVE until an admin ends it at the depot.
        """
        rental = await self._require_active_rental()
        if shift_id:
            shift = await self._get_shift(shift_id)
            if shift.status != ShiftStatus.ENDED.value:
                shift.status = ShiftStatus.ENDED.value
                shift.ended_at = datetime.utcnow()
            await self.db.commit()
        self.logger.info("Return requested for rental %s", rental.id)
        return {"success": True, "message": RETURN_MESSAGE}

    async def report_accident(self, data: AccidentReportRequest) -> AccidentReport:
        rental = await self._require_active_rental()
        now = datetime.utcnow()
        report = AccidentReport(
            id=uuid.uuid4(),
            rental_id=rental.id,
            driver_id=self.driver.id,
            vehicle_id=rental.vehicle_id,
            is_safe=data.is_safe,
            emergency_called=data.emergency_called,
            scene_photos=list(data.scene_photos),
            third_party_name=data.third_party_name,
            third_party_phone=data.third_party_phone,
            third_party_plate=data.third_party_plate,
            third_party_insurer=data.third_party_insurer,
            description=data.description,
            location=data.location,
            occurred_at=to_naive_utc(data.occurred_at) if data.occurred_at else now,
            synced_at=now,
        )
        self.db.add(report)
        await self.db.commit()
        self.logger.warning("Accident reported on rental %s by driver %s", rental.id, self.driver.id)
        return report
