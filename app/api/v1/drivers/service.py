from typing import Optional
from datetime import datetime
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update

from app.api.v1.drivers.schemas import RegisterDriverRequest, UpdateDriverRequest
from app.core.exceptions import AppException
from app.core.vevo_client import VevoClient, get_vevo_client
from app.models.driver import Driver
from app.models.rental import Rental
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.enums import DriverStatus, RentalStatus, VevoStatus


class DriverService:
    def __init__(self, db: AsyncSession, vevo_client: Optional[VevoClient] = None):
        self.db = db
        self.vevo_client = vevo_client or get_vevo_client()
        self.logger = logging.getLogger(__name__)

    async def _get_or_404(self, driver_id: uuid.UUID) -> Driver:
        driver = await self.db.get(Driver, driver_id)
        if not driver:
            AppException().raise_not_found("Driver", driver_id)
        return driver

    async def ensure_unique(self, email: Optional[str], license_no: Optional[str], exclude_id: Optional[uuid.UUID] = None):
        if email:
            query = select(Driver.id).where(Driver.email == email)
            if exclude_id:
                query = query.where(Driver.id != exclude_id)
            if (await self.db.execute(query)).first():
                AppException().raise_400(f"Driver with email {email} already exists")
        if license_no:
            query = select(Driver.id).where(Driver.license_no == license_no)
            if exclude_id:
                query = query.where(Driver.id != exclude_id)
            if (await self.db.execute(query)).first():
                AppException().raise_400(f"Driver with license number {license_no} already exists")

    async def _active_rental_id(self, driver_id: uuid.UUID) -> Optional[uuid.UUID]:
        result = await self.db.execute(
            select(Rental.id).where(
                Rental.driver_id == driver_id,
                Rental.status == RentalStatus.ACTIVE.value,
            )
        )
        return result.scalars().first()

    def check_vevo(self, passport_no: str) -> VevoStatus:
        return self.vevo_client.check(passport_no)

    async def register_driver(self, driver_data: RegisterDriverRequest) -> dict:
        await self.ensure_unique(driver_data.email, driver_data.license_no)

        vevo_status = VevoStatus.PENDING
        vevo_checked_at = None
        if driver_data.passport_no:
            vevo_status = self.check_vevo(driver_data.passport_no)
            vevo_checked_at = datetime.utcnow()

        status = DriverStatus.PENDING_APPROVAL
        if vevo_status == VevoStatus.DENIED:
            status = DriverStatus.BLOCKED

        new_driver = Driver(
            id=uuid.uuid4(),
            name=driver_data.name,
            email=driver_data.email,
            phone=driver_data.phone,
            license_no=driver_data.license_no,
            license_expiry=driver_data.license_expiry,
            passport_no=driver_data.passport_no,
            vevo_status=vevo_status.value,
            vevo_checked_at=vevo_checked_at,
            status=status.value,
            balance=0.0,
        )
        self.db.add(new_driver)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Driver with this email or license number already exists")
        await self.db.refresh(new_driver)

        self.logger.info(
            "Driver %s registered (status=%s, vevo=%s)", new_driver.email, new_driver.status, new_driver.vevo_status
        )
        return {"message": "Driver registered successfully", "driver": new_driver}

    async def run_vevo_check(self, driver_id: uuid.UUID) -> dict:
        driver = await self._get_or_404(driver_id)
        if not driver.passport_no:
            AppException().raise_400("Driver has no passport number on file")

        vevo_status = self.check_vevo(driver.passport_no)
        driver.vevo_status = vevo_status.value
        driver.vevo_checked_at = datetime.utcnow()
        if vevo_status == VevoStatus.DENIED:
            driver.status = DriverStatus.BLOCKED.value
            self.logger.info("Driver %s blocked after VEVO denial", driver.id)

        await self.db.commit()
        await self.db.refresh(driver)
        return {"message": "VEVO check completed", "driver": driver}

    async def approve_driver(self, driver_id: uuid.UUID) -> dict:
        driver = await self._get_or_404(driver_id)
        if driver.vevo_status == VevoStatus.DENIED.value:
            AppException().raise_conflict("Cannot approve driver with denied VEVO status")

        driver.status = DriverStatus.ACTIVE.value
        await self.db.commit()
        await self.db.refresh(driver)
        self.logger.info("Driver %s approved", driver.id)
        return {"message": "Driver approved", "driver": driver}

    async def block_driver(self, driver_id: uuid.UUID, reason: Optional[str] = None) -> dict:
        driver = await self._get_or_404(driver_id)
        driver.status = DriverStatus.BLOCKED.value
        await self.db.commit()
        await self.db.refresh(driver)
        self.logger.info("Driver %s blocked%s", driver.id, f": {reason}" if reason else "")
        return {"message": "Driver blocked", "driver": driver}

    async def get_all_drivers(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
    ) -> dict:
        query = select(Driver)
        if status:
            query = query.where(Driver.status == status)
        query = query.order_by(Driver.created_at.desc()).offset(skip).limit(limit)
        drivers = list((await self.db.execute(query)).scalars().all())

        active = {}
        if drivers:
            result = await self.db.execute(
                select(Rental.driver_id, Rental.id, Vehicle.plate)
                .join(Vehicle, Vehicle.id == Rental.vehicle_id)
                .where(
                    Rental.status == RentalStatus.ACTIVE.value,
                    Rental.driver_id.in_([d.id for d in drivers]),
                )
            )
            active = {driver_id: (rental_id, plate) for driver_id, rental_id, plate in result.all()}

        items = []
        for driver in drivers:
            rental_id, plate = active.get(driver.id, (None, None))
            items.append({"driver": driver, "active_rental_id": rental_id, "active_vehicle_plate": plate})
        return {"message": "Drivers retrieved successfully", "drivers": items}

    async def get_driver_by_id(self, driver_id: uuid.UUID) -> dict:
        result = await self.db.execute(
            select(Driver)
            .where(Driver.id == driver_id)
            .options(
                selectinload(Driver.rentals).selectinload(Rental.vehicle),
                selectinload(Driver.rentals).selectinload(Rental.invoices),
            )
            .execution_options(populate_existing=True)
        )
        driver = result.scalar_one_or_none()
        if not driver:
            AppException().raise_not_found("Driver", driver_id)
        return {"message": "Driver retrieved successfully", "driver": driver}

    async def update_driver(self, driver_id: uuid.UUID, driver_data: UpdateDriverRequest) -> dict:
        driver = await self._get_or_404(driver_id)

        update_data = driver_data.model_dump(exclude_unset=True, exclude_none=True)
        await self.ensure_unique(
            update_data.get("email") if update_data.get("email") != driver.email else None,
            update_data.get("license_no") if update_data.get("license_no") != driver.license_no else None,
            exclude_id=driver.id,
        )

        new_status = update_data.get("status")
        if new_status:
            if new_status not in [s.value for s in DriverStatus]:
                AppException().raise_400(f"Invalid status. Must be one of: {[s.value for s in DriverStatus]}")
            if new_status == DriverStatus.ACTIVE.value and driver.vevo_status == VevoStatus.DENIED.value:
                AppException().raise_conflict("Cannot activate driver with denied VEVO status")

        for field, value in update_data.items():
            setattr(driver, field, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Driver with this email or license number already exists")
        await self.db.refresh(driver)
        return {"message": "Driver updated successfully", "driver": driver}

    async def delete_driver(self, driver_id: uuid.UUID) -> dict:
        driver = await self._get_or_404(driver_id)

        if await self._active_rental_id(driver_id):
            AppException().raise_conflict("Cannot delete driver with active rental")

        history = await self.db.execute(select(Rental.id).where(Rental.driver_id == driver_id))
        if history.first():
            AppException().raise_conflict("Cannot delete driver with rental history")

        await self.db.execute(update(User).where(User.driver_id == driver_id).values(driver_id=None))
        await self.db.delete(driver)
        await self.db.commit()
        self.logger.info("Driver %s deleted", driver.email)
        return {"message": "Driver deleted successfully"}
