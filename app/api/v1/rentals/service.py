from typing import List, Optional
from datetime import datetime
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select

from app.core.billing_schedule import first_payment_date, invoicing_horizon
from app.core.compliance import expired_documents
from app.core.exceptions import AppException
from app.core.utils import round_money, to_naive_utc, today
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.vehicle import Vehicle
from app.models.enums import DriverStatus, RentalStatus, VehicleStatus

# Invoices shown with each rental in listings
RECENT_INVOICE_COUNT = 3


def recent_invoices(rental: Rental, count: int = RECENT_INVOICE_COUNT) -> List[Invoice]:
    """Newest-due invoices of a rental whose invoices are already loaded."""
    return sorted(rental.invoices, key=lambda invoice: invoice.due_date, reverse=True)[:count]


class RentalService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def _load_rental(self, rental_id: uuid.UUID) -> Optional[Rental]:
        result = await self.db.execute(
            select(Rental)
            .where(Rental.id == rental_id)
            .options(
                selectinload(Rental.driver),
                selectinload(Rental.vehicle),
                selectinload(Rental.invoices),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _active_rental_for(self, column, value) -> Optional[Rental]:
        result = await self.db.execute(
            select(Rental).where(column == value, Rental.status == RentalStatus.ACTIVE.value)
        )
        return result.scalars().first()

    async def create_rental(
        self,
        driver_id: uuid.UUID,
        vehicle_id: uuid.UUID,
        bond_amount: float,
        weekly_rate: float,
        start_date: Optional[datetime] = None,
    ) -> dict:
        # Vehicle and driver rows are locked so concurrent assignments of either serialise here
        vehicle_result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        vehicle = vehicle_result.scalar_one_or_none()
        if not vehicle:
            AppException().raise_not_found("Vehicle", vehicle_id)
        if vehicle.status == VehicleStatus.SUSPENDED.value:
            AppException().raise_conflict("Cannot assign a suspended vehicle")
        if vehicle.status == VehicleStatus.RENTED.value:
            AppException().raise_conflict("Vehicle is already rented")
        if vehicle.status != VehicleStatus.AVAILABLE.value:
            AppException().raise_conflict("Vehicle must be AVAILABLE to rent")
        expired = expired_documents(vehicle, today())
        if expired:
            AppException().raise_conflict(
                f"Vehicle is not compliant: {', '.join(doc.label for doc in expired)} expired"
            )

        driver = await self.db.get(Driver, driver_id, with_for_update=True, populate_existing=True)
        if not driver:
            AppException().raise_not_found("Driver", driver_id)
        if driver.status == DriverStatus.BLOCKED.value:
            AppException().raise_conflict("Cannot assign vehicle to blocked driver")
        if driver.status != DriverStatus.ACTIVE.value:
            AppException().raise_conflict("Driver must be active to rent a vehicle")

        if await self._active_rental_for(Rental.driver_id, driver_id):
            AppException().raise_conflict("Driver already has an active rental")
        if await self._active_rental_for(Rental.vehicle_id, vehicle_id):
            AppException().raise_conflict("Vehicle already has an active rental")

        start = to_naive_utc(start_date) if start_date else datetime.utcnow()
        rental = Rental(
            id=uuid.uuid4(),
            driver_id=driver_id,
            vehicle_id=vehicle_id,
            start_date=start,
            weekly_rate=round_money(weekly_rate),
            bond_amount=round_money(bond_amount),
            status=RentalStatus.ACTIVE.value,
            next_payment_date=first_payment_date(start),
        )

        try:
            self.db.add(rental)
            vehicle.status = VehicleStatus.RENTED.value
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.logger.warning("Concurrent rental rejected for vehicle %s / driver %s", vehicle_id, driver_id)
            AppException().raise_conflict("Driver or vehicle already has an active rental")
        except SQLAlchemyError:
            await self.db.rollback()
            self.logger.exception("Failed to create rental for vehicle %s / driver %s", vehicle_id, driver_id)
            raise

        self.logger.info("Rental %s started: vehicle %s -> driver %s", rental.id, vehicle.plate, driver.email)
        return {"message": "Rental created successfully", "rental": await self._load_rental(rental.id)}

    async def end_rental(self, rental_id: uuid.UUID) -> dict:
        rental = await self.db.get(Rental, rental_id)
        if not rental:
            AppException().raise_not_found("Rental", rental_id)
        if rental.status != RentalStatus.ACTIVE.value:
            AppException().raise_conflict("Rental is not active")

        vehicle_result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.id == rental.vehicle_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        vehicle = vehicle_result.scalar_one()

        try:
            rental.status = RentalStatus.COMPLETED.value
            rental.end_date = datetime.utcnow()
            # A vehicle whose papers lapsed during the rental goes back to SUSPENDED, not into service
            if vehicle.status == VehicleStatus.SUSPENDED.value or expired_documents(vehicle, today()):
                vehicle.status = VehicleStatus.SUSPENDED.value
            else:
                vehicle.status = VehicleStatus.AVAILABLE.value
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            self.logger.exception("Failed to end rental %s", rental_id)
            raise

        self.logger.info("Rental %s ended; vehicle %s is now %s", rental.id, vehicle.plate, vehicle.status)
        return {"message": "Rental ended successfully", "rental": await self._load_rental(rental.id)}

    async def get_rentals_due_for_invoicing(self) -> List[Rental]:
        """ACTIVE rentals whose next payment falls on or before the end of the day three days from today."""
        result = await self.db.execute(
            select(Rental)
            .where(
                Rental.status == RentalStatus.ACTIVE.value,
                Rental.next_payment_date <= invoicing_horizon(today()),
            )
            .order_by(Rental.next_payment_date)
        )
        return list(result.scalars().all())

    async def get_all_rentals(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
        driver_id: Optional[uuid.UUID] = None,
        vehicle_id: Optional[uuid.UUID] = None,
    ) -> dict:
        query = select(Rental).options(
            selectinload(Rental.driver),
            selectinload(Rental.vehicle),
            selectinload(Rental.invoices),
        )
        if status:
            query = query.where(Rental.status == status)
        if driver_id:
            query = query.where(Rental.driver_id == driver_id)
        if vehicle_id:
            query = query.where(Rental.vehicle_id == vehicle_id)
        query = query.order_by(Rental.created_at.desc()).offset(skip).limit(limit)

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return {"message": "Rentals retrieved successfully", "rentals": list(result.scalars().all())}

    async def get_active_rentals(self) -> dict:
        result = await self.get_all_rentals(status=RentalStatus.ACTIVE.value, limit=1000)
        return {"message": "Active rentals retrieved successfully", "rentals": result["rentals"]}

    async def get_rental_by_id(self, rental_id: uuid.UUID) -> dict:
        rental = await self._load_rental(rental_id)
        if not rental:
            AppException().raise_not_found("Rental", rental_id)
        return {"message": "Rental retrieved successfully", "rental": rental}
