from typing import Dict, List, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, select

from app.api.v1.vehicles.schemas import CreateVehicleRequest, UpdateVehicleRequest
from app.core.compliance import compliance_lights, expired_documents, expiry_message, get_compliance_status
from app.core.exceptions import AppException
from app.core.utils import today
from app.models.alert import Alert
from app.models.driver import Driver
from app.models.rental import Rental
from app.models.vehicle import Vehicle
from app.models.enums import RentalStatus, VehicleStatus

# Statuses an admin may set directly; RENTED is only ever set by the rental lifecycle
ADMIN_SETTABLE_STATUSES = (VehicleStatus.DRAFT.value, VehicleStatus.AVAILABLE.value, VehicleStatus.SUSPENDED.value)


class VehicleService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    get_compliance_status = staticmethod(get_compliance_status)

    async def _get_or_404(self, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = await self.db.get(Vehicle, vehicle_id)
        if not vehicle:
            AppException().raise_not_found("Vehicle", vehicle_id)
        return vehicle

    async def _ensure_unique(self, vin: Optional[str], plate: Optional[str], exclude_id: Optional[uuid.UUID] = None):
        if vin:
            query = select(Vehicle.id).where(Vehicle.vin == vin)
            if exclude_id:
                query = query.where(Vehicle.id != exclude_id)
            if (await self.db.execute(query)).first():
                AppException().raise_400(f"Vehicle with VIN {vin} already exists")
        if plate:
            query = select(Vehicle.id).where(Vehicle.plate == plate)
            if exclude_id:
                query = query.where(Vehicle.id != exclude_id)
            if (await self.db.execute(query)).first():
                AppException().raise_400(f"Vehicle with plate {plate} already exists")

    async def _has_active_rental(self, vehicle_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(Rental.id).where(
                Rental.vehicle_id == vehicle_id,
                Rental.status == RentalStatus.ACTIVE.value,
            )
        )
        return result.first() is not None

    def _apply_compliance(self, vehicle: Vehicle) -> List[str]:
        """Suspend the vehicle when any document has expired. Returns the issue descriptions."""
        expired = expired_documents(vehicle, today())
        issues = [expiry_message(vehicle, doc) for doc in expired]
        if expired and vehicle.status != VehicleStatus.SUSPENDED.value:
            self.logger.info(
                "Suspending vehicle %s (%s): %s", vehicle.plate, vehicle.id, "; ".join(issues)
            )
            vehicle.status = VehicleStatus.SUSPENDED.value
        return issues

    async def current_drivers(self, vehicle_ids: List[uuid.UUID]) -> Dict[uuid.UUID, dict]:
        """Driver of the ACTIVE rental for each of the given vehicles."""
        if not vehicle_ids:
            return {}
        result = await self.db.execute(
            select(Rental.id, Rental.vehicle_id, Driver)
            .join(Driver, Driver.id == Rental.driver_id)
            .where(
                Rental.status == RentalStatus.ACTIVE.value,
                Rental.vehicle_id.in_(vehicle_ids),
            )
        )
        drivers = {}
        for rental_id, vehicle_id, driver in result.all():
            drivers[vehicle_id] = {
                "id": driver.id,
                "name": driver.name,
                "email": driver.email,
                "phone": driver.phone,
                "rental_id": rental_id,
            }
        return drivers

    async def validate_compliance(self, vehicle_id: uuid.UUID) -> dict:
        vehicle = await self._get_or_404(vehicle_id)
        status_before = vehicle.status
        issues = self._apply_compliance(vehicle)
        if vehicle.status != status_before:
            await self.db.commit()
            await self.db.refresh(vehicle)
        return {"is_compliant": not issues, "issues": issues, "vehicle": vehicle}

    async def create_vehicle(self, vehicle_data: CreateVehicleRequest) -> dict:
        await self._ensure_unique(vehicle_data.vin, vehicle_data.plate)

        new_vehicle = Vehicle(
            id=uuid.uuid4(),
            vin=vehicle_data.vin,
            plate=vehicle_data.plate,
            make=vehicle_data.make,
            model=vehicle_data.model,
            year=vehicle_data.year,
            color=vehicle_data.color,
            rego_expiry=vehicle_data.rego_expiry,
            ctp_expiry=vehicle_data.ctp_expiry,
            pink_slip_expiry=vehicle_data.pink_slip_expiry,
            weekly_rate=vehicle_data.weekly_rate,
            bond_amount=vehicle_data.bond_amount,
            status=VehicleStatus.DRAFT.value,
        )

        self.db.add(new_vehicle)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Vehicle with this VIN or plate already exists")
        await self.db.refresh(new_vehicle)
        self.logger.info("Vehicle %s created as DRAFT", new_vehicle.plate)
        return {"message": "Vehicle created successfully", "vehicle": new_vehicle}

    async def get_vehicle_by_id(self, vehicle_id: uuid.UUID) -> dict:
        vehicle = await self._get_or_404(vehicle_id)
        alerts = await self.db.execute(
            select(Alert)
            .where(Alert.vehicle_id == vehicle_id, Alert.resolved.is_(False))
            .order_by(Alert.created_at.desc())
        )
        rental_count = await self.db.execute(
            select(func.count(Rental.id)).where(Rental.vehicle_id == vehicle_id)
        )
        drivers = await self.current_drivers([vehicle.id])
        return {
            "message": "Vehicle retrieved successfully",
            "vehicle": vehicle,
            "compliance": compliance_lights(vehicle, today()),
            "current_driver": drivers.get(vehicle.id),
            "alerts": list(alerts.scalars().all()),
            "rental_count": rental_count.scalar() or 0,
        }

    async def get_vehicle_by_vin(self, vin: str) -> dict:
        result = await self.db.execute(select(Vehicle.id).where(Vehicle.vin == vin))
        vehicle_id = result.scalar_one_or_none()
        if vehicle_id is None:
            AppException().raise_404(f"Vehicle with VIN {vin} not found")
        return await self.get_vehicle_by_id(vehicle_id)

    async def get_all_vehicles(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
    ) -> dict:
        query = select(Vehicle)
        if status:
            query = query.where(Vehicle.status == status)
        query = query.order_by(Vehicle.created_at.desc()).offset(skip).limit(limit)

        result = await self.db.execute(query)
        vehicles = list(result.scalars().all())
        drivers = await self.current_drivers([v.id for v in vehicles])
        current_day = today()
        items = [
            {
                "vehicle": vehicle,
                "compliance": compliance_lights(vehicle, current_day),
                "current_driver": drivers.get(vehicle.id),
            }
            for vehicle in vehicles
        ]
        return {"message": "Vehicles retrieved successfully", "vehicles": items}

    async def update_vehicle(
        self,
        vehicle_id: uuid.UUID,
        vehicle_data: UpdateVehicleRequest
    ) -> dict:
        vehicle = await self._get_or_404(vehicle_id)

        update_data = vehicle_data.model_dump(exclude_unset=True, exclude_none=True)
        await self._ensure_unique(
            update_data.get("vin") if update_data.get("vin") != vehicle.vin else None,
            update_data.get("plate") if update_data.get("plate") != vehicle.plate else None,
            exclude_id=vehicle.id,
        )

        new_status = update_data.pop("status", None)
        if new_status and new_status != vehicle.status:
            if new_status not in ADMIN_SETTABLE_STATUSES:
                AppException().raise_400(
                    f"Invalid status. Must be one of: {list(ADMIN_SETTABLE_STATUSES)}"
                )
            if await self._has_active_rental(vehicle.id):
                AppException().raise_conflict("Cannot change status of a vehicle with an active rental")
            vehicle.status = new_status

        for field, value in update_data.items():
            setattr(vehicle, field, value)

        # New dates (or a manual reactivation) must not leave an expired vehicle in service
        self._apply_compliance(vehicle)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Vehicle with this VIN or plate already exists")
        await self.db.refresh(vehicle)
        return {"message": "Vehicle updated successfully", "vehicle": vehicle}

    async def delete_vehicle(self, vehicle_id: uuid.UUID) -> dict:
        vehicle = await self._get_or_404(vehicle_id)

        if await self._has_active_rental(vehicle_id):
            AppException().raise_conflict("Cannot delete vehicle with active rental")

        history = await self.db.execute(select(Rental.id).where(Rental.vehicle_id == vehicle_id))
        if history.first():
            AppException().raise_conflict("Cannot delete vehicle with rental history")

        await self.db.delete(vehicle)
        await self.db.commit()
        self.logger.info("Vehicle %s deleted", vehicle.plate)
        return {"message": "Vehicle deleted successfully"}
