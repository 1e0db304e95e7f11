"""
Documents linked from the driver app: registration, CTP green slip, pink slip and the rental agreement.
They are assembled from the vehicle and rental rows. Drivers only see documents for their own rentals.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.compliance import get_compliance_status
from app.core.exceptions import AppException
from app.models.rental import Rental
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.enums import ComplianceLight, RentalStatus, Role

FLEET_OWNER = "FleetSync Pty Ltd"
FLEET_OWNER_ABN = "12 345 678 901"
FLEET_OWNER_ADDRESS = "123 Fleet Street, Sydney NSW 2000"
PERMITTED_USE = "Rideshare (Uber, DiDi, Ola)"

AGREEMENT_TERMS = (
    "Driver must maintain valid rideshare registration",
    "Vehicle must be returned with same fuel level",
    "Damage beyond normal wear will be charged to bond",
    "Weekly payments due every {payment_day} by 5pm",
    "Late payments incur $50 admin fee",
)


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def rego_document(vehicle: Vehicle) -> dict:
    return {
        "title": "Vehicle Registration Certificate",
        "type": "NSW Registration",
        "document_no": vehicle.plate,
        "expiry_date": vehicle.rego_expiry,
        "compliance": get_compliance_status(vehicle.rego_expiry).value,
        "details": {
            "plate_no": vehicle.plate,
            "vehicle_type": "Motor Vehicle - Passenger",
            "make": vehicle.make,
            "model": vehicle.model,
            "year": str(vehicle.year),
            "colour": vehicle.color or "",
            "vin": vehicle.vin,
            "owner": FLEET_OWNER,
            "owner_address": FLEET_OWNER_ADDRESS,
        },
    }


def ctp_document(vehicle: Vehicle) -> dict:
    return {
        "title": "CTP Green Slip Insurance",
        "type": "Compulsory Third Party Insurance",
        "document_no": f"CTP-{vehicle.ctp_expiry.year}-{vehicle.plate}",
        "expiry_date": vehicle.ctp_expiry,
        "compliance": get_compliance_status(vehicle.ctp_expiry).value,
        "details": {
            "vehicle_plate": vehicle.plate,
            "vehicle_type": "Private Passenger Vehicle",
            "policy_holder": FLEET_OWNER,
            "cover_type": "Class 1 - Private Use",
            "expiry_time": f"{vehicle.ctp_expiry.isoformat()} 23:59:59",
        },
    }


def pink_slip_document(vehicle: Vehicle) -> dict:
    light = get_compliance_status(vehicle.pink_slip_expiry)
    return {
        "title": "Pink Slip - Safety Inspection Report",
        "type": "NSW eInspection Certificate",
        "document_no": f"INS-{vehicle.plate}",
        "expiry_date": vehicle.pink_slip_expiry,
        "compliance": light.value,
        "details": {
            "vehicle_plate": vehicle.plate,
            "vehicle_vin": vehicle.vin,
            "result": "EXPIRED" if light == ComplianceLight.RED else "PASS",
        },
    }


def rental_agreement_document(rental: Rental) -> dict:
    vehicle = rental.vehicle
    driver = rental.driver
    payment_day = rental.next_payment_date.strftime("%A")
    return {
        "title": "Vehicle Rental Agreement",
        "type": "Rideshare Vehicle Lease",
        "document_no": f"FSP-{rental.start_date.year}-{str(rental.id)[:8].upper()}",
        "start_date": rental.start_date.date(),
        "expiry_date": rental.end_date.date() if rental.end_date else None,
        "status": rental.status,
        "details": {
            "lessor": FLEET_OWNER,
            "lessor_abn": FLEET_OWNER_ABN,
            "lessee": driver.name,
            "lessee_email": driver.email,
            "vehicle": f"{vehicle.year} {vehicle.make} {vehicle.model} ({vehicle.plate})",
            "weekly_rate": _money(rental.weekly_rate),
            "bond_amount": _money(rental.bond_amount),
            "payment_day": payment_day,
            "permitted_use": PERMITTED_USE,
        },
        "terms": [term.format(payment_day=payment_day) for term in AGREEMENT_TERMS],
    }


VEHICLE_DOCUMENTS = {
    "rego": rego_document,
    "ctp": ctp_document,
    "pink-slip": pink_slip_document,
}


class DocumentService:
    def __init__(self, db: AsyncSession, user: User):
        self.db = db
        self.user = user
        self.logger = logging.getLogger(__name__)

    @property
    def is_admin(self) -> bool:
        return self.user.role == Role.ADMIN.value

    async def _driver_has_active_rental_on(self, vehicle_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(Rental.id).where(
                Rental.vehicle_id == vehicle_id,
                Rental.driver_id == self.user.driver_id,
                Rental.status == RentalStatus.ACTIVE.value,
            )
        )
        return result.first() is not None

    async def get_vehicle_document(self, doc_type: str, vehicle_id: uuid.UUID) -> dict:
        build = VEHICLE_DOCUMENTS.get(doc_type)
        if build is None:
            AppException().raise_404("Document not found")

        vehicle = await self.db.get(Vehicle, vehicle_id)
        if not vehicle:
            AppException().raise_not_found("Vehicle", vehicle_id)
        if not self.is_admin and not await self._driver_has_active_rental_on(vehicle.id):
            self.logger.warning("User %s denied %s document for vehicle %s", self.user.id, doc_type, vehicle.id)
            AppException().raise_403("Drivers can only view documents for their rented vehicle")
        return build(vehicle)

    async def get_rental_agreement(self, rental_id: uuid.UUID) -> dict:
        result = await self.db.execute(
            select(Rental)
            .where(Rental.id == rental_id)
            .options(selectinload(Rental.vehicle), selectinload(Rental.driver))
        )
        rental = result.scalars().first()
        if not rental:
            AppException().raise_not_found("Rental", rental_id)
        if not self.is_admin and rental.driver_id != self.user.driver_id:
            AppException().raise_403("Drivers can only view their own rental agreement")
        return rental_agreement_document(rental)
