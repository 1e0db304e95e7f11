"""
Reset the database and load demo data.

    python -m app.scripts.seed

Creates the admin, a mixed fleet (available, rented and suspended vehicles), drivers with login
accounts (one blocked after a denied VEVO check), active rentals and four weeks of invoices.
"""
import asyncio
import logging
import random
import uuid
from datetime import datetime, timedelta

from sqlalchemy import delete

from app.core.config import settings
from app.core.database import engine, get_async_session_maker_instance
from app.core.security import get_password_hash
from app.core.utils import round_money
from app.models.registry import target_metadata
from app.models.accident_report import AccidentReport
from app.models.alert import Alert
from app.models.condition_report import ConditionReport
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.onboarding_token import OnboardingToken
from app.models.rental import Rental
from app.models.shift import Shift
from app.models.toll_charge import TollCharge
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.enums import DriverStatus, InvoiceStatus, RentalStatus, Role, VehicleStatus, VevoStatus

logger = logging.getLogger(__name__)

DRIVER_PASSWORD = "driver123"

# (vin suffix, plate, make, model, year, color, status, rego, ctp, pink slip days from today, rate, bond)
VEHICLES = [
    ("456", "ABC123", "Toyota", "Camry", 2022, "White", VehicleStatus.AVAILABLE, 90, 120, 180, 450, 1000),
    ("457", "DEF456", "Toyota", "Corolla", 2023, "Silver", VehicleStatus.AVAILABLE, 60, 90, 150, 400, 900),
    ("458", "GHI789", "Hyundai", "i30", 2022, "Black", VehicleStatus.AVAILABLE, 45, 60, 120, 380, 850),
    ("459", "JKL012", "Kia", "Cerato", 2023, "Red", VehicleStatus.AVAILABLE, 100, 130, 200, 390, 900),
    ("460", "MNO345", "Mazda", "3", 2022, "Blue", VehicleStatus.AVAILABLE, 75, 100, 160, 420, 950),
    ("461", "PQR678", "Honda", "Civic", 2023, "White", VehicleStatus.AVAILABLE, 50, 80, 140, 430, 1000),
    ("462", "STU901", "Toyota", "Yaris", 2021, "Grey", VehicleStatus.AVAILABLE, 25, 40, 100, 350, 800),
    ("463", "VWX234", "Hyundai", "Elantra", 2022, "Black", VehicleStatus.AVAILABLE, 80, 110, 170, 400, 900),
    ("464", "YZA567", "Kia", "Rio", 2023, "Silver", VehicleStatus.AVAILABLE, 35, 55, 115, 360, 850),
    ("465", "BCD890", "Mazda", "CX-3", 2022, "Red", VehicleStatus.AVAILABLE, 65, 95, 155, 470, 1100),
    ("466", "EFG123", "Toyota", "Camry Hybrid", 2023, "White", VehicleStatus.RENTED, 70, 100, 160, 500, 1200),
    ("467", "HIJ456", "Toyota", "RAV4", 2022, "Blue", VehicleStatus.RENTED, 55, 85, 145, 520, 1300),
    ("468", "KLM789", "Hyundai", "Tucson", 2023, "Black", VehicleStatus.RENTED, 40, 70, 130, 490, 1150),
    ("469", "NOP012", "Kia", "Sportage", 2022, "Grey", VehicleStatus.RENTED, 85, 115, 175, 480, 1100),
    ("470", "QRS345", "Mazda", "CX-5", 2023, "Red", VehicleStatus.AVAILABLE, 30, 60, 120, 530, 1250),
    ("471", "TUV678", "Honda", "HR-V", 2022, "White", VehicleStatus.AVAILABLE, 95, 125, 185, 460, 1050),
    ("472", "WXY901", "Toyota", "C-HR", 2023, "Silver", VehicleStatus.AVAILABLE, 20, 50, 110, 470, 1100),
    ("473", "ZAB234", "Hyundai", "Kona", 2022, "Blue", VehicleStatus.DRAFT, 110, 140, 200, 450, 1000),
    ("474", "CDE567", "Nissan", "Pulsar", 2020, "Black", VehicleStatus.SUSPENDED, 30, 60, -10, 320, 750),
    ("475", "FGH890", "Mitsubishi", "Lancer", 2019, "Grey", VehicleStatus.SUSPENDED, -5, 45, -30, 300, 700),
]

# (name, email, phone, license_no, license days, passport, vevo, status)
DRIVERS = [
    ("John Smith", "john.smith@email.com", "0412345678", "NSW1234567", 365, "PA1234567", VevoStatus.APPROVED, DriverStatus.ACTIVE),
    ("Sarah Chen", "sarah.chen@email.com", "0423456789", "NSW2345678", 400, "PA2345678", VevoStatus.APPROVED, DriverStatus.ACTIVE),
    ("Mohammed Ali", "mohammed.ali@email.com", "0434567890", "NSW3456789", 200, "PA3456789", VevoStatus.APPROVED, DriverStatus.ACTIVE),
    ("Emma Thompson", "emma.thompson@email.com", "0445678901", "NSW4567890", 500, "PA4567890", VevoStatus.APPROVED, DriverStatus.ACTIVE),
    ("Liam Nguyen", "liam.nguyen@email.com", "0467890123", "NSW6789012", 250, "PA6789012", VevoStatus.APPROVED, DriverStatus.PENDING_APPROVAL),
    ("Raj Patel", "raj.patel@email.com", "0456789012", "NSW5678901", 300, "PA5670000", VevoStatus.DENIED, DriverStatus.BLOCKED),
]

# (plate, alert type, message)
ALERTS = [
    ("CDE567", "PINK_SLIP_EXPIRY", "CDE567: Pink Slip expired"),
    ("FGH890", "REGO_EXPIRY", "FGH890: Registration expired"),
    ("FGH890", "PINK_SLIP_EXPIRY", "FGH890: Pink Slip expired"),
]


async def reset_database(session) -> None:
    for model in (
        AccidentReport, ConditionReport, Shift, TollCharge, Alert, Invoice,
        Rental, OnboardingToken, User, Driver, Vehicle,
    ):
        await session.execute(delete(model))
    await session.commit()


async def seed(rng: random.Random) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(target_metadata.create_all)

    session_maker = get_async_session_maker_instance()
    async with session_maker() as session:
        await reset_database(session)
        now = datetime.utcnow()
        today = now.date()

        session.add(User(
            email=settings.DEFAULT_ADMIN_EMAIL.lower(),
            name="Fleet Admin",
            password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
            role=Role.ADMIN.value,
        ))

        vehicles = {}
        for suffix, plate, make, model, year, color, status, rego, ctp, pink, rate, bond in VEHICLES:
            vehicle = Vehicle(
                id=uuid.uuid4(),
                vin=f"WVWZZZ3CZ2E123{suffix}",
                plate=plate,
                make=make,
                model=model,
                year=year,
                color=color,
                status=status.value,
                rego_expiry=today + timedelta(days=rego),
                ctp_expiry=today + timedelta(days=ctp),
                pink_slip_expiry=today + timedelta(days=pink),
                weekly_rate=float(rate),
                bond_amount=float(bond),
            )
            session.add(vehicle)
            vehicles[plate] = vehicle

        for plate, alert_type, message in ALERTS:
            session.add(Alert(id=uuid.uuid4(), vehicle_id=vehicles[plate].id, type=alert_type, message=message))

        password_hash = get_password_hash(DRIVER_PASSWORD)
        drivers = []
        for name, email, phone, license_no, license_days, passport, vevo, status in DRIVERS:
            driver = Driver(
                id=uuid.uuid4(),
                name=name,
                email=email,
                phone=phone,
                license_no=license_no,
                license_expiry=today + timedelta(days=license_days),
                passport_no=passport,
                vevo_status=vevo.value,
                vevo_checked_at=now,
                status=status.value,
                balance=0.0,
            )
            session.add(driver)
            drivers.append(driver)
        await session.flush()

        for driver in drivers:
            session.add(User(
                email=driver.email,
                name=driver.name,
                password_hash=password_hash,
                role=Role.DRIVER.value,
                driver_id=driver.id,
            ))

        rented = [v for v in vehicles.values() if v.status == VehicleStatus.RENTED.value]
        active_drivers = [d for d in drivers if d.status == DriverStatus.ACTIVE.value]
        invoice_count = 0
        for i, (vehicle, driver) in enumerate(zip(rented, active_drivers)):
            # Rentals started 4, 3, 2 and 1 weeks ago
            start = now - timedelta(days=28 - 7 * i)
            rental = Rental(
                id=uuid.uuid4(),
                driver_id=driver.id,
                vehicle_id=vehicle.id,
                start_date=start,
                weekly_rate=vehicle.weekly_rate,
                bond_amount=vehicle.bond_amount,
                status=RentalStatus.ACTIVE.value,
                next_payment_date=now + timedelta(days=7),
            )
            session.add(rental)

            for week in range(4 - i):
                due = start + timedelta(days=7 * (week + 1))
                tolls = round_money(rng.uniform(0, 50))
                fines = round_money(rng.uniform(0, 100)) if week == 2 else 0.0
                credits = 20.0 if week == 1 else 0.0
                paid = due < now - timedelta(days=7)
                amount = round_money(rental.weekly_rate + tolls + fines - credits)
                session.add(Invoice(
                    id=uuid.uuid4(),
                    rental_id=rental.id,
                    weekly_rate=rental.weekly_rate,
                    tolls=tolls,
                    fines=fines,
                    credits=credits,
                    amount=amount,
                    due_date=due,
                    status=InvoiceStatus.PAID.value if paid else InvoiceStatus.PENDING.value,
                    paid_at=due if paid else None,
                ))
                if paid:
                    driver.balance = round_money(driver.balance - amount)
                invoice_count += 1

        await session.commit()
        logger.info(
            "Seeded %d vehicles, %d drivers, %d rentals, %d invoices",
            len(vehicles), len(drivers), min(len(rented), len(active_drivers)), invoice_count,
        )
        logger.info("Admin login: %s / %s", settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
        logger.info("Driver login: %s / %s", DRIVERS[0][1], DRIVER_PASSWORD)


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")
    asyncio.run(seed(random.Random(42)))


if __name__ == "__main__":
    main()
