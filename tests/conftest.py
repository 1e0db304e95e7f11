"""
Shared fixtures: an in-memory SQLite database per test, an httpx client wired to the app with
get_db overridden, and bearer headers for an admin and a driver account.
"""
import os
import uuid
from datetime import datetime, timedelta

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["MAIL_SERVER"] = ""
os.environ["FLEET_JOBS_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.deps import get_db
from app.core.security import create_access_token, get_password_hash
from app.core.utils import today
from app.main import app
from app.models.registry import target_metadata
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.enums import DriverStatus, InvoiceStatus, RentalStatus, Role, VehicleStatus, VevoStatus


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(target_metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_user(db):
    user = User(
        id=uuid.uuid4(),
        email="admin@example.com",
        name="Admin",
        password_hash=get_password_hash("admin123"),
        role=Role.ADMIN.value,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


def make_vehicle(**overrides) -> Vehicle:
    suffix = uuid.uuid4().hex[:8].upper()
    in_a_year = today() + timedelta(days=365)
    fields = dict(
        id=uuid.uuid4(),
        vin=f"VIN{suffix}",
        plate=f"P{suffix[:6]}",
        make="Toyota",
        model="Camry",
        year=2023,
        color="White",
        rego_expiry=in_a_year,
        ctp_expiry=in_a_year,
        pink_slip_expiry=in_a_year,
        weekly_rate=450.0,
        bond_amount=1000.0,
        status=VehicleStatus.AVAILABLE.value,
    )
    fields.update(overrides)
    return Vehicle(**fields)


def make_driver(**overrides) -> Driver:
    suffix = uuid.uuid4().hex[:8]
    fields = dict(
        id=uuid.uuid4(),
        name="Test Driver",
        email=f"driver-{suffix}@example.com",
        phone="0400000000",
        license_no=f"NSW{suffix}",
        passport_no="PA1234567",
        vevo_status=VevoStatus.APPROVED.value,
        status=DriverStatus.ACTIVE.value,
        balance=0.0,
    )
    fields.update(overrides)
    return Driver(**fields)


def make_rental(vehicle: Vehicle, driver: Driver, start_date: datetime = None, **overrides) -> Rental:
    start = start_date or datetime.utcnow()
    fields = dict(
        id=uuid.uuid4(),
        driver_id=driver.id,
        vehicle_id=vehicle.id,
        start_date=start,
        weekly_rate=vehicle.weekly_rate,
        bond_amount=vehicle.bond_amount,
        status=RentalStatus.ACTIVE.value,
        next_payment_date=start + timedelta(days=7),
    )
    fields.update(overrides)
    return Rental(**fields)


def make_invoice(rental: Rental, **overrides) -> Invoice:
    fields = dict(
        id=uuid.uuid4(),
        rental_id=rental.id,
        weekly_rate=rental.weekly_rate,
        tolls=0.0,
        fines=0.0,
        credits=0.0,
        amount=rental.weekly_rate,
        due_date=datetime.utcnow() + timedelta(days=7),
        status=InvoiceStatus.PENDING.value,
    )
    fields.update(overrides)
    return Invoice(**fields)


@pytest.fixture
async def active_rental(db):
    """An AVAILABLE-turned-RENTED vehicle on an ACTIVE rental to an ACTIVE driver."""
    vehicle = make_vehicle(status=VehicleStatus.RENTED.value)
    driver = make_driver()
    db.add_all([vehicle, driver])
    await db.flush()
    rental = make_rental(vehicle, driver)
    db.add(rental)
    await db.commit()
    return rental, vehicle, driver


@pytest.fixture
async def driver_user(db, active_rental):
    _, _, driver = active_rental
    user = User(
        id=uuid.uuid4(),
        email=driver.email,
        name=driver.name,
        password_hash=get_password_hash("driver123"),
        role=Role.DRIVER.value,
        is_active=True,
        driver_id=driver.id,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def driver_headers(driver_user):
    return bearer(driver_user)
