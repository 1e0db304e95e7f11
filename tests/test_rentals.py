"""
Rental lifecycle:
- A rental starts only for an AVAILABLE, compliant vehicle and an ACTIVE driver, neither of which
  already has an ACTIVE rental.
- Starting a rental marks the vehicle RENTED and schedules the first payment a week out.
- Ending a rental frees the vehicle, or suspends it when its papers lapsed during the rental.
- Starting or ending a rental is all-or-nothing: a failed commit leaves rental and vehicle unchanged.
- The database itself refuses a second ACTIVE rental for a driver or a vehicle.
"""
from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.utils import today
from app.api.v1.rentals.service import RentalService
from app.models.rental import Rental
from app.models.vehicle import Vehicle
from app.models.enums import DriverStatus, VehicleStatus
from conftest import make_driver, make_rental, make_vehicle

VEHICLE_STATUSES = [s.value for s in VehicleStatus]
DRIVER_STATUSES = [s.value for s in DriverStatus]


@pytest.mark.parametrize("vehicle_status", VEHICLE_STATUSES)
@pytest.mark.parametrize("driver_status", DRIVER_STATUSES)
async def test_create_rental_guard_matrix(db, vehicle_status, driver_status):
    vehicle = make_vehicle(status=vehicle_status)
    driver = make_driver(status=driver_status)
    db.add_all([vehicle, driver])
    await db.commit()

    service = RentalService(db)
    allowed = vehicle_status == VehicleStatus.AVAILABLE.value and driver_status == DriverStatus.ACTIVE.value
    if allowed:
        result = await service.create_rental(driver.id, vehicle.id, bond_amount=1000, weekly_rate=450)
        assert result["rental"].status == "ACTIVE"
    else:
        with pytest.raises(HTTPException) as exc_info:
            await service.create_rental(driver.id, vehicle.id, bond_amount=1000, weekly_rate=450)
        assert exc_info.value.status_code == 400


async def test_guard_messages(db):
    suspended = make_vehicle(status=VehicleStatus.SUSPENDED.value)
    rented = make_vehicle(status=VehicleStatus.RENTED.value)
    available = make_vehicle()
    blocked = make_driver(status=DriverStatus.BLOCKED.value)
    active = make_driver()
    db.add_all([suspended, rented, available, blocked, active])
    await db.commit()
    service = RentalService(db)

    cases = [
        (active, suspended, "Cannot assign a suspended vehicle"),
        (active, rented, "Vehicle is already rented"),
        (blocked, available, "Cannot assign vehicle to blocked driver"),
    ]
    for driver, vehicle, message in cases:
        with pytest.raises(HTTPException) as exc_info:
            await service.create_rental(driver.id, vehicle.id, bond_amount=0, weekly_rate=400)
        assert exc_info.value.detail == message


async def test_driver_with_active_rental_cannot_rent_again(db, active_rental):
    _, _, driver = active_rental
    other = make_vehicle()
    db.add(other)
    await db.commit()

    with pytest.raises(HTTPException) as exc_info:
        await RentalService(db).create_rental(driver.id, other.id, bond_amount=0, weekly_rate=400)
    assert exc_info.value.detail == "Driver already has an active rental"


async def test_available_vehicle_with_expired_papers_cannot_be_rented(db):
    vehicle = make_vehicle(pink_slip_expiry=today() - timedelta(days=2))
    driver = make_driver()
    db.add_all([vehicle, driver])
    await db.commit()

    with pytest.raises(HTTPException) as exc_info:
        await RentalService(db).create_rental(driver.id, vehicle.id, bond_amount=0, weekly_rate=400)
    assert "Pink Slip" in exc_info.value.detail


async def test_create_rental_route_marks_vehicle_rented(client, admin_headers, db):
    vehicle = make_vehicle()
    driver = make_driver()
    db.add_all([vehicle, driver])
    await db.commit()
    start = datetime(2026, 5, 4, 9, 0, 0)

    response = await client.post(
        "/api/rentals/",
        json={
            "driver_id": str(driver.id),
            "vehicle_id": str(vehicle.id),
            "weekly_rate": 450,
            "bond_amount": 1000,
            "start_date": start.isoformat(),
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "ACTIVE"
    assert body["vehicle"]["status"] == "RENTED"
    assert datetime.fromisoformat(body["next_payment_date"]) == start + timedelta(days=7)

    refreshed = await db.get(Vehicle, vehicle.id, populate_existing=True)
    assert refreshed.status == "RENTED"


async def test_create_rental_for_unknown_vehicle_is_404(client, admin_headers, db):
    driver = make_driver()
    db.add(driver)
    await db.commit()
    response = await client.post(
        "/api/rentals/",
        json={
            "driver_id": str(driver.id),
            "vehicle_id": "00000000-0000-0000-0000-000000000000",
            "weekly_rate": 450,
            "bond_amount": 1000,
        },
        headers=admin_headers,
    )
    assert response.status_code == 404


async def test_end_rental_frees_vehicle(client, admin_headers, active_rental):
    rental, vehicle, _ = active_rental
    response = await client.post(f"/api/rentals/{rental.id}/end", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "COMPLETED"
    assert body["end_date"] is not None
    assert body["vehicle"]["status"] == "AVAILABLE"

    again = await client.post(f"/api/rentals/{rental.id}/end", headers=admin_headers)
    assert again.status_code == 400


async def test_end_rental_suspends_vehicle_with_lapsed_papers(db, active_rental):
    rental, vehicle, _ = active_rental
    vehicle.rego_expiry = today() - timedelta(days=1)
    await db.commit()

    result = await RentalService(db).end_rental(rental.id)
    assert result["rental"].vehicle.status == "SUSPENDED"


async def test_active_rentals_listing(client, admin_headers, active_rental):
    rental, _, _ = active_rental
    response = await client.get("/api/rentals/active", headers=admin_headers)
    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [str(rental.id)]


async def test_database_allows_one_active_rental_per_driver_and_vehicle(db, active_rental):
    rental, vehicle, driver = active_rental
    other_vehicle = make_vehicle()
    other_driver = make_driver()
    db.add_all([other_vehicle, other_driver])
    await db.commit()
    duplicates = [make_rental(other_vehicle, driver), make_rental(vehicle, other_driver)]
    completed = make_rental(other_vehicle, driver, status="COMPLETED", end_date=datetime.utcnow())

    for duplicate in duplicates:
        db.add(duplicate)
        with pytest.raises(IntegrityError):
            await db.commit()
        await db.rollback()

    db.add(completed)
    await db.commit()


async def test_concurrent_booking_of_same_driver_is_rejected(db, active_rental, monkeypatch):
    _, _, driver = active_rental
    other = make_vehicle()
    db.add(other)
    await db.commit()
    driver_id, vehicle_id = driver.id, other.id

    # Another request committed its rental after this one's active-rental check
    async def no_active_rental(self, column, value):
        return None

    monkeypatch.setattr(RentalService, "_active_rental_for", no_active_rental)
    with pytest.raises(HTTPException) as exc_info:
        await RentalService(db).create_rental(driver_id, vehicle_id, bond_amount=0, weekly_rate=400)
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Driver or vehicle already has an active rental"

    refreshed = await db.get(Vehicle, vehicle_id, populate_existing=True)
    assert refreshed.status == "AVAILABLE"


def fail_commit(monkeypatch, db):
    """Writes reach the database, then the commit fails."""
    async def failing_commit():
        await db.flush()
        raise SQLAlchemyError("commit failed")

    monkeypatch.setattr(db, "commit", failing_commit)


async def test_create_rental_is_all_or_nothing(db, monkeypatch):
    vehicle = make_vehicle()
    driver = make_driver()
    db.add_all([vehicle, driver])
    await db.commit()
    driver_id, vehicle_id = driver.id, vehicle.id

    fail_commit(monkeypatch, db)
    with pytest.raises(SQLAlchemyError):
        await RentalService(db).create_rental(driver_id, vehicle_id, bond_amount=0, weekly_rate=400)

    refreshed = await db.get(Vehicle, vehicle_id, populate_existing=True)
    assert refreshed.status == "AVAILABLE"
    count = await db.execute(select(func.count(Rental.id)).where(Rental.vehicle_id == vehicle_id))
    assert count.scalar() == 0


async def test_end_rental_is_all_or_nothing(db, active_rental, monkeypatch):
    rental, vehicle, _ = active_rental
    rental_id, vehicle_id = rental.id, vehicle.id

    fail_commit(monkeypatch, db)
    with pytest.raises(SQLAlchemyError):
        await RentalService(db).end_rental(rental_id)

    stored_rental = await db.get(Rental, rental_id, populate_existing=True)
    assert stored_rental.status == "ACTIVE"
    assert stored_rental.end_date is None
    stored_vehicle = await db.get(Vehicle, vehicle_id, populate_existing=True)
    assert stored_vehicle.status == "RENTED"
