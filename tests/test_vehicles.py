"""
Vehicle management:
- New vehicles always start as DRAFT and VIN/plate are unique.
- Admin status changes are limited to DRAFT/AVAILABLE/SUSPENDED and re-run the compliance check.
- Vehicles with rentals cannot be deleted.
- Routes are admin only.
"""
from datetime import timedelta

from sqlalchemy import select

from app.core.utils import today
from app.models.vehicle import Vehicle
from app.models.enums import VehicleStatus
from conftest import make_driver, make_rental, make_vehicle


def vehicle_payload(**overrides):
    in_a_year = (today() + timedelta(days=365)).isoformat()
    payload = {
        "vin": "JTDBR32E720012345",
        "plate": "ABC123",
        "make": "Toyota",
        "model": "Camry",
        "year": 2023,
        "color": "White",
        "rego_expiry": in_a_year,
        "ctp_expiry": in_a_year,
        "pink_slip_expiry": in_a_year,
        "weekly_rate": 450,
        "bond_amount": 1000,
    }
    payload.update(overrides)
    return payload


async def test_create_vehicle_always_starts_as_draft(client, admin_headers):
    response = await client.post(
        "/api/vehicles/", json=vehicle_payload(status="AVAILABLE"), headers=admin_headers
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "DRAFT"
    assert body["plate"] == "ABC123"


async def test_create_vehicle_rejects_duplicate_vin_and_plate(client, admin_headers):
    first = await client.post("/api/vehicles/", json=vehicle_payload(), headers=admin_headers)
    assert first.status_code == 201

    same_vin = await client.post("/api/vehicles/", json=vehicle_payload(plate="XYZ999"), headers=admin_headers)
    assert same_vin.status_code == 400
    assert "VIN" in same_vin.json()["message"]

    same_plate = await client.post("/api/vehicles/", json=vehicle_payload(vin="OTHERVIN1"), headers=admin_headers)
    assert same_plate.status_code == 400
    assert "plate" in same_plate.json()["message"]


async def test_list_vehicles_includes_compliance_and_current_driver(client, admin_headers, active_rental):
    rental, vehicle, driver = active_rental
    response = await client.get("/api/vehicles/", headers=admin_headers)
    assert response.status_code == 200
    [item] = response.json()
    assert item["compliance"] == {"rego": "GREEN", "ctp": "GREEN", "pink_slip": "GREEN"}
    assert item["current_driver"]["id"] == str(driver.id)
    assert item["current_driver"]["rental_id"] == str(rental.id)


async def test_get_vehicle_by_vin_and_missing_vehicle(client, admin_headers, db):
    vehicle = make_vehicle()
    db.add(vehicle)
    await db.commit()

    found = await client.get(f"/api/vehicles/vin/{vehicle.vin}", headers=admin_headers)
    assert found.status_code == 200
    assert found.json()["id"] == str(vehicle.id)
    assert found.json()["alerts"] == []

    missing = await client.get("/api/vehicles/vin/NOPE", headers=admin_headers)
    assert missing.status_code == 404


async def test_reactivating_expired_vehicle_keeps_it_suspended(client, admin_headers, db):
    vehicle = make_vehicle(
        status=VehicleStatus.SUSPENDED.value,
        rego_expiry=today() - timedelta(days=1),
    )
    db.add(vehicle)
    await db.commit()

    response = await client.put(
        f"/api/vehicles/{vehicle.id}", json={"status": "AVAILABLE"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "SUSPENDED"

    renewed = await client.patch(
        f"/api/vehicles/{vehicle.id}",
        json={"status": "AVAILABLE", "rego_expiry": (today() + timedelta(days=200)).isoformat()},
        headers=admin_headers,
    )
    assert renewed.status_code == 200
    assert renewed.json()["status"] == "AVAILABLE"


async def test_status_cannot_be_set_to_rented(client, admin_headers, db):
    vehicle = make_vehicle()
    db.add(vehicle)
    await db.commit()

    response = await client.put(f"/api/vehicles/{vehicle.id}", json={"status": "RENTED"}, headers=admin_headers)
    assert response.status_code == 400


async def test_status_change_rejected_during_active_rental(client, admin_headers, active_rental):
    _, vehicle, _ = active_rental
    response = await client.put(f"/api/vehicles/{vehicle.id}", json={"status": "AVAILABLE"}, headers=admin_headers)
    assert response.status_code == 400
    assert "active rental" in response.json()["message"]


async def test_check_compliance_suspends_expired_vehicle(client, admin_headers, db):
    vehicle = make_vehicle(ctp_expiry=today() - timedelta(days=3))
    db.add(vehicle)
    await db.commit()

    response = await client.post(f"/api/vehicles/{vehicle.id}/check-compliance", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["is_compliant"] is False
    assert body["vehicle"]["status"] == "SUSPENDED"
    assert body["issues"][0].startswith("CTP (Green Slip) expired on")


async def test_delete_vehicle_guards(client, admin_headers, db):
    driver, former_driver = make_driver(), make_driver()
    rented = make_vehicle(status=VehicleStatus.RENTED.value)
    returned = make_vehicle()
    unused = make_vehicle()
    db.add_all([driver, former_driver, rented, returned, unused])
    await db.flush()
    db.add(make_rental(rented, driver))
    db.add(make_rental(returned, former_driver, status="COMPLETED"))
    await db.commit()

    active = await client.delete(f"/api/vehicles/{rented.id}", headers=admin_headers)
    assert active.status_code == 400
    assert active.json()["message"] == "Cannot delete vehicle with active rental"

    history = await client.delete(f"/api/vehicles/{returned.id}", headers=admin_headers)
    assert history.status_code == 400
    assert history.json()["message"] == "Cannot delete vehicle with rental history"

    ok = await client.delete(f"/api/vehicles/{unused.id}", headers=admin_headers)
    assert ok.status_code == 200

    remaining = await db.execute(select(Vehicle.id).where(Vehicle.id == unused.id))
    assert remaining.first() is None


async def test_vehicle_routes_require_admin(client, driver_headers):
    assert (await client.get("/api/vehicles/")).status_code == 401
    assert (await client.get("/api/vehicles/", headers=driver_headers)).status_code == 403
