"""
Driver lifecycle:
- Registration runs the VEVO check when a passport is given; a denial blocks the driver immediately.
- A driver with a DENIED VEVO status can never be approved or set ACTIVE.
- Email and licence number are unique.
"""
import pytest
from fastapi import HTTPException

from app.api.v1.drivers.service import DriverService
from app.models.enums import DriverStatus, VevoStatus
from conftest import make_driver


def driver_payload(**overrides):
    payload = {
        "name": "Jane Citizen",
        "email": "jane@example.com",
        "phone": "0411111111",
        "license_no": "NSW7654321",
        "passport_no": "PA7654321",
    }
    payload.update(overrides)
    return payload


async def test_register_with_denied_passport_blocks_immediately(client, admin_headers):
    response = await client.post(
        "/api/drivers/", json=driver_payload(passport_no="PA5670000"), headers=admin_headers
    )
    assert response.status_code == 201
    body = response.json()
    assert body["vevo_status"] == "DENIED"
    assert body["status"] == "BLOCKED"


async def test_register_with_approved_passport_waits_for_approval(client, admin_headers):
    response = await client.post("/api/drivers/", json=driver_payload(), headers=admin_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["vevo_status"] == "APPROVED"
    assert body["status"] == "PENDING_APPROVAL"
    assert body["vevo_checked_at"] is not None


async def test_register_without_passport_leaves_vevo_pending(client, admin_headers):
    response = await client.post("/api/drivers/", json=driver_payload(passport_no=None), headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["vevo_status"] == "PENDING"

    vevo = await client.post(f"/api/drivers/{response.json()['id']}/vevo-check", headers=admin_headers)
    assert vevo.status_code == 400


async def test_register_rejects_duplicate_email_and_license(client, admin_headers):
    assert (await client.post("/api/drivers/", json=driver_payload(), headers=admin_headers)).status_code == 201

    same_email = await client.post(
        "/api/drivers/", json=driver_payload(license_no="NSW0000001"), headers=admin_headers
    )
    assert same_email.status_code == 400

    same_license = await client.post(
        "/api/drivers/", json=driver_payload(email="other@example.com"), headers=admin_headers
    )
    assert same_license.status_code == 400


@pytest.mark.parametrize("status", [s.value for s in DriverStatus])
async def test_approve_fails_for_denied_vevo_in_any_status(db, status):
    driver = make_driver(vevo_status=VevoStatus.DENIED.value, status=status)
    db.add(driver)
    await db.commit()

    with pytest.raises(HTTPException) as exc_info:
        await DriverService(db).approve_driver(driver.id)
    assert exc_info.value.status_code == 400

    await db.refresh(driver)
    assert driver.status == status


async def test_approve_and_block_driver(client, admin_headers, db):
    driver = make_driver(status=DriverStatus.PENDING_APPROVAL.value)
    db.add(driver)
    await db.commit()

    approved = await client.post(f"/api/drivers/{driver.id}/approve", headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["status"] == "ACTIVE"

    blocked = await client.post(
        f"/api/drivers/{driver.id}/block", json={"reason": "Unpaid tolls"}, headers=admin_headers
    )
    assert blocked.status_code == 200
    assert blocked.json()["status"] == "BLOCKED"


async def test_vevo_recheck_denial_blocks_active_driver(client, admin_headers, db):
    driver = make_driver(passport_no="PB1110000")
    db.add(driver)
    await db.commit()

    response = await client.post(f"/api/drivers/{driver.id}/vevo-check", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["vevo_status"] == "DENIED"
    assert response.json()["status"] == "BLOCKED"


async def test_update_cannot_activate_denied_driver(client, admin_headers, db):
    driver = make_driver(vevo_status=VevoStatus.DENIED.value, status=DriverStatus.BLOCKED.value)
    db.add(driver)
    await db.commit()

    response = await client.put(f"/api/drivers/{driver.id}", json={"status": "ACTIVE"}, headers=admin_headers)
    assert response.status_code == 400


async def test_driver_listing_and_detail_show_active_rental(client, admin_headers, active_rental):
    rental, vehicle, driver = active_rental

    listing = await client.get("/api/drivers/", headers=admin_headers)
    assert listing.status_code == 200
    [item] = listing.json()
    assert item["active_rental_id"] == str(rental.id)
    assert item["active_vehicle_plate"] == vehicle.plate

    detail = await client.get(f"/api/drivers/{driver.id}", headers=admin_headers)
    assert detail.status_code == 200
    assert detail.json()["rentals"][0]["id"] == str(rental.id)


async def test_delete_driver_with_rental_is_rejected(client, admin_headers, active_rental):
    _, _, driver = active_rental
    response = await client.delete(f"/api/drivers/{driver.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete driver with active rental"


async def test_get_unknown_driver_is_404(client, admin_headers):
    response = await client.get("/api/drivers/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert response.status_code == 404
