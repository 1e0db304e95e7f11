"""Admin dashboard counts, driver earnings and rental ROI."""
import random
import uuid
from datetime import datetime, timedelta

import pytest

from app.api.v1.analytics.service import AnalyticsService
from app.core.rideshare_client import MockRideshareClient
from app.models.alert import Alert
from conftest import make_driver, make_invoice, make_rental, make_vehicle


class FixedEarningsClient(MockRideshareClient):
    def __init__(self, gross: float):
        super().__init__(random.Random(0))
        self.gross = gross

    def fetch_weekly_earnings(self, driver_id):
        return {
            "driver_id": driver_id,
            "week_starting": datetime(2026, 3, 2),
            "gross_earnings": self.gross,
            "net_earnings": round(self.gross * 0.75, 2),
            "trips": 50,
            "hours_online": 30,
            "avg_earnings_per_trip": round(self.gross / 50, 2),
            "platform": "uber",
        }


async def test_dashboard_counts(client, admin_headers, db, active_rental):
    rental, vehicle, _ = active_rental
    suspended = make_vehicle(status="SUSPENDED")
    db.add_all([
        make_vehicle(),
        suspended,
        make_driver(status="PENDING_APPROVAL"),
        make_invoice(rental, amount=450.0),
        make_invoice(rental, amount=460.0, status="OVERDUE", due_date=datetime.utcnow() - timedelta(days=3)),
        make_invoice(rental, amount=470.0, status="PAID"),
    ])
    await db.flush()
    db.add(Alert(vehicle_id=suspended.id, type="CTP_EXPIRY", message="CTP expired", resolved=False))
    await db.commit()

    response = await client.get("/api/analytics/dashboard", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["vehicles"]["total"] == 3
    assert body["vehicles"]["by_status"] == {"AVAILABLE": 1, "RENTED": 1, "SUSPENDED": 1}
    assert body["drivers"]["by_status"] == {"ACTIVE": 1, "PENDING_APPROVAL": 1}
    assert body["rentals"]["active"] == 1
    assert body["invoices"]["pending"] == {"count": 1, "total": 450.0}
    assert body["invoices"]["overdue"] == {"count": 1, "total": 460.0}
    assert body["alerts"] == 1


@pytest.mark.parametrize(
    "gross, expected_margin",
    [(1000.0, 55.0), (450.0, 0.0), (300.0, 0.0), (1200.0, 62.5)],
)
async def test_roi_profit_margin(db, active_rental, gross, expected_margin):
    rental, vehicle, driver = active_rental
    items = await AnalyticsService(db, rideshare_client=FixedEarningsClient(gross)).get_roi()
    assert len(items) == 1
    item = items[0]
    assert item["rental_id"] == rental.id
    assert item["plate"] == vehicle.plate
    assert item["driver_name"] == driver.name
    assert item["driver_earnings"] == gross
    assert item["profit_margin"] == expected_margin


async def test_roi_skips_completed_rentals(db):
    vehicle = make_vehicle()
    driver = make_driver()
    db.add_all([vehicle, driver])
    await db.flush()
    db.add(make_rental(vehicle, driver, status="COMPLETED", end_date=datetime.utcnow()))
    await db.commit()

    assert await AnalyticsService(db, rideshare_client=FixedEarningsClient(900.0)).get_roi() == []


async def test_driver_earnings(client, admin_headers, active_rental):
    _, _, driver = active_rental
    response = await client.get(
        f"/api/analytics/drivers/{driver.id}/earnings", params={"weeks": 6}, headers=admin_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert len(body["history"]) == 6
    assert 800 <= body["current"]["gross_earnings"] < 1500
    assert body["current"]["platform"] == "uber"
    assert 4.5 <= body["analytics"]["rating"] <= 5.0


async def test_driver_earnings_for_unknown_driver(client, admin_headers):
    response = await client.get(f"/api/analytics/drivers/{uuid.uuid4()}/earnings", headers=admin_headers)
    assert response.status_code == 404


async def test_seeded_client_is_repeatable():
    driver_id = uuid.uuid4()
    first = MockRideshareClient(random.Random(7)).fetch_historical_earnings(driver_id, 3)
    second = MockRideshareClient(random.Random(7)).fetch_historical_earnings(driver_id, 3)
    assert first == second
    assert first[0]["week_starting"] - first[1]["week_starting"] == timedelta(days=7)


async def test_analytics_is_admin_only(client, driver_headers):
    assert (await client.get("/api/analytics/dashboard", headers=driver_headers)).status_code == 403
