"""
Weekly billing:
- amount = weekly rate + tolls + fines - credits, fixed at creation.
- Paying an invoice marks it PAID and takes the amount off the driver's balance.
- The billing cycle never bills the same period twice; a rental that fails is reported and the rest are billed.
- PENDING invoices past their due date become OVERDUE; "today" is the UTC date whatever the host timezone.
"""
import time
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from app.api.v1.invoices.service import BillingService, invoice_total
from app.core.utils import today
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.enums import InvoiceStatus
from conftest import make_driver, make_invoice, make_rental, make_vehicle


@pytest.mark.parametrize(
    "weekly_rate, tolls, fines, credits, expected",
    [
        (450, 20, 0, 10, 460),
        (450, 0, 0, 0, 450),
        (380, 12.35, 110, 0, 502.35),
        (300, 0, 0, 320, -20),
    ],
)
def test_invoice_total(weekly_rate, tolls, fines, credits, expected):
    assert invoice_total(weekly_rate, tolls, fines, credits) == pytest.approx(expected)


async def test_generate_invoice_and_pay_it(client, admin_headers, db):
    vehicle = make_vehicle(weekly_rate=450.0)
    driver = make_driver(balance=100.0)
    db.add_all([vehicle, driver])
    await db.flush()
    rental = make_rental(vehicle, driver)
    db.add(rental)
    await db.commit()
    first_payment = rental.next_payment_date

    generated = await client.post(
        "/api/invoices/generate",
        json={"rental_id": str(rental.id), "tolls": 20, "fines": 0, "credits": 10},
        headers=admin_headers,
    )
    assert generated.status_code == 201
    invoice = generated.json()
    assert invoice["amount"] == 460
    assert invoice["status"] == "PENDING"
    assert invoice["rental"]["driver"]["id"] == str(driver.id)

    refreshed_rental = await db.get(Rental, rental.id, populate_existing=True)
    assert refreshed_rental.next_payment_date == first_payment + timedelta(days=7)

    paid = await client.post(f"/api/invoices/{invoice['id']}/pay", headers=admin_headers)
    assert paid.status_code == 200
    assert paid.json()["status"] == "PAID"
    assert paid.json()["paid_at"] is not None

    refreshed_driver = await db.get(Driver, driver.id, populate_existing=True)
    assert refreshed_driver.balance == -360

    again = await client.post(f"/api/invoices/{invoice['id']}/pay", headers=admin_headers)
    assert again.status_code == 400


async def test_generate_invoice_rejects_negative_components(client, admin_headers, active_rental):
    rental, _, _ = active_rental
    response = await client.post(
        "/api/invoices/generate",
        json={"rental_id": str(rental.id), "tolls": -5},
        headers=admin_headers,
    )
    assert response.status_code == 422


async def test_billing_cycle_runs_once_per_period(client, admin_headers, db):
    vehicle = make_vehicle()
    driver = make_driver()
    not_due_vehicle = make_vehicle()
    not_due_driver = make_driver()
    db.add_all([vehicle, driver, not_due_vehicle, not_due_driver])
    await db.flush()
    due = make_rental(vehicle, driver, start_date=datetime.utcnow() - timedelta(days=20))
    not_due = make_rental(not_due_vehicle, not_due_driver)
    db.add_all([due, not_due])
    await db.commit()

    first = await client.post("/api/invoices/run-billing-cycle", headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["generated"] == 1
    assert first.json()["results"][0]["rental_id"] == str(due.id)

    second = await client.post("/api/invoices/run-billing-cycle", headers=admin_headers)
    assert second.status_code == 200
    assert second.json()["generated"] == 0
    assert second.json()["already_exists"] == 1
    assert second.json()["results"][0]["status"] == "already_exists"

    count = await db.execute(select(func.count(Invoice.id)).where(Invoice.rental_id == due.id))
    assert count.scalar() == 1


async def test_billing_cycle_records_rental_failure_and_continues(db, monkeypatch):
    rentals = []
    for _ in range(2):
        vehicle = make_vehicle(status="RENTED")
        driver = make_driver()
        db.add_all([vehicle, driver])
        await db.flush()
        rentals.append(make_rental(vehicle, driver, start_date=datetime.utcnow() - timedelta(days=20)))
    db.add_all(rentals)
    await db.commit()
    failing_id, healthy_id = rentals[0].id, rentals[1].id

    original = BillingService.generate_invoice

    async def flaky_generate(self, rental_id, *args, **kwargs):
        if rental_id == failing_id:
            raise RuntimeError("boom")
        return await original(self, rental_id, *args, **kwargs)

    monkeypatch.setattr(BillingService, "generate_invoice", flaky_generate)
    result = await BillingService(db).run_billing_cycle()

    by_rental = {r["rental_id"]: r for r in result["results"]}
    assert by_rental[failing_id] == {"rental_id": failing_id, "status": "error", "error": "boom"}
    assert by_rental[healthy_id]["status"] == "generated"
    assert (result["generated"], result["already_exists"], result["errors"]) == (1, 0, 1)

    invoiced = await db.execute(select(Invoice.rental_id))
    assert [rental_id for (rental_id,) in invoiced] == [healthy_id]


async def test_check_overdue_flags_only_pending_past_due(client, admin_headers, db, active_rental):
    rental, _, _ = active_rental
    yesterday = datetime.utcnow() - timedelta(days=1)
    late = make_invoice(rental, due_date=yesterday)
    paid = make_invoice(rental, due_date=yesterday, status=InvoiceStatus.PAID.value, paid_at=yesterday)
    upcoming = make_invoice(rental)
    db.add_all([late, paid, upcoming])
    await db.commit()

    response = await client.post("/api/invoices/check-overdue", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 1

    statuses = {
        invoice.id: invoice.status
        for invoice in (
            await db.execute(select(Invoice).execution_options(populate_existing=True))
        ).scalars()
    }
    assert statuses == {late.id: "OVERDUE", paid.id: "PAID", upcoming.id: "PENDING"}


@pytest.fixture
def sydney_local_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    monkeypatch.setenv("TZ", "Australia/Sydney")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


async def test_check_overdue_uses_utc_date_on_non_utc_host(client, admin_headers, db, active_rental, sydney_local_time):
    rental, _, _ = active_rental
    later_today = make_invoice(rental, due_date=datetime.utcnow() + timedelta(hours=1))
    db.add(later_today)
    await db.commit()

    assert today() == datetime.utcnow().date()
    response = await client.post("/api/invoices/check-overdue", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 0

    await db.refresh(later_today)
    assert later_today.status == InvoiceStatus.PENDING.value


async def test_mark_as_paid_via_service_decrements_balance(db, active_rental):
    rental, _, driver = active_rental
    driver.balance = 100.0
    invoice = make_invoice(rental, tolls=20.0, credits=10.0, amount=460.0)
    db.add(invoice)
    await db.commit()

    await BillingService(db).mark_as_paid(invoice.id)
    assert (await db.get(Driver, driver.id, populate_existing=True)).balance == -360


async def test_invoice_pdf_and_excel_export(client, admin_headers, db, active_rental):
    rental, _, _ = active_rental
    invoice = make_invoice(rental, tolls=12.5, amount=462.5)
    db.add(invoice)
    await db.commit()

    pdf = await client.get(f"/api/invoices/{invoice.id}/pdf", headers=admin_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert f"invoice-{str(invoice.id)[:8]}.pdf" in pdf.headers["content-disposition"]

    export = await client.get("/api/invoices/export", headers=admin_headers)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    # xlsx files are zip archives
    assert export.content[:2] == b"PK"


async def test_unknown_invoice_is_404(client, admin_headers):
    missing = "00000000-0000-0000-0000-000000000000"
    assert (await client.get(f"/api/invoices/{missing}", headers=admin_headers)).status_code == 404
    assert (await client.post(f"/api/invoices/{missing}/pay", headers=admin_headers)).status_code == 404
