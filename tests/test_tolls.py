"""Toll statement import: CSV parsing, per-row errors and linking charges to pending invoices."""
from datetime import datetime

import pytest
from fastapi import HTTPException

from app.api.v1.tolls.service import TollService
from app.models.invoice import Invoice
from app.core.utils import parse_flexible_date
from conftest import make_invoice, make_vehicle


def upload(content: str):
    return {"file": ("tolls.csv", content.encode("utf-8"), "text/csv")}


def test_parse_csv_normalizes_headers_and_skips_blank_rows():
    content = "\ufeff Plate ,DATE,Amount,Location\nABC123,2026-03-01,4.50,M2\n,,,\n".encode("utf-8")
    rows = TollService.parse_csv(content)
    assert rows == [{"plate": "ABC123", "date": "2026-03-01", "amount": "4.50", "location": "M2"}]


def test_parse_csv_reports_missing_columns():
    with pytest.raises(HTTPException) as exc:
        TollService.parse_csv(b"Plate,Amount\nABC123,4.50\n")
    assert exc.value.status_code == 400
    assert "date" in exc.value.detail


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2026-03-01", datetime(2026, 3, 1)),
        ("2026-03-01T08:30:00Z", datetime(2026, 3, 1, 8, 30)),
        ("2026-03-01T18:30:00+10:00", datetime(2026, 3, 1, 8, 30)),
        ("14/03/2026", datetime(2026, 3, 14)),
        ("not a date", None),
        ("", None),
    ],
)
def test_parse_flexible_date(value, expected):
    assert parse_flexible_date(value) == expected


async def test_upload_links_tolls_to_pending_invoice(client, admin_headers, db, active_rental):
    rental, vehicle, _ = active_rental
    invoice = make_invoice(rental)
    db.add(invoice)
    idle = make_vehicle(plate="IDLE001")
    db.add(idle)
    await db.commit()

    csv_text = (
        "Plate,Date,Amount,Location\n"
        f"{vehicle.plate},2026-03-01,4.50,Harbour Bridge\n"
        f"{vehicle.plate},02/03/2026,8.25,M5\n"
        "IDLE001,2026-03-02,3.00,\n"
        "NOPE999,2026-03-02,3.00,\n"
        f"{vehicle.plate},yesterday,3.00,\n"
        f"{vehicle.plate},2026-03-02,-1,\n"
    )
    response = await client.post("/api/tolls/upload", files=upload(csv_text), headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["processed"] == 3
    assert body["errors"] == 3
    assert [r["linked_to_invoice"] for r in body["results"]] == [True, True, False]
    assert [(e["row"], e["error"]) for e in body["error_details"]] == [
        (5, "Vehicle not found"),
        (6, "Invalid data format"),
        (7, "Invalid data format"),
    ]

    updated = await db.get(Invoice, invoice.id, populate_existing=True)
    assert updated.tolls == pytest.approx(12.75)
    assert updated.amount == pytest.approx(rental.weekly_rate + 12.75)

    listed = await client.get("/api/tolls/", params={"plate": vehicle.plate}, headers=admin_headers)
    assert len(listed.json()) == 2
    assert all(t["invoice_id"] == str(invoice.id) for t in listed.json())


async def test_upload_rejects_file_without_required_columns(client, admin_headers):
    response = await client.post(
        "/api/tolls/upload", files=upload("Plate,Amount\nABC123,4.50\n"), headers=admin_headers
    )
    assert response.status_code == 400
    assert "missing column" in response.json()["message"]


async def test_upload_requires_admin(client, driver_headers):
    response = await client.post("/api/tolls/upload", files=upload("Plate,Date,Amount\n"), headers=driver_headers)
    assert response.status_code == 403
