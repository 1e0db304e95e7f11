"""The scheduled fleet jobs run every sweep in its own session and report per job."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from app.core.utils import today
from app.cron import fleet_jobs
from app.models.invoice import Invoice
from app.models.vehicle import Vehicle
from conftest import make_driver, make_invoice, make_rental, make_vehicle


@pytest.fixture
def job_sessions(monkeypatch, session_maker):
    monkeypatch.setattr(fleet_jobs, "get_async_session_maker_instance", lambda: session_maker)
    return session_maker


async def test_run_fleet_jobs(job_sessions, db):
    lapsed = make_vehicle(rego_expiry=today() - timedelta(days=1))
    vehicle = make_vehicle(status="RENTED")
    driver = make_driver()
    db.add_all([lapsed, vehicle, driver])
    await db.flush()
    rental = make_rental(vehicle, driver, start_date=datetime.utcnow() - timedelta(days=10))
    db.add(rental)
    await db.flush()
    # Last week's invoice, unpaid and due before the current period
    late = make_invoice(rental, due_date=datetime.utcnow() - timedelta(days=5))
    db.add(late)
    await db.commit()

    summary = await fleet_jobs.run_fleet_jobs()

    assert set(summary) == {"compliance", "overdue", "billing"}
    assert summary["compliance"]["suspended_count"] == 1
    assert summary["overdue"] == 1
    assert summary["billing"]["generated"] == 1

    assert (await db.get(Vehicle, lapsed.id, populate_existing=True)).status == "SUSPENDED"
    invoices = (
        await db.execute(
            select(Invoice).where(Invoice.rental_id == rental.id).execution_options(populate_existing=True)
        )
    ).scalars().all()
    assert sorted(i.status for i in invoices) == ["OVERDUE", "PENDING"]


async def test_failed_job_does_not_stop_the_others(job_sessions, monkeypatch):
    async def broken():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(fleet_jobs, "run_compliance_sweep", broken)
    summary = await fleet_jobs.run_fleet_jobs()

    assert summary["compliance"] == {"error": "database unavailable"}
    assert summary["overdue"] == 0
    assert summary["billing"]["generated"] == 0
