"""
Cron job: compliance sweep, overdue sweep and billing cycle.
Each job runs in its own session so a failure in one never blocks the others.
"""
import logging

from app.api.v1.compliance.service import ComplianceService
from app.api.v1.invoices.service import BillingService
from app.core.database import get_async_session_maker_instance

logger = logging.getLogger(__name__)


async def run_compliance_sweep() -> dict:
    session_maker = get_async_session_maker_instance()
    async with session_maker() as session:
        return await ComplianceService(session).check_expiries()


async def run_overdue_sweep() -> int:
    session_maker = get_async_session_maker_instance()
    async with session_maker() as session:
        return await BillingService(session).check_overdue_invoices()


async def run_billing_cycle() -> dict:
    session_maker = get_async_session_maker_instance()
    async with session_maker() as session:
        return await BillingService(session).run_billing_cycle()


async def run_fleet_jobs() -> dict:
    """Run every fleet job once and return a summary keyed by job name."""
    logger.info("Cron: fleet jobs started")
    summary = {}
    jobs = (
        ("compliance", run_compliance_sweep),
        ("overdue", run_overdue_sweep),
        ("billing", run_billing_cycle),
    )
    for name, job in jobs:
        try:
            result = await job()
        except Exception as e:
            logger.exception("Cron: %s job failed: %s", name, e)
            summary[name] = {"error": str(e)}
            continue
        if name == "compliance":
            logger.info(
                "Cron: compliance sweep checked %d vehicles, suspended %d",
                result["checked_count"], result["suspended_count"],
            )
        elif name == "overdue":
            logger.info("Cron: %d invoice(s) marked overdue", result)
        else:
            logger.info(
                "Cron: billing cycle generated %d invoice(s), %d already invoiced, %d errors",
                result["generated"], result["already_exists"], result["errors"],
            )
        summary[name] = result
    logger.info("Cron: fleet jobs finished")
    return summary
