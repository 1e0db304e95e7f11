from typing import List, Optional
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.api.v1.analytics.schemas import (
    DashboardResponse,
    InvoiceBucket,
    InvoiceStats,
    RentalStats,
    StatusBreakdown,
)
from app.core.exceptions import AppException
from app.core.rideshare_client import MockRideshareClient, get_rideshare_client
from app.core.utils import round_money
from app.models.alert import Alert
from app.models.driver import Driver
from app.models.invoice import Invoice
from app.models.rental import Rental
from app.models.vehicle import Vehicle
from app.models.enums import InvoiceStatus, RentalStatus


class AnalyticsService:
    def __init__(self, db: AsyncSession, rideshare_client: Optional[MockRideshareClient] = None):
        self.db = db
        self.rideshare_client = rideshare_client or get_rideshare_client()
        self.logger = logging.getLogger(__name__)

    async def _status_breakdown(self, model) -> StatusBreakdown:
        result = await self.db.execute(
            select(model.status, func.count(model.id)).group_by(model.status)
        )
        by_status = {status: count for status, count in result.all()}
        return StatusBreakdown(total=sum(by_status.values()), by_status=by_status)

    async def _invoice_bucket(self, status: InvoiceStatus) -> InvoiceBucket:
        result = await self.db.execute(
            select(func.count(Invoice.id), func.coalesce(func.sum(Invoice.amount), 0.0))
            .where(Invoice.status == status.value)
        )
        count, total = result.one()
        return InvoiceBucket(count=count or 0, total=round_money(total))

    async def get_dashboard_data(self) -> DashboardResponse:
        """Fleet, driver, rental, invoice and alert counts for the admin dashboard."""
        active_rentals = await self.db.execute(
            select(func.count(Rental.id)).where(Rental.status == RentalStatus.ACTIVE.value)
        )
        alerts = await self.db.execute(
            select(func.count(Alert.id)).where(Alert.resolved.is_(False))
        )
        return DashboardResponse(
            vehicles=await self._status_breakdown(Vehicle),
            drivers=await self._status_breakdown(Driver),
            rentals=RentalStats(active=active_rentals.scalar() or 0),
            invoices=InvoiceStats(
                pending=await self._invoice_bucket(InvoiceStatus.PENDING),
                overdue=await self._invoice_bucket(InvoiceStatus.OVERDUE),
            ),
            alerts=alerts.scalar() or 0,
        )

    async def get_driver_earnings(self, driver_id: UUID, weeks: int = 4) -> dict:
        driver = await self.db.get(Driver, driver_id)
        if not driver:
            AppException().raise_not_found("Driver", driver_id)
        return {
            "current": self.rideshare_client.fetch_weekly_earnings(driver.id),
            "history": self.rideshare_client.fetch_historical_earnings(driver.id, weeks),
            "analytics": self.rideshare_client.fetch_driver_analytics(driver.id),
        }

    async def get_roi(self) -> List[dict]:
        """This week's rideshare earnings against the weekly rate for every active rental."""
        result = await self.db.execute(
            select(Rental, Vehicle.plate, Driver.name)
            .join(Vehicle, Vehicle.id == Rental.vehicle_id)
            .join(Driver, Driver.id == Rental.driver_id)
            .where(Rental.status == RentalStatus.ACTIVE.value)
            .order_by(Vehicle.plate)
        )

        items = []
        for rental, plate, driver_name in result.all():
            earnings = self.rideshare_client.fetch_weekly_earnings(rental.driver_id)
            gross = earnings["gross_earnings"]
            margin = 0.0
            if gross > rental.weekly_rate:
                margin = round((gross - rental.weekly_rate) / gross * 100, 1)
            items.append({
                "rental_id": rental.id,
                "vehicle_id": rental.vehicle_id,
                "plate": plate,
                "driver_id": rental.driver_id,
                "driver_name": driver_name,
                "weekly_rate": rental.weekly_rate,
                "driver_earnings": gross,
                "net_earnings": earnings["net_earnings"],
                "trips": earnings["trips"],
                "profit_margin": margin,
            })
        return items
