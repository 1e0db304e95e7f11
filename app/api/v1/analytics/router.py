from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.analytics.schemas import DashboardResponse, DriverEarningsResponse, RoiItem
from app.api.v1.analytics.service import AnalyticsService
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard analytics",
    description="Vehicle and driver counts by status, active rentals, pending/overdue invoices and open alerts. Admin only.",
)
async def get_dashboard(db: AsyncSession = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_dashboard_data()


@router.get(
    "/drivers/{driver_id}/earnings",
    response_model=DriverEarningsResponse,
    summary="Driver earnings",
    description="Current week, history and lifetime figures from the rideshare platform (mocked). Admin only.",
)
async def get_driver_earnings(
    driver_id: UUID,
    weeks: int = Query(4, ge=1, le=52, description="Weeks of history"),
    db: AsyncSession = Depends(get_db),
):
    service = AnalyticsService(db)
    return await service.get_driver_earnings(driver_id, weeks=weeks)


@router.get(
    "/roi",
    response_model=List[RoiItem],
    summary="Fleet ROI",
    description="Weekly rate against the driver's rideshare earnings for each active rental. Admin only.",
)
async def get_roi(db: AsyncSession = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_roi()
