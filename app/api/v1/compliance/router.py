from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.compliance.schemas import (
    AlertResponse,
    AlertWithVehicleResponse,
    ComplianceSweepResponse,
    UpcomingExpiryVehicle,
)
from app.api.v1.compliance.service import ComplianceService
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


@router.post(
    "/check",
    response_model=ComplianceSweepResponse,
    summary="Run compliance sweep",
    description=(
        "Suspend every AVAILABLE or RENTED vehicle with an expired rego, CTP or pink slip and raise "
        "one alert per newly detected document. Safe to re-run. Admin only."
    ),
)
async def run_compliance_check(db: AsyncSession = Depends(get_db)):
    service = ComplianceService(db)
    return await service.check_expiries()


@router.get(
    "/alerts",
    response_model=List[AlertWithVehicleResponse],
    summary="Get unresolved alerts",
    description="Unresolved compliance alerts, newest first. Admin only.",
)
async def get_unresolved_alerts(db: AsyncSession = Depends(get_db)):
    service = ComplianceService(db)
    alerts = await service.get_unresolved_alerts()
    return [AlertWithVehicleResponse.model_validate(alert) for alert in alerts]


@router.post(
    "/alerts/{alert_id}/resolve",
    response_model=AlertResponse,
    summary="Resolve alert",
    description="Acknowledge an alert. The vehicle's status is not changed. Admin only.",
)
async def resolve_alert(
    alert_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ComplianceService(db)
    alert = await service.resolve_alert(alert_id)
    return AlertResponse.model_validate(alert)


@router.get(
    "/upcoming-expiries",
    response_model=List[UpcomingExpiryVehicle],
    summary="Get upcoming expiries",
    description="Non-suspended vehicles with a document expiring within 30 days. Admin only.",
)
async def get_upcoming_expiries(db: AsyncSession = Depends(get_db)):
    service = ComplianceService(db)
    return await service.get_upcoming_expiries()
