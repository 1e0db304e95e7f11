from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.driver_dashboard.schemas import (
    AccidentReportCreatedResponse,
    AccidentReportRequest,
    AccidentReportResponse,
    ActiveRentalResponse,
    ConditionReportResponse,
    EndShiftRequest,
    EndShiftResponse,
    ReturnVehicleRequest,
    ReturnVehicleResponse,
    ShiftResponse,
    StartShiftRequest,
    StartShiftResponse,
)
from app.api.v1.driver_dashboard.service import DriverDashboardService
from app.core.deps import get_db, get_current_driver
from app.models.driver import Driver

router = APIRouter()


@router.get(
    "/active-rental",
    response_model=ActiveRentalResponse,
    summary="Active rental",
    description=(
        "The driver's current vehicle, document links and today's shift. The shift is opened as "
        "NOT_STARTED on first request of the day. Admins pass driver_id."
    ),
)
async def get_active_rental(
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    service = DriverDashboardService(db, driver)
    return await service.get_active_rental()


@router.post(
    "/start-shift",
    response_model=StartShiftResponse,
    summary="Start shift",
    description="Submit the pre-shift condition report and mark today's shift ACTIVE.",
)
async def start_shift(
    data: StartShiftRequest,
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    service = DriverDashboardService(db, driver)
    result = await service.start_shift(data)
    return StartShiftResponse(
        shift=ShiftResponse.model_validate(result["shift"]),
        condition_report=ConditionReportResponse.model_validate(result["condition_report"]),
    )


@router.post(
    "/end-shift",
    response_model=EndShiftResponse,
    summary="End shift",
)
async def end_shift(
    data: EndShiftRequest,
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    service = DriverDashboardService(db, driver)
    result = await service.end_shift(data.shift_id)
    return EndShiftResponse(shift=ShiftResponse.model_validate(result["shift"]))


@router.post(
    "/return-vehicle",
    response_model=ReturnVehicleResponse,
    summary="Request vehicle return",
    description="Closes the given shift. The rental is completed by an admin when the vehicle is back at the depot.",
)
async def return_vehicle(
    data: ReturnVehicleRequest,
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    service = DriverDashboardService(db, driver)
    return await service.request_return(data.shift_id)


@router.post(
    "/accident-report",
    response_model=AccidentReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report accident",
    description="Record an accident on the active rental. Reports captured offline keep their original occurred_at.",
)
async def report_accident(
    data: AccidentReportRequest,
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    service = DriverDashboardService(db, driver)
    report = await service.report_accident(data)
    return AccidentReportCreatedResponse(report=AccidentReportResponse.model_validate(report))
