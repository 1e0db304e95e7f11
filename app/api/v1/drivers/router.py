from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.drivers.schemas import (
    BlockDriverRequest,
    DriverDetailResponse,
    DriverListItem,
    DriverResponse,
    RegisterDriverRequest,
    UpdateDriverRequest,
)
from app.api.v1.drivers.service import DriverService
from app.api.v1.vehicles.schemas import MessageResponse
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


@router.get(
    "/",
    response_model=List[DriverListItem],
    summary="Get all drivers",
    description="List drivers, optionally filtered by status, with their current rental. Admin only.",
)
async def get_all_drivers(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    status: Optional[str] = Query(None, description="Filter by status (PENDING_APPROVAL/ACTIVE/BLOCKED/INACTIVE)"),
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.get_all_drivers(skip=skip, limit=limit, status=status)
    return [
        DriverListItem(
            **DriverResponse.model_validate(item["driver"]).model_dump(),
            active_rental_id=item["active_rental_id"],
            active_vehicle_plate=item["active_vehicle_plate"],
        )
        for item in result["drivers"]
    ]


@router.get(
    "/{driver_id}",
    response_model=DriverDetailResponse,
    summary="Get driver by ID",
    description="Retrieve a driver with rental history and invoices. Admin only.",
)
async def get_driver_by_id(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.get_driver_by_id(driver_id)
    return DriverDetailResponse.model_validate(result["driver"])


@router.post(
    "/",
    response_model=DriverResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a driver",
    description=(
        "Register a driver. When a passport number is supplied the VEVO check runs immediately "
        "and a DENIED result registers the driver as BLOCKED. Admin only."
    ),
)
async def register_driver(
    driver_data: RegisterDriverRequest,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.register_driver(driver_data)
    return DriverResponse.model_validate(result["driver"])


@router.put(
    "/{driver_id}",
    response_model=DriverResponse,
    summary="Update driver",
    description="Update a driver's details. Admin only.",
)
async def update_driver(
    driver_id: UUID,
    driver_data: UpdateDriverRequest,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.update_driver(driver_id, driver_data)
    return DriverResponse.model_validate(result["driver"])


@router.delete(
    "/{driver_id}",
    response_model=MessageResponse,
    summary="Delete driver",
    description="Delete a driver. Drivers with an active rental or rental history cannot be deleted. Admin only.",
)
async def delete_driver(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    return await driver_service.delete_driver(driver_id)


@router.post(
    "/{driver_id}/vevo-check",
    response_model=DriverResponse,
    summary="Run VEVO check",
    description="Re-run the work-rights check against the passport on file. A denial blocks the driver. Admin only.",
)
async def run_vevo_check(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.run_vevo_check(driver_id)
    return DriverResponse.model_validate(result["driver"])


@router.post(
    "/{driver_id}/approve",
    response_model=DriverResponse,
    summary="Approve driver",
    description="Set the driver ACTIVE. Drivers with a DENIED VEVO status can never be approved. Admin only.",
)
async def approve_driver(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.approve_driver(driver_id)
    return DriverResponse.model_validate(result["driver"])


@router.post(
    "/{driver_id}/block",
    response_model=DriverResponse,
    summary="Block driver",
    description="Set the driver BLOCKED. Admin only.",
)
async def block_driver(
    driver_id: UUID,
    block_data: Optional[BlockDriverRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
):
    driver_service = DriverService(db)
    result = await driver_service.block_driver(driver_id, reason=block_data.reason if block_data else None)
    return DriverResponse.model_validate(result["driver"])
