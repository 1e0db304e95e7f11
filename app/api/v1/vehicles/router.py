from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.vehicles.schemas import (
    ComplianceCheckResponse,
    CreateVehicleRequest,
    MessageResponse,
    UpdateVehicleRequest,
    VehicleAlertResponse,
    VehicleDetailResponse,
    VehicleResponse,
    VehicleWithComplianceResponse,
)
from app.api.v1.vehicles.service import VehicleService
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


def _with_compliance(item: dict) -> VehicleWithComplianceResponse:
    return VehicleWithComplianceResponse(
        **VehicleResponse.model_validate(item["vehicle"]).model_dump(),
        compliance=item["compliance"],
        current_driver=item["current_driver"],
    )


def _detail(result: dict) -> VehicleDetailResponse:
    return VehicleDetailResponse(
        **VehicleResponse.model_validate(result["vehicle"]).model_dump(),
        compliance=result["compliance"],
        current_driver=result["current_driver"],
        alerts=[VehicleAlertResponse.model_validate(alert) for alert in result["alerts"]],
        rental_count=result["rental_count"],
    )


@router.post(
    "/",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new vehicle",
    description="Add a vehicle to the fleet. New vehicles always start as DRAFT. Admin only.",
)
async def create_vehicle(
    vehicle_data: CreateVehicleRequest,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    result = await vehicle_service.create_vehicle(vehicle_data)
    return VehicleResponse.model_validate(result["vehicle"])


@router.get(
    "/",
    response_model=List[VehicleWithComplianceResponse],
    summary="Get all vehicles",
    description="List vehicles with rego/CTP/pink slip traffic lights and the current driver. Admin only.",
)
async def get_all_vehicles(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    status: Optional[str] = Query(None, description="Filter by vehicle status (DRAFT/AVAILABLE/RENTED/SUSPENDED)"),
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    result = await vehicle_service.get_all_vehicles(skip=skip, limit=limit, status=status)
    return [_with_compliance(item) for item in result["vehicles"]]


@router.get(
    "/vin/{vin}",
    response_model=VehicleDetailResponse,
    summary="Get vehicle by VIN",
    description="Retrieve a specific vehicle by its VIN. Admin only.",
)
async def get_vehicle_by_vin(
    vin: str,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    return _detail(await vehicle_service.get_vehicle_by_vin(vin))


@router.get(
    "/{vehicle_id}",
    response_model=VehicleDetailResponse,
    summary="Get vehicle by ID",
    description="Retrieve a vehicle with its compliance lights and unresolved alerts. Admin only.",
)
async def get_vehicle_by_id(
    vehicle_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    return _detail(await vehicle_service.get_vehicle_by_id(vehicle_id))


@router.put(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Update vehicle",
    description="Update a vehicle. Compliance is re-checked after every update. Admin only.",
)
async def update_vehicle(
    vehicle_id: UUID,
    vehicle_data: UpdateVehicleRequest,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    result = await vehicle_service.update_vehicle(vehicle_id, vehicle_data)
    return VehicleResponse.model_validate(result["vehicle"])


@router.patch(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Partially update vehicle",
    description="Partially update a vehicle. Admin only.",
)
async def patch_vehicle(
    vehicle_id: UUID,
    vehicle_data: UpdateVehicleRequest,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    result = await vehicle_service.update_vehicle(vehicle_id, vehicle_data)
    return VehicleResponse.model_validate(result["vehicle"])


@router.delete(
    "/{vehicle_id}",
    response_model=MessageResponse,
    summary="Delete vehicle",
    description="Delete a vehicle. Vehicles with an active rental or rental history cannot be deleted. Admin only.",
)
async def delete_vehicle(
    vehicle_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    return await vehicle_service.delete_vehicle(vehicle_id)


@router.post(
    "/{vehicle_id}/check-compliance",
    response_model=ComplianceCheckResponse,
    summary="Check vehicle compliance",
    description="Re-evaluate rego/CTP/pink slip against today and suspend the vehicle if any has expired. Admin only.",
)
async def check_compliance(
    vehicle_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    vehicle_service = VehicleService(db)
    result = await vehicle_service.validate_compliance(vehicle_id)
    return ComplianceCheckResponse(
        is_compliant=result["is_compliant"],
        issues=result["issues"],
        vehicle=VehicleResponse.model_validate(result["vehicle"]),
    )
