from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.rentals.schemas import (
    CreateRentalRequest,
    RentalDetailResponse,
    RentalDriver,
    RentalInvoice,
    RentalResponse,
    RentalVehicle,
)
from app.api.v1.rentals.service import RentalService, recent_invoices
from app.core.deps import get_db, get_current_active_admin_user
from app.models.rental import Rental

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


def rental_detail(rental: Rental, invoice_count: Optional[int] = None) -> RentalDetailResponse:
    invoices = recent_invoices(rental, invoice_count or len(rental.invoices))
    return RentalDetailResponse(
        **RentalResponse.model_validate(rental).model_dump(),
        driver=RentalDriver.model_validate(rental.driver),
        vehicle=RentalVehicle.model_validate(rental.vehicle),
        invoices=[RentalInvoice.model_validate(invoice) for invoice in invoices],
    )


@router.get(
    "/",
    response_model=List[RentalDetailResponse],
    summary="Get all rentals",
    description="List rentals with driver, vehicle and the three most recent invoices. Admin only.",
)
async def get_all_rentals(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    status: Optional[str] = Query(None, description="Filter by rental status (ACTIVE/COMPLETED)"),
    driver_id: Optional[UUID] = Query(None, description="Filter by driver"),
    vehicle_id: Optional[UUID] = Query(None, description="Filter by vehicle"),
    db: AsyncSession = Depends(get_db),
):
    rental_service = RentalService(db)
    result = await rental_service.get_all_rentals(
        skip=skip, limit=limit, status=status, driver_id=driver_id, vehicle_id=vehicle_id
    )
    return [rental_detail(rental, invoice_count=3) for rental in result["rentals"]]


@router.get(
    "/active",
    response_model=List[RentalDetailResponse],
    summary="Get active rentals",
    description="All ACTIVE rentals with their three most recent invoices. Admin only.",
)
async def get_active_rentals(db: AsyncSession = Depends(get_db)):
    rental_service = RentalService(db)
    result = await rental_service.get_active_rentals()
    return [rental_detail(rental, invoice_count=3) for rental in result["rentals"]]


@router.get(
    "/{rental_id}",
    response_model=RentalDetailResponse,
    summary="Get rental by ID",
    description="Retrieve a rental with driver, vehicle and all invoices. Admin only.",
)
async def get_rental_by_id(
    rental_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    rental_service = RentalService(db)
    result = await rental_service.get_rental_by_id(rental_id)
    return rental_detail(result["rental"])


@router.post(
    "/",
    response_model=RentalDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create rental",
    description=(
        "Assign an AVAILABLE, compliant vehicle to an ACTIVE driver. The rental and the vehicle's "
        "switch to RENTED are committed together. Admin only."
    ),
)
async def create_rental(
    rental_data: CreateRentalRequest,
    db: AsyncSession = Depends(get_db),
):
    rental_service = RentalService(db)
    result = await rental_service.create_rental(
        driver_id=rental_data.driver_id,
        vehicle_id=rental_data.vehicle_id,
        bond_amount=rental_data.bond_amount,
        weekly_rate=rental_data.weekly_rate,
        start_date=rental_data.start_date,
    )
    return rental_detail(result["rental"])


@router.post(
    "/{rental_id}/end",
    response_model=RentalDetailResponse,
    summary="End rental",
    description="Complete an ACTIVE rental and return the vehicle to AVAILABLE. Admin only.",
)
async def end_rental(
    rental_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    rental_service = RentalService(db)
    result = await rental_service.end_rental(rental_id)
    return rental_detail(result["rental"])
