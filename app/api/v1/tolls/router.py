from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.tolls.schemas import TollChargeResponse, TollUploadResponse
from app.api.v1.tolls.service import TollService
from app.core.deps import get_db, get_current_active_admin_user
from app.core.exceptions import AppException
from app.core.utils import to_naive_utc

router = APIRouter(dependencies=[Depends(get_current_active_admin_user)])


@router.post(
    "/upload",
    response_model=TollUploadResponse,
    summary="Upload toll statement",
    description=(
        "CSV with Plate, Date, Amount and optional Location columns. Charges are linked to the "
        "PENDING invoice of the vehicle's active rental when there is one. Admin only."
    ),
)
async def upload_tolls(
    file: UploadFile = File(..., description="Toll statement CSV"),
    db: AsyncSession = Depends(get_db),
):
    if not file.filename:
        AppException().raise_400("No file uploaded")
    content = await file.read()
    service = TollService(db)
    return await service.import_tolls(content)


@router.get(
    "/",
    response_model=List[TollChargeResponse],
    summary="Get toll charges",
    description="Toll charges, newest first. Filter by plate and date range. Admin only.",
)
async def get_tolls(
    plate: Optional[str] = Query(None, description="Filter by plate"),
    start_date: Optional[datetime] = Query(None, description="Charges on or after this time"),
    end_date: Optional[datetime] = Query(None, description="Charges on or before this time"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    db: AsyncSession = Depends(get_db),
):
    service = TollService(db)
    tolls = await service.get_tolls(
        plate=plate,
        start_date=to_naive_utc(start_date) if start_date else None,
        end_date=to_naive_utc(end_date) if end_date else None,
        skip=skip,
        limit=limit,
    )
    return [TollChargeResponse.model_validate(toll) for toll in tolls]
