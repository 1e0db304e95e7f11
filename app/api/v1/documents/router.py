from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.documents.schemas import DocumentResponse
from app.api.v1.documents.service import DocumentService
from app.core.deps import get_db, get_current_active_user
from app.models.user import User

router = APIRouter()


@router.get(
    "/rental-agreement/{rental_id}",
    response_model=DocumentResponse,
    summary="Rental agreement",
    description="Agreement terms for a rental. Drivers may only fetch their own.",
)
async def get_rental_agreement(
    rental_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = DocumentService(db, current_user)
    return await service.get_rental_agreement(rental_id)


@router.get(
    "/{doc_type}/{vehicle_id}",
    response_model=DocumentResponse,
    summary="Vehicle document",
    description=(
        "Registration (rego), CTP green slip (ctp) or pink slip (pink-slip) for a vehicle. "
        "Drivers may only fetch documents for the vehicle on their active rental."
    ),
)
async def get_vehicle_document(
    doc_type: str,
    vehicle_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = DocumentService(db, current_user)
    return await service.get_vehicle_document(doc_type, vehicle_id)
