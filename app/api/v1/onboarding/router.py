from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.onboarding.schemas import (
    GenerateLinkRequest,
    GenerateLinkResponse,
    SubmitApplicationRequest,
    SubmitApplicationResponse,
    SubmittedDriver,
    ValidateTokenResponse,
    VerifyPassportRequest,
    VerifyPassportResponse,
)
from app.api.v1.onboarding.service import OnboardingService
from app.core.deps import get_db, get_current_active_admin_user

router = APIRouter()


@router.post(
    "/generate-link",
    response_model=GenerateLinkResponse,
    summary="Generate onboarding link",
    description="Issue a single-use magic link for a prospective driver and email it when mail is configured. Admin only.",
    dependencies=[Depends(get_current_active_admin_user)],
)
async def generate_link(
    data: GenerateLinkRequest,
    db: AsyncSession = Depends(get_db),
):
    service = OnboardingService(db)
    return await service.generate_link(data.email)


@router.get(
    "/validate/{token}",
    response_model=ValidateTokenResponse,
    summary="Validate onboarding token",
    description="404 for an unknown token, 400 when it has been used or has expired. Public.",
)
async def validate_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    service = OnboardingService(db)
    return await service.validate_token(token)


@router.post(
    "/submit",
    response_model=SubmitApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit driver application",
    description=(
        "Create a PENDING_APPROVAL driver from an onboarding token. A DENIED VEVO result consumes "
        "the token and rejects the application with 403. Public."
    ),
)
async def submit_application(
    application: SubmitApplicationRequest,
    db: AsyncSession = Depends(get_db),
):
    service = OnboardingService(db)
    result = await service.submit_application(application)
    return SubmitApplicationResponse(
        message=result["message"],
        driver=SubmittedDriver.model_validate(result["driver"]),
    )


@router.post(
    "/verify",
    response_model=VerifyPassportResponse,
    summary="Verify passport",
    description="Standalone VEVO work-rights check. Nothing is stored. Public.",
)
async def verify_passport(
    data: VerifyPassportRequest,
    db: AsyncSession = Depends(get_db),
):
    service = OnboardingService(db)
    return service.verify_passport(data.passport_no)
