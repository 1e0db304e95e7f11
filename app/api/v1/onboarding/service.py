"""
Token-gated driver self-registration.

An admin issues a single-use magic link for an email address. The applicant validates the token,
then submits licence and passport details. The VEVO check runs on submission: a denial consumes the
token and rejects the application without creating a driver; otherwise a PENDING_APPROVAL driver is
created and the token consumed in the same commit.
"""
from typing import Optional
from datetime import datetime, timedelta
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from app.api.v1.drivers.service import DriverService
from app.api.v1.onboarding.schemas import SubmitApplicationRequest
from app.core.config import settings
from app.core.email import send_onboarding_link_email
from app.core.exceptions import AppException
from app.core.security import create_onboarding_token
from app.core.vevo_client import VevoClient
from app.models.driver import Driver
from app.models.onboarding_token import OnboardingToken
from app.models.enums import DriverStatus, VevoStatus


class OnboardingService:
    def __init__(self, db: AsyncSession, vevo_client: Optional[VevoClient] = None):
        self.db = db
        self.driver_service = DriverService(db, vevo_client=vevo_client)
        self.logger = logging.getLogger(__name__)

    async def _get_token(self, token: str) -> Optional[OnboardingToken]:
        result = await self.db.execute(
            select(OnboardingToken)
            .where(OnboardingToken.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def generate_link(self, email: str) -> dict:
        existing = await self.db.execute(select(Driver.id).where(Driver.email == email))
        if existing.first():
            AppException().raise_400("Driver with this email already exists")

        expires_at = datetime.utcnow() + timedelta(hours=settings.ONBOARDING_TOKEN_TTL_HOURS)
        onboarding_token = OnboardingToken(
            id=uuid.uuid4(),
            token=create_onboarding_token(),
            email=email,
            expires_at=expires_at,
            used=False,
        )
        self.db.add(onboarding_token)
        await self.db.commit()

        link = f"{settings.CLIENT_URL.rstrip('/')}/onboarding/{onboarding_token.token}"
        email_sent = await send_onboarding_link_email(email, link, expires_at)
        self.logger.info("Onboarding link issued to %s (expires %s, emailed=%s)", email, expires_at, email_sent)
        return {
            "message": "Onboarding link generated",
            "link": link,
            "expires_at": expires_at,
            "email_sent": email_sent,
        }

    async def validate_token(self, token: str) -> dict:
        onboarding_token = await self._get_token(token)
        if not onboarding_token:
            AppException().raise_404("Invalid token")
        if onboarding_token.used:
            AppException().raise_400("Token already used")
        if datetime.utcnow() > onboarding_token.expires_at:
            AppException().raise_400("Token expired")
        return {"valid": True, "email": onboarding_token.email, "expires_at": onboarding_token.expires_at}

    async def submit_application(self, application: SubmitApplicationRequest) -> dict:
        onboarding_token = await self._get_token(application.token)
        if (
            not onboarding_token
            or onboarding_token.used
            or datetime.utcnow() > onboarding_token.expires_at
        ):
            AppException().raise_400("Invalid or expired token")

        now = datetime.utcnow()
        vevo_status = self.driver_service.check_vevo(application.passport_no)
        if vevo_status == VevoStatus.DENIED:
            onboarding_token.used = True
            onboarding_token.used_at = now
            await self.db.commit()
            self.logger.info("Onboarding application for %s rejected: VEVO denied", onboarding_token.email)
            AppException().raise_403("Application rejected - VEVO check failed")

        await self.driver_service.ensure_unique(onboarding_token.email, application.license_no)

        driver = Driver(
            id=uuid.uuid4(),
            name=application.name,
            email=onboarding_token.email,
            phone=application.phone,
            license_no=application.license_no,
            license_expiry=application.license_expiry,
            passport_no=application.passport_no,
            vevo_status=vevo_status.value,
            vevo_checked_at=now,
            status=DriverStatus.PENDING_APPROVAL.value,
            balance=0.0,
        )
        self.db.add(driver)
        onboarding_token.used = True
        onboarding_token.used_at = now
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Driver with this email or license number already exists")
        await self.db.refresh(driver)

        self.logger.info("Onboarding application submitted: driver %s (%s)", driver.id, driver.email)
        return {"message": "Application submitted successfully", "driver": driver}

    def verify_passport(self, passport_no: str) -> dict:
        return {
            "passport_no": passport_no,
            "vevo_status": self.driver_service.check_vevo(passport_no).value,
            "checked_at": datetime.utcnow(),
        }
