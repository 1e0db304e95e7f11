from typing import Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field


class GenerateLinkRequest(BaseModel):
    email: EmailStr = Field(..., description="Email the onboarding link is issued to")


class GenerateLinkResponse(BaseModel):
    message: str
    link: str
    expires_at: datetime
    email_sent: bool


class ValidateTokenResponse(BaseModel):
    valid: bool
    email: str
    expires_at: datetime


class SubmitApplicationRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Onboarding token from the magic link")
    name: str = Field(..., min_length=1, description="Applicant full name")
    phone: Optional[str] = Field(None, description="Contact phone")
    license_no: str = Field(..., min_length=1, description="Driver licence number")
    license_expiry: Optional[date] = Field(None, description="Driver licence expiry date")
    passport_no: str = Field(..., min_length=1, description="Passport number for the VEVO work-rights check")


class SubmittedDriver(BaseModel):
    id: UUID
    name: str
    email: str
    vevo_status: str
    status: str

    class Config:
        from_attributes = True


class SubmitApplicationResponse(BaseModel):
    message: str
    driver: SubmittedDriver


class VerifyPassportRequest(BaseModel):
    passport_no: str = Field(..., min_length=1, description="Passport number to check")


class VerifyPassportResponse(BaseModel):
    passport_no: str
    vevo_status: str
    checked_at: datetime
