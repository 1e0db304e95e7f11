from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterDriverRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Driver full name")
    email: EmailStr = Field(..., description="Driver email (unique)")
    phone: Optional[str] = Field(None, description="Contact phone")
    license_no: str = Field(..., min_length=1, description="Driver licence number (unique)")
    license_expiry: Optional[date] = Field(None, description="Driver licence expiry date")
    passport_no: Optional[str] = Field(None, description="Passport number used for the VEVO work-rights check")


class UpdateDriverRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, description="Driver full name")
    email: Optional[EmailStr] = Field(None, description="Driver email (unique)")
    phone: Optional[str] = Field(None, description="Contact phone")
    license_no: Optional[str] = Field(None, min_length=1, description="Driver licence number (unique)")
    license_expiry: Optional[date] = Field(None, description="Driver licence expiry date")
    passport_no: Optional[str] = Field(None, description="Passport number")
    status: Optional[str] = Field(None, description="PENDING_APPROVAL, ACTIVE, BLOCKED or INACTIVE")


class BlockDriverRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Why the driver is being blocked")


class DriverResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str]
    license_no: str
    license_expiry: Optional[date]
    passport_no: Optional[str]
    vevo_status: str
    vevo_checked_at: Optional[datetime]
    status: str
    balance: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DriverRentalVehicle(BaseModel):
    id: UUID
    plate: str
    make: str
    model: str

    class Config:
        from_attributes = True


class DriverInvoiceSummary(BaseModel):
    id: UUID
    amount: float
    due_date: datetime
    status: str
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True


class DriverRentalSummary(BaseModel):
    id: UUID
    status: str
    start_date: datetime
    end_date: Optional[datetime]
    weekly_rate: float
    bond_amount: float
    next_payment_date: datetime
    vehicle: DriverRentalVehicle
    invoices: List[DriverInvoiceSummary] = []

    class Config:
        from_attributes = True


class DriverDetailResponse(DriverResponse):
    rentals: List[DriverRentalSummary] = []


class DriverListItem(DriverResponse):
    active_rental_id: Optional[UUID] = None
    active_vehicle_plate: Optional[str] = None


class VevoCheckResponse(BaseModel):
    passport_no: str
    vevo_status: str
